import pytest

from trip_expenses.domain.enums import FuelType
from trip_expenses.domain.models import (
    AddressSearch,
    Draft,
    ExpenseRecord,
    FormState,
    IncidentalExpenses,
    RouteCandidate,
    VehicleSelection,
)
from trip_expenses.services.export_projection import (
    default_date_range,
    project,
    project_row,
    validate_export_request,
)
from trip_expenses.services.ledger import breakdown_for


def _record(record_id, date, *, route=None, vehicle=None, form_state=None, memo="", **incidentals):
    draft = Draft(
        date=date,
        route=route,
        vehicle=vehicle,
        price_per_liter=1850,
        incidentals=IncidentalExpenses(**incidentals),
    )
    return ExpenseRecord(
        id=record_id,
        date=date,
        breakdown=breakdown_for(draft),
        route=route,
        vehicle=vehicle,
        price_per_liter=1850,
        incidentals=draft.incidentals,
        form_state=form_state,
        memo=memo,
    )


def test_row_formatting(route_250, sonata):
    record = _record(
        "r1",
        "2024-03-04",
        route=route_250,
        vehicle=sonata,
        form_state=FormState(route=AddressSearch(departure="서울역", destination="부산역")),
        memo="고객 미팅",
        meals=12000,
    )

    row = project_row(record)

    assert row.departure == "서울역"
    assert row.destination == "부산역"
    assert row.distance == "250km"
    assert row.duration == "180분"
    assert row.toll_fee == "₩15,000"
    assert row.vehicle == "Hyundai Sonata"
    assert row.fuel_cost == "₩37,000"
    assert row.parking == "-"
    assert row.meals == "₩12,000"
    assert row.total == "₩64,000"
    assert row.memo == "고객 미팅"


def test_row_for_incidental_only_manual_entry():
    row = project_row(_record("r2", "2024-03-04", accommodation=90000))

    assert row.departure == ""
    assert row.distance == "-"
    assert row.duration == "-"
    assert row.fuel_cost == "-"
    assert row.vehicle == ""
    assert row.total == "₩90,000"


def test_manual_vehicle_is_not_named():
    manual = VehicleSelection(efficiency_km_per_liter=11.1, fuel_type=FuelType.DIESEL)
    route = RouteCandidate(distance_km=12.5, duration_min=20)

    row = project_row(_record("r3", "2024-03-04", route=route, vehicle=manual))

    assert row.vehicle == ""
    assert row.distance == "12.5km"


def test_filter_is_inclusive_and_excludes_later_records():
    records = [
        _record("a", "2024-03-01", meals=1000),
        _record("b", "2024-03-15", meals=2000),
        _record("c", "2024-03-31", meals=3000),
        _record("d", "2024-04-01", meals=4000),
    ]

    projection = project(records, "홍길동", "2024-04-02", "2024-03-01", "2024-03-31")

    assert [row.date for row in projection.rows] == ["2024-03-01", "2024-03-15", "2024-03-31"]
    assert projection.summary.total_items == 3
    assert projection.summary.total_amount == 6000
    assert projection.summary.author == "홍길동"


def test_rows_keep_ledger_order():
    records = [_record("x", "2024-03-09", other=100), _record("y", "2024-03-02", other=200)]

    projection = project(records, "kim", "2024-03-10", "2024-03-01", "2024-03-10")

    assert [row.date for row in projection.rows] == ["2024-03-09", "2024-03-02"]


def test_validate_export_request():
    assert validate_export_request("  ", "2024-03-01", "2024-03-31").code == "missing_author"
    assert validate_export_request("kim", None, "2024-03-31").code == "missing_dates"
    assert validate_export_request("kim", "2024-03-01", "31/03/2024").code == "missing_dates"
    assert validate_export_request("kim", "2024-04-01", "2024-03-31").code == "invalid_range"
    assert validate_export_request("kim", "2024-03-01", "2024-03-01") is None


@pytest.mark.parametrize("value", ["20240331", "2024-W13-7", "2024-3-31", "2024-03-31T00:00"])
def test_export_range_requires_dashed_dates(value):
    assert validate_export_request("kim", "2024-03-01", value).code == "missing_dates"
    assert validate_export_request("kim", value, "2024-03-31").code == "missing_dates"


def test_created_date_must_be_dashed():
    issue = validate_export_request("kim", "2024-03-01", "2024-03-31", created_date="20240331")

    assert issue.code == "invalid_date"
    assert issue.field == "createdDate"
    assert validate_export_request("kim", "2024-03-01", "2024-03-31", created_date="2024-03-31") is None


def test_validation_messages_are_korean_only():
    issue = validate_export_request("", "2024-03-01", "2024-03-31")

    assert issue.message == "작성자를 입력해주세요."


def test_default_date_range():
    records = [_record("a", "2024-03-09", other=1), _record("b", "2024-02-20", other=1)]

    assert default_date_range(records) == ("2024-02-20", "2024-03-09")
    assert default_date_range([], lambda: "2024-05-05") == ("2024-05-05", "2024-05-05")
