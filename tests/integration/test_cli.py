import json

import pytest

from trip_expenses.adapters.route import mock as mock_route
from trip_expenses.application.context import make_app_context
from trip_expenses.cli import main
from trip_expenses.infrastructure.store import MemoryStore


class _Feed:
    def fetch_prices(self):
        return {"gasoline": 1850, "diesel": 1650, "lpg": 950}


@pytest.fixture
def ctx():
    return make_app_context(
        store=MemoryStore(),
        clock=lambda: 1_700_000_000_000,
        today=lambda: "2024-03-31",
        fuel_tool=_Feed(),
        route_tool=mock_route,
    )


def test_brands_and_models(ctx, capsys):
    assert main(["brands"], ctx) == 0
    assert "Genesis" in capsys.readouterr().out

    assert main(["models", "Hyundai"], ctx) == 0
    assert "Sonata: [0] gasoline 12.5, [1] gasoline 18.2" in capsys.readouterr().out

    assert main(["models", "Tesla"], ctx) == 1


def test_calc_prints_breakdown(ctx, capsys):
    code = main(
        ["calc", "--distance", "250", "--duration", "180", "--toll", "15000", "--brand", "Hyundai", "--model", "Sonata"],
        ctx,
    )

    assert code == 0
    assert json.loads(capsys.readouterr().out)["total"] == 52000
    assert ctx.ledger.records == []


def test_add_from_route_search_then_list(ctx, capsys):
    code = main(["add", "--from", "서울", "--to", "부산", "--route-index", "1", "--efficiency", "14", "--parking", "3000"], ctx)

    assert code == 0
    record = ctx.ledger.records[0]
    assert record.route.distance_km == 280
    assert record.breakdown.parking == 3000

    main(["list"], ctx)
    assert "(1건)" in capsys.readouterr().out


def test_add_zero_total_fails(ctx, capsys):
    assert main(["add"], ctx) == 1
    assert capsys.readouterr().err


def test_delete_and_clear(ctx, capsys):
    main(["add", "--meals", "9000"], ctx)
    main(["add", "--meals", "8000"], ctx)
    first = ctx.ledger.records[0].id

    assert main(["delete", first], ctx) == 0
    assert main(["delete", first], ctx) == 1
    assert main(["clear"], ctx) == 0
    assert ctx.ledger.records == []


def test_export_writes_file(ctx, tmp_path, capsys):
    main(["add", "--date", "2024-03-04", "--meals", "9000"], ctx)
    capsys.readouterr()

    code = main(["export", "--author", "홍길동", "--format", "xlsx", "--output", str(tmp_path)], ctx)

    assert code == 0
    target = tmp_path / "expenses_2024-03-04_2024-03-04.xlsx"
    assert target.exists()
    assert capsys.readouterr().out.strip() == str(target)


def test_export_without_author_fails(ctx, tmp_path):
    assert main(["export", "--output", str(tmp_path)], ctx) == 1


@pytest.mark.parametrize(
    "argv",
    [
        ["add", "--date", "2024/01/05", "--parking", "1000"],
        ["add", "--date", "20240105", "--parking", "1000"],
        ["add", "--distance", "250", "--duration", "180", "--toll", "-1"],
        ["calc", "--distance", "250", "--duration", "-5"],
        ["calc", "--efficiency", "14", "--fuel-price", "-1"],
    ],
)
def test_invalid_draft_input_is_declined(ctx, capsys, argv):
    assert main(argv, ctx) == 1
    assert capsys.readouterr().err.startswith("❌ ")
    assert ctx.ledger.records == []


def test_negative_route_index_is_rejected(ctx):
    with pytest.raises(SystemExit) as excinfo:
        main(["add", "--from", "서울", "--to", "부산", "--route-index", "-1", "--efficiency", "14"], ctx)

    assert excinfo.value.code == 2
    assert ctx.ledger.records == []


def test_export_with_compact_created_date_fails(ctx, tmp_path, capsys):
    main(["add", "--date", "2024-03-04", "--meals", "9000"], ctx)
    capsys.readouterr()

    assert main(["export", "--author", "kim", "--created", "20240331", "--output", str(tmp_path)], ctx) == 1
    assert "YYYY-MM-DD" in capsys.readouterr().err
    assert list(tmp_path.iterdir()) == []
