"""Projection of ledger records into flat, display-formatted export rows."""

from __future__ import annotations

import datetime as dt
from typing import Callable, Iterable, Optional

from trip_expenses.calculator.cost import format_currency
from trip_expenses.domain.models import (
    AddressSearch,
    ExpenseRecord,
    ExportProjection,
    ExportRow,
    ExportSummary,
    ValidationIssue,
    is_iso_date,
)
from trip_expenses.shared.messages import message_for


def _amount(value: int) -> str:
    return format_currency(value) if value else "-"


def _number(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else str(value)


def project_row(record: ExpenseRecord) -> ExportRow:
    departure = destination = ""
    form_route = record.form_state.route if record.form_state else None
    if isinstance(form_route, AddressSearch):
        departure = form_route.departure
        destination = form_route.destination

    vehicle = ""
    if record.vehicle is not None and not record.vehicle.is_manual:
        vehicle = f"{record.vehicle.brand} {record.vehicle.model}"

    b = record.breakdown
    return ExportRow(
        date=record.date,
        departure=departure,
        destination=destination,
        distance=f"{_number(record.route.distance_km)}km" if record.route else "-",
        duration=f"{_number(record.route.duration_min)}분" if record.route else "-",
        toll_fee=_amount(b.toll_fee),
        vehicle=vehicle,
        fuel_cost=_amount(b.fuel_cost),
        parking=_amount(b.parking),
        meals=_amount(b.meals),
        accommodation=_amount(b.accommodation),
        other=_amount(b.other),
        total=format_currency(b.total),
        memo=record.memo or "",
    )


def project(
    records: Iterable[ExpenseRecord],
    author: str,
    created_date: str,
    start_date: str,
    end_date: str,
) -> ExportProjection:
    """Rows for records dated within ``[start_date, end_date]`` (ISO strings, inclusive), in ledger order."""
    selected = [r for r in records if start_date <= r.date <= end_date]
    return ExportProjection(
        rows=[project_row(r) for r in selected],
        summary=ExportSummary(
            author=author,
            created_date=created_date,
            start_date=start_date,
            end_date=end_date,
            total_items=len(selected),
            total_amount=sum(r.breakdown.total for r in selected),
        ),
    )


def validate_export_request(
    author: str,
    start_date: Optional[str],
    end_date: Optional[str],
    created_date: Optional[str] = None,
) -> Optional[ValidationIssue]:
    """``None`` when the request may proceed, otherwise the first problem found."""
    if not (author or "").strip():
        return ValidationIssue(code="missing_author", message=message_for("missing_author"), field="author")
    if not start_date or not end_date:
        return ValidationIssue(code="missing_dates", message=message_for("missing_dates"), field="startDate")
    for name, value in (("startDate", start_date), ("endDate", end_date)):
        if not is_iso_date(value):
            return ValidationIssue(code="missing_dates", message=message_for("missing_dates"), field=name)
    if created_date and not is_iso_date(created_date):
        return ValidationIssue(code="invalid_date", message=message_for("invalid_date"), field="createdDate")
    if start_date > end_date:
        return ValidationIssue(code="invalid_range", message=message_for("invalid_range"), field="startDate")
    return None


def today_iso() -> str:
    return dt.date.today().isoformat()


def default_date_range(
    records: Iterable[ExpenseRecord],
    today: Callable[[], str] = today_iso,
) -> tuple[str, str]:
    dates = sorted(r.date for r in records)
    if not dates:
        current = today()
        return current, current
    return dates[0], dates[-1]


__all__ = ["default_date_range", "project", "project_row", "validate_export_request"]
