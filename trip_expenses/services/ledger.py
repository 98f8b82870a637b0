"""Expense ledger: the persisted, ordered list of confirmed entries.

The whole list is written back to the store after every mutation. Store
failures are logged and swallowed; the in-memory list stays authoritative for
the life of the process.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Callable, Optional

from pydantic import ValidationError

from trip_expenses.calculator.cost import total_cost
from trip_expenses.domain.constants import EXPENSE_LIST_KEY, VEHICLE_CACHE_KEY, VEHICLE_CACHE_TTL_MS
from trip_expenses.domain.models import (
    CachedVehicle,
    ConfirmResult,
    CostBreakdown,
    Draft,
    ExpenseRecord,
    ValidationIssue,
    VehicleSelection,
)
from trip_expenses.infrastructure.cache import Clock, now_ms
from trip_expenses.infrastructure.logging import StructuredLogger, get_logger
from trip_expenses.infrastructure.store import KeyValueStore
from trip_expenses.shared.exceptions import StoreError
from trip_expenses.shared.messages import message_for

_logger = logging.getLogger("trip-expenses.store")


def new_expense_id() -> str:
    return f"expense-{uuid.uuid4().hex}"


def breakdown_for(draft: Draft) -> CostBreakdown:
    return total_cost(draft.route, draft.vehicle, draft.price_per_liter, draft.incidentals)


def _derive_price(record: ExpenseRecord) -> float:
    """Per-liter price implied by a stored record that predates ``pricePerLiter``."""
    if record.price_per_liter is not None:
        return record.price_per_liter
    if record.route is None or record.vehicle is None or record.route.distance_km <= 0:
        return 0.0
    return record.breakdown.fuel_cost * record.vehicle.efficiency_km_per_liter / record.route.distance_km


class ExpenseLedger:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        clock: Clock = now_ms,
        id_factory: Callable[[], str] = new_expense_id,
        audit: Optional[StructuredLogger] = None,
        vehicle_cache_ttl_ms: int = VEHICLE_CACHE_TTL_MS,
    ):
        self._store = store
        self._clock = clock
        self._id_factory = id_factory
        self._audit = audit or get_logger()
        self._vehicle_cache_ttl_ms = vehicle_cache_ttl_ms
        self._records: list[ExpenseRecord] = []
        self.load()

    # ── persistence ──────────────────────────────────

    def load(self) -> list[ExpenseRecord]:
        """Replace the in-memory list with the stored one, skipping invalid entries."""
        self._records = []
        try:
            raw = self._store.get(EXPENSE_LIST_KEY)
        except StoreError as exc:
            _logger.error("Failed to read expense list: %s", exc)
            self._audit.error("store", str(exc), operation="load")
            return self.records
        if not raw:
            return self.records

        try:
            items = json.loads(raw)
        except json.JSONDecodeError as exc:
            _logger.error("Stored expense list is not valid JSON, starting empty: %s", exc)
            return self.records
        if not isinstance(items, list):
            _logger.error("Stored expense list is not a JSON array, starting empty")
            return self.records

        seen: set[str] = set()
        for index, item in enumerate(items):
            try:
                record = ExpenseRecord.model_validate(item)
            except ValidationError as exc:
                _logger.warning("Skipping invalid expense entry #%d: %s", index, exc.errors()[:1])
                continue
            if record.id in seen:
                _logger.warning("Skipping duplicate expense id %s", record.id)
                continue
            seen.add(record.id)
            self._records.append(record)
        return self.records

    def _persist(self) -> None:
        payload = json.dumps([r.to_json_dict() for r in self._records], ensure_ascii=False)
        try:
            self._store.set(EXPENSE_LIST_KEY, payload)
        except StoreError as exc:
            _logger.error("Failed to persist expense list (%d entries): %s", len(self._records), exc)
            self._audit.error("store", str(exc), operation="persist", entries=len(self._records))

    # ── queries ──────────────────────────────────────

    @property
    def records(self) -> list[ExpenseRecord]:
        return list(self._records)

    def get(self, record_id: str) -> Optional[ExpenseRecord]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def _index_of(self, record_id: str) -> int:
        for i, record in enumerate(self._records):
            if record.id == record_id:
                return i
        return -1

    # ── lifecycle ────────────────────────────────────

    def confirm(self, draft: Draft) -> ConfirmResult:
        """Create a record from ``draft`` or, when it carries ``editing_id``, replace that one in place."""
        breakdown = breakdown_for(draft)
        if breakdown.total == 0:
            return ConfirmResult(
                accepted=False,
                reason=ValidationIssue(code="zero_total", message=message_for("zero_total"), field="breakdown"),
            )

        record_id = draft.editing_id or self._id_factory()
        record = ExpenseRecord(
            id=record_id,
            date=draft.date,
            breakdown=breakdown,
            route=draft.route,
            vehicle=draft.vehicle,
            price_per_liter=draft.price_per_liter if draft.route and draft.vehicle else None,
            incidentals=draft.incidentals.model_copy(deep=True),
            form_state=draft.form_state.model_copy(deep=True) if draft.form_state else None,
            memo=draft.memo,
        )

        index = self._index_of(record_id)
        if index >= 0:
            self._records[index] = record
        else:
            self._records.append(record)
        self._persist()
        if record.vehicle is not None:
            self.remember_vehicle(record.vehicle)

        self._audit.record_confirmed(record_id, updated=index >= 0, total=breakdown.total)
        return ConfirmResult(accepted=True, record=record)

    def edit(self, record_id: str) -> Optional[Draft]:
        record = self.get(record_id)
        if record is None:
            return None
        return Draft(
            date=record.date,
            route=record.route,
            vehicle=record.vehicle,
            price_per_liter=_derive_price(record),
            incidentals=record.incidentals.model_copy(deep=True),
            form_state=record.form_state.model_copy(deep=True) if record.form_state else None,
            memo=record.memo,
            editing_id=record.id,
        )

    def delete(self, record_id: str) -> bool:
        index = self._index_of(record_id)
        if index < 0:
            return False
        del self._records[index]
        self._persist()
        self._audit.record_deleted(record_id)
        return True

    def delete_all(self) -> int:
        count = len(self._records)
        self._records = []
        self._persist()
        self._audit.records_cleared(count)
        return count

    # ── last-used vehicle ────────────────────────────

    def remember_vehicle(self, vehicle: VehicleSelection) -> None:
        entry = CachedVehicle(vehicle=vehicle, timestamp=self._clock())
        try:
            self._store.set(VEHICLE_CACHE_KEY, json.dumps(entry.to_json_dict(), ensure_ascii=False))
        except StoreError as exc:
            _logger.warning("Failed to cache last-used vehicle: %s", exc)

    def last_used_vehicle(self) -> Optional[VehicleSelection]:
        """The cached vehicle if written within the freshness window, else ``None``."""
        try:
            raw = self._store.get(VEHICLE_CACHE_KEY)
        except StoreError as exc:
            _logger.warning("Failed to read vehicle cache: %s", exc)
            return None
        if not raw:
            return None
        try:
            entry = CachedVehicle.model_validate_json(raw)
        except ValidationError as exc:
            _logger.warning("Ignoring unreadable vehicle cache: %s", exc.errors()[:1])
            return None
        if self._clock() - entry.timestamp >= self._vehicle_cache_ttl_ms:
            return None
        return entry.vehicle


__all__ = ["ExpenseLedger", "breakdown_for", "new_expense_id"]
