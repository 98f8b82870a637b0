"""Pydantic domain models.

JSON field names are camelCase (``distanceKm``, ``fuelCost``...) so persisted
lists keep the layout the browser build wrote; Python code uses snake_case.
"""

from __future__ import annotations

import datetime as dt
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from trip_expenses.domain.enums import FuelType, IncidentalCategory, PriceSource


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class RouteCandidate(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    distance_km: float = Field(gt=0)
    duration_min: float = Field(gt=0)
    toll_fee_krw: int = Field(default=0, ge=0)
    path: Optional[list[tuple[float, float]]] = None


class VehicleSelection(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    brand: str = ""
    model: str = ""
    efficiency_km_per_liter: float = Field(gt=0)
    fuel_type: FuelType = FuelType.GASOLINE

    @property
    def is_manual(self) -> bool:
        return not self.brand and not self.model

    @property
    def display_name(self) -> str:
        return f"{self.brand} {self.model}".strip()


class IncidentalToggle(CamelModel):
    enabled: bool = False
    amount: int = Field(default=0, ge=0)

    @property
    def contribution(self) -> int:
        return self.amount if self.enabled else 0


class IncidentalExpenses(CamelModel):
    parking: int = Field(default=0, ge=0)
    meals: int = Field(default=0, ge=0)
    accommodation: int = Field(default=0, ge=0)
    other: int = Field(default=0, ge=0)

    @classmethod
    def from_toggles(cls, toggles: dict[IncidentalCategory, IncidentalToggle]) -> "IncidentalExpenses":
        """A category that is missing or switched off contributes exactly 0."""
        amounts = {}
        for category in IncidentalCategory:
            toggle = toggles.get(category)
            amounts[category.value] = toggle.contribution if toggle is not None else 0
        return cls(**amounts)

    def total(self) -> int:
        return self.parking + self.meals + self.accommodation + self.other


class CostBreakdown(CamelModel):
    fuel_cost: int = 0
    toll_fee: int = 0
    parking: int = 0
    meals: int = 0
    accommodation: int = 0
    other: int = 0
    total: int = 0

    @model_validator(mode="after")
    def _total_is_sum(self) -> "CostBreakdown":
        expected = (
            self.fuel_cost + self.toll_fee + self.parking + self.meals + self.accommodation + self.other
        )
        if self.total != expected:
            raise ValueError(f"total {self.total} does not match component sum {expected}")
        return self


# --- form state -------------------------------------------------------------


class AddressSearch(CamelModel):
    mode: Literal["search"] = "search"
    departure: str = ""
    destination: str = ""
    selected_index: int = Field(default=0, ge=0)


class ManualRoute(CamelModel):
    mode: Literal["manual"] = "manual"
    distance_km: float = Field(default=0, ge=0)
    duration_min: float = Field(default=0, ge=0)
    toll_fee_krw: int = Field(default=0, ge=0)

    def to_candidate(self) -> Optional[RouteCandidate]:
        if self.distance_km <= 0 or self.duration_min <= 0:
            return None
        return RouteCandidate(
            distance_km=self.distance_km,
            duration_min=self.duration_min,
            toll_fee_krw=self.toll_fee_krw,
        )


class CatalogVehicle(CamelModel):
    mode: Literal["catalog"] = "catalog"
    brand: str
    model: str
    variant_index: int = Field(default=0, ge=0)


class ManualVehicle(CamelModel):
    mode: Literal["manual"] = "manual"
    efficiency_km_per_liter: float = Field(default=0, ge=0)
    fuel_type: FuelType = FuelType.GASOLINE

    def to_selection(self) -> Optional[VehicleSelection]:
        if self.efficiency_km_per_liter <= 0:
            return None
        return VehicleSelection(efficiency_km_per_liter=self.efficiency_km_per_liter, fuel_type=self.fuel_type)


RouteInput = Annotated[Union[AddressSearch, ManualRoute], Field(discriminator="mode")]
VehicleInput = Annotated[Union[CatalogVehicle, ManualVehicle], Field(discriminator="mode")]


class FormState(CamelModel):
    route: Optional[RouteInput] = None
    vehicle: Optional[VehicleInput] = None
    manual_fuel_price: Optional[int] = Field(default=None, ge=0)
    incidental_toggles: dict[IncidentalCategory, IncidentalToggle] = Field(default_factory=dict)


# --- ledger -----------------------------------------------------------------


def is_iso_date(value) -> bool:
    """Only zero-padded ``YYYY-MM-DD``; ledger and export filters compare dates as strings."""
    if not isinstance(value, str):
        return False
    try:
        return dt.date.fromisoformat(value).isoformat() == value
    except ValueError:
        return False


def _check_iso_date(value: str) -> str:
    if not is_iso_date(value):
        raise ValueError(f"date must be YYYY-MM-DD, got {value!r}")
    return value


class Draft(CamelModel):
    """The in-progress entry. ``editing_id`` is set when it came from ``edit``."""

    date: str
    route: Optional[RouteCandidate] = None
    vehicle: Optional[VehicleSelection] = None
    price_per_liter: float = Field(default=0, ge=0)
    incidentals: IncidentalExpenses = Field(default_factory=IncidentalExpenses)
    form_state: Optional[FormState] = None
    memo: str = ""
    editing_id: Optional[str] = None

    @field_validator("date")
    @classmethod
    def _date_is_iso(cls, value: str) -> str:
        return _check_iso_date(value)


class DraftForm(CamelModel):
    """What a client submits to calculate or confirm.

    ``selected_route`` is the chosen candidate in search mode, and the route
    used when the form has no route input at all. ``selected_vehicle`` plays
    the same role for a form without a vehicle input.
    ``pinned_price`` keeps the per-liter price of a record being edited so an
    unchanged edit reproduces its breakdown; it applies only while the vehicle
    fuel type still equals ``pinned_fuel_type``.
    """

    date: str
    form_state: FormState = Field(default_factory=FormState)
    selected_route: Optional[RouteCandidate] = None
    selected_vehicle: Optional[VehicleSelection] = None
    memo: str = ""
    editing_id: Optional[str] = None
    pinned_price: Optional[float] = Field(default=None, ge=0)
    pinned_fuel_type: Optional[FuelType] = None

    @field_validator("date")
    @classmethod
    def _date_is_iso(cls, value: str) -> str:
        return _check_iso_date(value)


class ExpenseRecord(CamelModel):
    id: str
    date: str
    breakdown: CostBreakdown
    route: Optional[RouteCandidate] = None
    vehicle: Optional[VehicleSelection] = None
    price_per_liter: Optional[float] = None
    incidentals: IncidentalExpenses = Field(default_factory=IncidentalExpenses)
    form_state: Optional[FormState] = None
    memo: str = ""

    @field_validator("date")
    @classmethod
    def _date_is_iso(cls, value: str) -> str:
        return _check_iso_date(value)


class CachedVehicle(CamelModel):
    vehicle: Optional[VehicleSelection] = None
    timestamp: int


class ValidationIssue(CamelModel):
    code: str
    message: str = ""
    field: Optional[str] = None


class ConfirmResult(CamelModel):
    accepted: bool
    record: Optional[ExpenseRecord] = None
    reason: Optional[ValidationIssue] = None


class ErrorResponse(BaseModel):
    error: bool = True
    code: str = "UNKNOWN"
    message: str = ""
    details: list[str] = Field(default_factory=list)


# --- pricing / routes -------------------------------------------------------


class FuelPrices(CamelModel):
    gasoline: int
    premium_gasoline: Optional[int] = None
    diesel: int
    lpg: int
    fetched_at: int
    source: PriceSource = PriceSource.FALLBACK


class RouteSearchResult(CamelModel):
    routes: list[RouteCandidate] = Field(default_factory=list)
    error_code: Optional[str] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_code is None


# --- export -----------------------------------------------------------------


class ExportRow(CamelModel):
    date: str
    departure: str = ""
    destination: str = ""
    distance: str = "-"
    duration: str = "-"
    toll_fee: str = "-"
    vehicle: str = ""
    fuel_cost: str = "-"
    parking: str = "-"
    meals: str = "-"
    accommodation: str = "-"
    other: str = "-"
    total: str = ""
    memo: str = ""


class ExportSummary(CamelModel):
    author: str
    created_date: str
    start_date: str
    end_date: str
    total_items: int
    total_amount: int


class ExportProjection(CamelModel):
    rows: list[ExportRow] = Field(default_factory=list)
    summary: ExportSummary
