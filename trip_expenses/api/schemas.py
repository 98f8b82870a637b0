"""API request/response models."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from trip_expenses.domain.enums import ExportFormat, FuelType
from trip_expenses.domain.models import (
    CamelModel,
    CostBreakdown,
    Draft,
    ExpenseRecord,
    VehicleSelection,
)


class HealthResponse(CamelModel):
    status: str


class RouteSearchRequest(CamelModel):
    departure: str = Field(default="", max_length=200, description="출발지 (start), passed to the directions API")
    destination: str = Field(default="", max_length=200, description="도착지 (goal)")


class BrandsResponse(CamelModel):
    brands: list[str]


class ModelsResponse(CamelModel):
    brand: str
    models: list[str]


class VariantItem(CamelModel):
    index: int
    fuel_type: FuelType
    efficiency: float


class VariantsResponse(CamelModel):
    brand: str
    model: str
    default_fuel_type: Optional[FuelType] = None
    fuel_types: list[FuelType] = Field(default_factory=list)
    variants: list[VariantItem] = Field(default_factory=list)


class CalculateResponse(CamelModel):
    breakdown: CostBreakdown
    draft: Draft


class ExpenseListResponse(CamelModel):
    records: list[ExpenseRecord]
    total_amount: int


class DeleteResponse(CamelModel):
    deleted: int


class LastUsedVehicleResponse(CamelModel):
    vehicle: Optional[VehicleSelection] = None


class ExportRequest(CamelModel):
    author: str = Field(default="", max_length=100)
    created_date: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    format: ExportFormat = ExportFormat.CSV


class ExportDefaultsResponse(CamelModel):
    created_date: str
    start_date: str
    end_date: str
