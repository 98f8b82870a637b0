"""Domain package exports."""

from trip_expenses.domain.constants import (
    ELECTRIC_KWH_PER_KM,
    ELECTRIC_PRICE_PER_KWH,
    EXPENSE_LIST_KEY,
    FALLBACK_FUEL_PRICES,
    VEHICLE_CACHE_KEY,
)
from trip_expenses.domain.enums import ExportFormat, FuelType, IncidentalCategory, PriceSource
from trip_expenses.domain.exceptions import DomainError, InvalidExpenseInput
from trip_expenses.domain.models import (
    AddressSearch,
    CachedVehicle,
    CatalogVehicle,
    ConfirmResult,
    CostBreakdown,
    Draft,
    DraftForm,
    ErrorResponse,
    ExpenseRecord,
    ExportProjection,
    ExportRow,
    ExportSummary,
    FormState,
    FuelPrices,
    IncidentalExpenses,
    IncidentalToggle,
    ManualRoute,
    ManualVehicle,
    RouteCandidate,
    RouteSearchResult,
    ValidationIssue,
    VehicleSelection,
)

__all__ = [
    "AddressSearch",
    "CachedVehicle",
    "CatalogVehicle",
    "ConfirmResult",
    "CostBreakdown",
    "DomainError",
    "Draft",
    "DraftForm",
    "ELECTRIC_KWH_PER_KM",
    "ELECTRIC_PRICE_PER_KWH",
    "EXPENSE_LIST_KEY",
    "ErrorResponse",
    "ExpenseRecord",
    "ExportFormat",
    "ExportProjection",
    "ExportRow",
    "ExportSummary",
    "FALLBACK_FUEL_PRICES",
    "FormState",
    "FuelPrices",
    "FuelType",
    "IncidentalCategory",
    "IncidentalExpenses",
    "IncidentalToggle",
    "InvalidExpenseInput",
    "ManualRoute",
    "ManualVehicle",
    "PriceSource",
    "RouteCandidate",
    "RouteSearchResult",
    "VEHICLE_CACHE_KEY",
    "ValidationIssue",
    "VehicleSelection",
]
