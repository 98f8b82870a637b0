"""Domain enums."""

from enum import Enum


class FuelType(str, Enum):
    GASOLINE = "gasoline"
    DIESEL = "diesel"
    LPG = "lpg"
    ELECTRIC = "electric"


class IncidentalCategory(str, Enum):
    PARKING = "parking"
    MEALS = "meals"
    ACCOMMODATION = "accommodation"
    OTHER = "other"


class ExportFormat(str, Enum):
    CSV = "csv"
    XLSX = "xlsx"
    PNG = "png"
    PDF = "pdf"


class PriceSource(str, Enum):
    CACHE = "cache"
    PROVIDER = "provider"
    STALE_CACHE = "stale_cache"
    FALLBACK = "fallback"
