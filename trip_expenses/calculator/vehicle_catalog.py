"""Preset vehicle table and lookups.

Unknown brands or models never raise; lookups return empty lists or ``None``
so the caller can fall back to manual efficiency entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from trip_expenses.domain.enums import FuelType
from trip_expenses.domain.models import VehicleSelection

_G = FuelType.GASOLINE
_D = FuelType.DIESEL
_E = FuelType.ELECTRIC


@dataclass(frozen=True)
class VehicleVariant:
    fuel_type: FuelType
    efficiency: float

    def as_dict(self) -> dict:
        return {"fuelType": self.fuel_type.value, "efficiency": self.efficiency}


@dataclass(frozen=True)
class VehicleModel:
    variants: tuple[VehicleVariant, ...]
    default_fuel_type: FuelType = _G


def _m(*variants: tuple[FuelType, float], default: FuelType = _G) -> VehicleModel:
    return VehicleModel(tuple(VehicleVariant(f, e) for f, e in variants), default)


# Second variants of Sonata/Elantra/K5/K3 are the hybrids.
VEHICLE_DATA: dict[str, dict[str, VehicleModel]] = {
    "Hyundai": {
        "Sonata": _m((_G, 12.5), (_G, 18.2)),
        "Elantra": _m((_G, 14.2), (_G, 19.5)),
        "Kona": _m((_G, 13.8), (_E, 6.2)),
        "Tucson": _m((_G, 11.5)),
        "Santa Fe": _m((_G, 10.8)),
        "Palisade": _m((_G, 9.5)),
        "Avante": _m((_G, 14.5)),
        "Grandeur": _m((_G, 11.2)),
    },
    "Kia": {
        "K5": _m((_G, 12.3), (_G, 17.8)),
        "Sorento": _m((_G, 10.5)),
        "Sportage": _m((_G, 11.8)),
        "Telluride": _m((_G, 9.2)),
        "Carnival": _m((_G, 9.8)),
        "Seltos": _m((_G, 13.2)),
        "K3": _m((_G, 14.8), (_G, 20.1)),
        "EV6": _m((_E, 5.8), default=_E),
        "Niro": _m((_G, 19.2)),
    },
    "Genesis": {
        "G70": _m((_G, 10.5)),
        "G80": _m((_G, 9.8)),
        "G90": _m((_G, 8.5)),
        "GV70": _m((_G, 10.2)),
        "GV80": _m((_G, 9.5)),
        "GV90": _m((_G, 8.8)),
    },
    "SsangYong": {
        "Rexton": _m((_D, 9.2), default=_D),
        "Tivoli": _m((_G, 12.5)),
        "Korando": _m((_G, 11.8)),
    },
    "Renault": {
        "SM6": _m((_G, 12.0)),
        "QM6": _m((_G, 10.5)),
    },
}


def list_brands() -> list[str]:
    return list(VEHICLE_DATA)


def list_models(brand: str) -> list[str]:
    return list(VEHICLE_DATA.get(brand, {}))


def get_model(brand: str, model: str) -> Optional[VehicleModel]:
    return VEHICLE_DATA.get(brand, {}).get(model)


def list_variants(brand: str, model: str) -> list[VehicleVariant]:
    entry = get_model(brand, model)
    return list(entry.variants) if entry else []


def available_fuel_types(brand: str, model: str) -> list[FuelType]:
    """Distinct fuel types in variant order."""
    seen: list[FuelType] = []
    for variant in list_variants(brand, model):
        if variant.fuel_type not in seen:
            seen.append(variant.fuel_type)
    return seen


def _selection(brand: str, model: str, variant: VehicleVariant) -> VehicleSelection:
    return VehicleSelection(
        brand=brand,
        model=model,
        efficiency_km_per_liter=variant.efficiency,
        fuel_type=variant.fuel_type,
    )


def resolve(brand: str, model: str, fuel_type: Optional[FuelType] = None) -> Optional[VehicleSelection]:
    """First variant of the requested (or default) fuel type, else the first variant."""
    entry = get_model(brand, model)
    if entry is None or not entry.variants:
        return None
    wanted = FuelType(fuel_type) if fuel_type is not None else entry.default_fuel_type
    for variant in entry.variants:
        if variant.fuel_type == wanted:
            return _selection(brand, model, variant)
    return _selection(brand, model, entry.variants[0])


def resolve_variant(brand: str, model: str, index: int) -> Optional[VehicleSelection]:
    entry = get_model(brand, model)
    if entry is None or not entry.variants:
        return None
    if index < 0 or index >= len(entry.variants):
        index = 0
    return _selection(brand, model, entry.variants[index])


def variant_index_of(selection: VehicleSelection) -> int:
    """Position of ``selection`` in its catalog entry; 0 when not found."""
    for i, variant in enumerate(list_variants(selection.brand, selection.model)):
        if variant.fuel_type == selection.fuel_type and variant.efficiency == selection.efficiency_km_per_liter:
            return i
    return 0
