"""Cost breakdown arithmetic.

All amounts are whole won. Every component is rounded on its own before the
total is summed, so ``total`` always equals the sum of the shown figures.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Union

from trip_expenses.domain.constants import (
    CURRENCY_QUANTUM,
    CURRENCY_ROUNDING,
    CURRENCY_SYMBOL,
    ELECTRIC_KWH_PER_KM,
    ELECTRIC_PRICE_PER_KWH,
)
from trip_expenses.domain.enums import FuelType
from trip_expenses.domain.exceptions import InvalidExpenseInput
from trip_expenses.domain.models import CostBreakdown, IncidentalExpenses, RouteCandidate, VehicleSelection

Number = Union[int, float, Decimal]


def round_currency(value: Number) -> int:
    return int(Decimal(str(value)).quantize(CURRENCY_QUANTUM, rounding=CURRENCY_ROUNDING))


def fuel_cost(distance_km: Number, efficiency: Number, price_per_liter: Number, fuel_type: FuelType) -> int:
    """Fuel (or charging) cost for a trip.

    Electric vehicles use a flat 0.2 kWh/km at ₩150/kWh; ``efficiency`` and
    ``price_per_liter`` are ignored for them.
    """
    distance = Decimal(str(distance_km))
    if FuelType(fuel_type) is FuelType.ELECTRIC:
        return round_currency(distance * ELECTRIC_KWH_PER_KM * ELECTRIC_PRICE_PER_KWH)
    if efficiency is None or Decimal(str(efficiency)) <= 0:
        raise InvalidExpenseInput(f"efficiency must be > 0, got {efficiency!r}")
    liters = distance / Decimal(str(efficiency))
    return round_currency(liters * Decimal(str(price_per_liter)))


def total_cost(
    route: Optional[RouteCandidate],
    vehicle: Optional[VehicleSelection],
    price_per_liter: Number,
    incidentals: IncidentalExpenses,
) -> CostBreakdown:
    if route is None or vehicle is None:
        fuel = 0
        toll = 0
    else:
        fuel = fuel_cost(route.distance_km, vehicle.efficiency_km_per_liter, price_per_liter, vehicle.fuel_type)
        toll = round_currency(route.toll_fee_krw)

    return CostBreakdown(
        fuel_cost=fuel,
        toll_fee=toll,
        parking=incidentals.parking,
        meals=incidentals.meals,
        accommodation=incidentals.accommodation,
        other=incidentals.other,
        total=fuel + toll + incidentals.total(),
    )


def format_currency(amount: Number) -> str:
    """``12345 -> "₩12,345"``; negatives as ``"-₩12,345"``."""
    value = round_currency(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{abs(value):,}"


def parse_currency(text: str) -> int:
    """Inverse of ``format_currency`` for exported cells; ``"-"`` and blanks read as 0."""
    cleaned = (text or "").strip().replace(CURRENCY_SYMBOL, "").replace(",", "")
    if cleaned in ("", "-"):
        return 0
    return int(cleaned)
