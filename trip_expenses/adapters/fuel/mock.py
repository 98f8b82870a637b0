"""Offline fuel-price adapter: returns the fallback constants."""

from __future__ import annotations

from typing import Optional

from trip_expenses.domain.constants import FALLBACK_FUEL_PRICES


def fetch_prices() -> dict[str, Optional[int]]:
    return dict(FALLBACK_FUEL_PRICES)
