"""Per-liter fuel prices with an explicit fallback chain.

``get_current_prices`` tries, in order: a fresh cached value, the provider,
the last value the provider gave (however old), and finally the fallback
constants. It never raises; provider failures are logged and skipped.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from trip_expenses.adapters.interfaces import FuelPriceTool
from trip_expenses.adapters.tool_factory import get_fuel_tool
from trip_expenses.domain.constants import FALLBACK_FUEL_PRICES, FUEL_PRICE_TTL_MS
from trip_expenses.domain.enums import FuelType, PriceSource
from trip_expenses.domain.models import FuelPrices
from trip_expenses.infrastructure.cache import Clock, now_ms
from trip_expenses.shared.exceptions import ToolError

_logger = logging.getLogger("trip-expenses.fuel")


def _fallback_prices(fetched_at: int) -> FuelPrices:
    return FuelPrices(**FALLBACK_FUEL_PRICES, fetched_at=fetched_at, source=PriceSource.FALLBACK)


class FuelPricing:
    def __init__(self, tool: Optional[FuelPriceTool] = None, *, clock: Clock = now_ms, ttl_ms: int = FUEL_PRICE_TTL_MS):
        self._tool = tool if tool is not None else get_fuel_tool()
        self._clock = clock
        self._ttl_ms = ttl_ms
        self._cached: Optional[FuelPrices] = None
        self._strategies: tuple[Callable[[], Optional[FuelPrices]], ...] = (
            self._from_fresh_cache,
            self._from_provider,
            self._from_stale_cache,
            self._from_fallback,
        )

    @property
    def cached(self) -> Optional[FuelPrices]:
        return self._cached

    def get_current_prices(self) -> FuelPrices:
        for strategy in self._strategies:
            prices = strategy()
            if prices is not None:
                return prices
        return self._from_fallback()

    def _from_fresh_cache(self) -> Optional[FuelPrices]:
        if self._cached is None:
            return None
        if self._clock() - self._cached.fetched_at >= self._ttl_ms:
            return None
        return self._cached.model_copy(update={"source": PriceSource.CACHE})

    def _from_provider(self) -> Optional[FuelPrices]:
        try:
            fetched = self._tool.fetch_prices()
            merged = dict(FALLBACK_FUEL_PRICES)
            for key, value in fetched.items():
                if key in merged and (value is not None or key == "premium_gasoline"):
                    merged[key] = value
            prices = FuelPrices(**merged, fetched_at=self._clock(), source=PriceSource.PROVIDER)
        except (ToolError, ValueError) as exc:
            _logger.warning("Fuel price provider failed, trying cached/fallback prices: %s", exc)
            return None
        self._cached = prices
        return prices

    def _from_stale_cache(self) -> Optional[FuelPrices]:
        if self._cached is None:
            return None
        return self._cached.model_copy(update={"source": PriceSource.STALE_CACHE})

    def _from_fallback(self) -> FuelPrices:
        return _fallback_prices(self._clock())

    def resolve_price(self, fuel_type: FuelType, manual_override: Optional[int] = None) -> int:
        """Per-liter price for ``fuel_type``; a positive manual override wins outright."""
        if manual_override is not None and manual_override > 0:
            return int(manual_override)
        return price_for(fuel_type, self.get_current_prices())


def price_for(fuel_type: FuelType, prices: FuelPrices) -> int:
    """0 for electric; otherwise the matching price, gasoline when absent or zero."""
    fuel_type = FuelType(fuel_type)
    if fuel_type is FuelType.ELECTRIC:
        return 0
    value = getattr(prices, fuel_type.value, None)
    return int(value or prices.gasoline)
