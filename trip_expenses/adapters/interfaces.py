"""Provider protocols.

Adapters are plain modules exposing one function each; ``tool_factory``
hands back whichever module the environment selects.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from trip_expenses.domain.models import RouteCandidate


@runtime_checkable
class RouteTool(Protocol):
    def search_routes(self, departure: str, destination: str) -> list[RouteCandidate]: ...


@runtime_checkable
class FuelPriceTool(Protocol):
    def fetch_prices(self) -> dict[str, Optional[int]]:
        """Per-liter prices keyed ``gasoline``/``premium_gasoline``/``diesel``/``lpg``."""
        ...


__all__ = ["RouteTool", "FuelPriceTool"]
