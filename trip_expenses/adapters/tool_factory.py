"""Concrete adapter selection."""

from __future__ import annotations

import logging

from trip_expenses.adapters.fuel import mock as mock_fuel
from trip_expenses.adapters.route import mock as mock_route
from trip_expenses.config.settings import resolve_fuel_provider, resolve_route_provider, route_mock_forced
from trip_expenses.security.redact import redact_sensitive

_logger = logging.getLogger("trip-expenses.tools")


def get_route_tool():
    """Naver adapter unless ``ROUTE_PROVIDER=mock``.

    Without credentials the Naver adapter raises ``KeyMissingError``; route
    search turns that into sample candidates plus a ``credentials_missing``
    notice instead of silently pretending the samples are real.
    """
    if route_mock_forced():
        return mock_route
    try:
        from trip_expenses.adapters.route import naver as naver_route

        return naver_route
    except ImportError as exc:
        _logger.warning("Failed to load naver route adapter, fallback to mock: %s", redact_sensitive(str(exc)))
    return mock_route


def get_fuel_tool():
    if resolve_fuel_provider() == "opinet":
        try:
            from trip_expenses.adapters.fuel import opinet as opinet_fuel

            return opinet_fuel
        except ImportError as exc:
            _logger.warning("Failed to load opinet adapter, fallback to mock: %s", redact_sensitive(str(exc)))
    return mock_fuel


def describe_active_tools() -> dict[str, str]:
    return {
        "route": resolve_route_provider(),
        "fuel": resolve_fuel_provider(),
    }


__all__ = ["get_route_tool", "get_fuel_tool", "describe_active_tools"]
