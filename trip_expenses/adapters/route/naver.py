"""Naver Cloud Directions 5 driving adapter.

Env: ``NAVER_CLIENT_ID`` / ``NAVER_CLIENT_SECRET``. ``start`` and ``goal``
are passed through as given (``"lon,lat"`` pairs for the gateway).
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from trip_expenses.domain.models import RouteCandidate
from trip_expenses.infrastructure.cache import make_cache_key, route_cache
from trip_expenses.security.http_client import SecureHttpClient
from trip_expenses.security.key_manager import get_key_manager
from trip_expenses.shared.exceptions import ToolError

DRIVING_URL = "https://naveropenapi.apigw.ntruss.com/map-direction/v1/driving"
ROUTE_OPTION = "trafast"

_logger = logging.getLogger("trip-expenses.routes")

_http = SecureHttpClient(tool_name="naver_route", max_retries=1)


def _round(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _parse_route(item: dict) -> Optional[RouteCandidate]:
    summary = item.get("summary") or {}
    distance_km = _round(float(summary.get("distance", 0)) / 1000)
    duration_min = _round(float(summary.get("duration", 0)) / 60000)
    if distance_km <= 0 or duration_min <= 0:
        return None
    return RouteCandidate(
        distance_km=distance_km,
        duration_min=duration_min,
        toll_fee_krw=int(summary.get("tollFare") or 0),
        path=[(float(p[0]), float(p[1])) for p in item.get("path") or [] if len(p) >= 2],
    )


def _parse_routes(data: dict) -> list[RouteCandidate]:
    if not isinstance(data, dict):
        raise ToolError("naver_route", "malformed directions payload")
    code = data.get("code", 0)
    if code not in (0, None):
        raise ToolError("naver_route", f"directions API returned code={code}: {data.get('message', '')}")

    route = data.get("route") or {}
    items = (route.get(ROUTE_OPTION) or []) if isinstance(route, dict) else None
    if not isinstance(items, list):
        raise ToolError("naver_route", "malformed directions payload")

    routes: list[RouteCandidate] = []
    for index, item in enumerate(items):
        try:
            candidate = _parse_route(item)
        except (ArithmeticError, AttributeError, IndexError, TypeError, ValueError) as exc:
            _logger.warning("Skipping malformed route candidate #%d: %s", index, exc)
            continue
        if candidate is not None:
            routes.append(candidate)
    return routes


def search_routes(departure: str, destination: str) -> list[RouteCandidate]:
    """Candidate driving routes, cached for 30 minutes per (start, goal)."""
    client_id, client_secret = get_key_manager().naver_credentials()

    cache_key = make_cache_key("naver_route", departure, destination, ROUTE_OPTION)
    cached = route_cache.get(cache_key)
    if cached is not None:
        return list(cached)

    data = _http.get(
        DRIVING_URL,
        params={"start": departure, "goal": destination, "option": ROUTE_OPTION},
        headers={
            "X-NCP-APIGW-API-KEY-ID": client_id,
            "X-NCP-APIGW-API-KEY": client_secret,
        },
    )
    routes = _parse_routes(data)
    route_cache.set(cache_key, tuple(routes))
    return routes
