"""Route search use case: input checks, provider call, fallback to samples."""

from __future__ import annotations

import logging
from typing import Optional

from trip_expenses.adapters.interfaces import RouteTool
from trip_expenses.adapters.route.mock import SAMPLE_ROUTES
from trip_expenses.adapters.tool_factory import get_route_tool
from trip_expenses.domain.models import RouteSearchResult
from trip_expenses.shared.exceptions import KeyMissingError, ToolError
from trip_expenses.shared.messages import message_for

_logger = logging.getLogger("trip-expenses.routes")


def _declined(code: str, routes=()) -> RouteSearchResult:
    return RouteSearchResult(routes=list(routes), error_code=code, message=message_for(code))


class RouteSearchService:
    def __init__(self, tool: Optional[RouteTool] = None):
        self._tool = tool if tool is not None else get_route_tool()

    def search(self, departure: str, destination: str) -> RouteSearchResult:
        start = (departure or "").strip()
        goal = (destination or "").strip()
        if not start or not goal:
            return _declined("missing_location")
        if start.casefold() == goal.casefold():
            return _declined("same_location")

        try:
            routes = self._tool.search_routes(start, goal)
        except KeyMissingError as exc:
            _logger.info("Directions credentials missing (%s); returning sample routes", exc.key_name)
            return _declined("credentials_missing", SAMPLE_ROUTES)
        except ToolError as exc:
            _logger.warning("Route search failed: %s", exc)
            return _declined("no_route")

        if not routes:
            return _declined("no_route")
        return RouteSearchResult(routes=list(routes))
