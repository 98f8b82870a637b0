"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from trip_expenses.application.route_search import RouteSearchService
from trip_expenses.application.session import DraftSession
from trip_expenses.calculator.fuel_pricing import FuelPricing
from trip_expenses.config.settings import fuel_price_ttl_ms, vehicle_cache_ttl_ms
from trip_expenses.infrastructure.cache import Clock, now_ms, route_cache
from trip_expenses.infrastructure.logging import get_logger
from trip_expenses.infrastructure.store import KeyValueStore, build_store
from trip_expenses.security.key_manager import get_key_manager
from trip_expenses.services.export_projection import today_iso
from trip_expenses.services.ledger import ExpenseLedger


@dataclass
class AppContext:
    store: KeyValueStore
    ledger: ExpenseLedger
    pricing: FuelPricing
    routes: RouteSearchService
    session: DraftSession
    today: Callable[[], str] = today_iso
    clock: Clock = now_ms
    cache: dict[str, Any] = field(default_factory=dict)
    key_manager: Any = None
    logger: Any = None


def make_app_context(
    *,
    store: KeyValueStore | None = None,
    clock: Clock = now_ms,
    today: Callable[[], str] = today_iso,
    fuel_tool=None,
    route_tool=None,
) -> AppContext:
    store = store if store is not None else build_store()
    logger = get_logger()
    pricing = FuelPricing(fuel_tool, clock=clock, ttl_ms=fuel_price_ttl_ms())
    return AppContext(
        store=store,
        ledger=ExpenseLedger(store, clock=clock, audit=logger, vehicle_cache_ttl_ms=vehicle_cache_ttl_ms()),
        pricing=pricing,
        routes=RouteSearchService(route_tool),
        session=DraftSession(pricing),
        today=today,
        clock=clock,
        cache={"route": route_cache},
        key_manager=get_key_manager(),
        logger=logger,
    )
