"""Deterministic route adapter used when no directions credentials are configured."""

from __future__ import annotations

from trip_expenses.domain.models import RouteCandidate

SAMPLE_ROUTES: tuple[RouteCandidate, ...] = (
    RouteCandidate(distance_km=250, duration_min=180, toll_fee_krw=15000, path=[]),
    RouteCandidate(distance_km=280, duration_min=150, toll_fee_krw=20000, path=[]),
    RouteCandidate(distance_km=300, duration_min=200, toll_fee_krw=12000, path=[]),
)


def search_routes(departure: str, destination: str) -> list[RouteCandidate]:
    return list(SAMPLE_ROUTES)
