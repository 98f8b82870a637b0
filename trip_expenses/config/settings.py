"""Environment-driven provider and store resolution."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

from trip_expenses.domain.constants import FUEL_PRICE_TTL_MS, VEHICLE_CACHE_TTL_MS

_TRUTHY = {"1", "true", "yes", "on"}


def _is_enabled(value: str | None) -> bool:
    return bool(value and value.strip().lower() in _TRUTHY)


def _is_configured(value: str | None) -> bool:
    return bool(value and value.strip())


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return max(0, int(raw))
    except ValueError:
        return default


def naver_configured() -> bool:
    return _is_configured(os.getenv("NAVER_CLIENT_ID")) and _is_configured(os.getenv("NAVER_CLIENT_SECRET"))


def resolve_route_provider() -> str:
    """``naver`` or ``mock``. ``ROUTE_PROVIDER`` may force ``real`` or ``mock``; ``auto`` decides by credentials."""
    mode = str(os.getenv("ROUTE_PROVIDER") or "").strip().lower()
    if mode == "real":
        return "naver"
    if mode == "mock":
        return "mock"
    return "naver" if naver_configured() else "mock"


def route_mock_forced() -> bool:
    return str(os.getenv("ROUTE_PROVIDER") or "").strip().lower() == "mock"


def resolve_fuel_provider() -> str:
    return "opinet" if _is_configured(os.getenv("OPINET_API_KEY")) else "mock"


def resolve_store_backend() -> str:
    return str(os.getenv("EXPENSE_STORE") or "memory").strip().lower()


def fuel_price_ttl_ms() -> int:
    return _int_env("FUEL_PRICE_TTL_SECONDS", FUEL_PRICE_TTL_MS // 1000) * 1000


def vehicle_cache_ttl_ms() -> int:
    return _int_env("VEHICLE_CACHE_TTL_SECONDS", VEHICLE_CACHE_TTL_MS // 1000) * 1000


def pdf_font_path() -> str | None:
    value = os.getenv("PDF_FONT_PATH", "").strip()
    return value or None


def docs_enabled() -> bool:
    return _is_enabled(os.getenv("ENABLE_DOCS"))


def cors_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS", "")
    origins = [item.strip() for item in raw.split(",") if item.strip()]
    return origins or ["http://localhost:3000"]


class ProviderSnapshot(BaseModel):
    route_provider: str = Field(default="mock")
    fuel_provider: str = Field(default="mock")
    store_backend: str = Field(default="memory")
    pdf_unicode_font: bool = Field(default=False)


def resolve_provider_snapshot(*, store_backend: str | None = None) -> ProviderSnapshot:
    font = pdf_font_path()
    return ProviderSnapshot(
        route_provider=resolve_route_provider(),
        fuel_provider=resolve_fuel_provider(),
        store_backend=store_backend or resolve_store_backend(),
        pdf_unicode_font=bool(font and os.path.isfile(font)),
    )


__all__ = [
    "ProviderSnapshot",
    "resolve_provider_snapshot",
    "resolve_route_provider",
    "resolve_fuel_provider",
]
