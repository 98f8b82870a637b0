"""FastAPI application."""

from __future__ import annotations

import logging
import os
import threading
import time

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from trip_expenses.api.schemas import (
    BrandsResponse,
    CalculateResponse,
    DeleteResponse,
    ExpenseListResponse,
    ExportDefaultsResponse,
    ExportRequest,
    HealthResponse,
    LastUsedVehicleResponse,
    ModelsResponse,
    RouteSearchRequest,
    VariantItem,
    VariantsResponse,
)
from trip_expenses.application.context import AppContext, make_app_context
from trip_expenses.calculator import vehicle_catalog
from trip_expenses.config.settings import cors_origins, docs_enabled, resolve_provider_snapshot
from trip_expenses.domain.exceptions import DomainError
from trip_expenses.domain.models import (
    DraftForm,
    ErrorResponse,
    ExpenseRecord,
    FuelPrices,
    RouteSearchResult,
    ValidationIssue,
)
from trip_expenses.security.key_manager import get_key_manager
from trip_expenses.services.export_formatter import render
from trip_expenses.services.export_projection import default_date_range, project, validate_export_request
from trip_expenses.shared.messages import message_for

_api_logger = logging.getLogger("trip-expenses.api")

load_dotenv()

app = FastAPI(
    title="trip-expenses",
    version="1.0.0",
    docs_url="/docs" if docs_enabled() else None,
    redoc_url=None,
)


# ── middleware ────────────────────────────────────


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client sliding window on the endpoints that call out or render files."""

    LIMITED_PATHS = ("/routes/search", "/exports")

    def __init__(self, app, max_requests: int = 60, window_seconds: int = 60):
        super().__init__(app)
        self._max = max_requests
        self._window = window_seconds
        self._counters: dict[str, list[float]] = {}

    async def dispatch(self, request: Request, call_next):
        if request.method != "POST" or request.url.path not in self.LIMITED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        hits = [t for t in self._counters.get(client_ip, []) if now - t < self._window]
        if len(hits) >= self._max:
            return JSONResponse(
                status_code=429,
                content=ErrorResponse(code="rate_limited", message="Too many requests, retry shortly").model_dump(),
            )
        hits.append(now)
        self._counters[client_ip] = hits
        return await call_next(request)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    RateLimitMiddleware,
    max_requests=int(os.getenv("RATE_LIMIT_MAX", "60")),
    window_seconds=int(os.getenv("RATE_LIMIT_WINDOW", "60")),
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)


# ── context ───────────────────────────────────────

_ctx: AppContext | None = None
_ctx_lock = threading.Lock()


def get_context() -> AppContext:
    global _ctx
    if _ctx is None:
        with _ctx_lock:
            if _ctx is None:
                _ctx = make_app_context()
    return _ctx


def _safe_log_exception(context: str, exc: Exception) -> None:
    _api_logger.error("%s: %s", context, get_key_manager().scrub_text(str(exc)))


def _declined(issue: ValidationIssue, status_code: int = status.HTTP_422_UNPROCESSABLE_ENTITY) -> JSONResponse:
    body = ErrorResponse(code=issue.code, message=issue.message, details=[issue.field] if issue.field else [])
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _not_found() -> JSONResponse:
    return _declined(ValidationIssue(code="not_found", message=message_for("not_found")), status.HTTP_404_NOT_FOUND)


@app.exception_handler(DomainError)
async def _domain_error_handler(request: Request, exc: DomainError):
    return _declined(ValidationIssue(code="invalid_input", message=str(exc)))


@app.exception_handler(Exception)
async def _unhandled_error_handler(request: Request, exc: Exception):
    _safe_log_exception(f"{request.method} {request.url.path} failed", exc)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(code="internal_error", message="Internal server error").model_dump(),
    )


# ── status ────────────────────────────────────────


@app.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok")


@app.get("/diagnostics")
def diagnostics(ctx: AppContext = Depends(get_context)):
    """Provider selection, route cache stats and store backend (no secrets)."""
    snapshot = resolve_provider_snapshot(store_backend=getattr(ctx.store, "backend", "unknown"))
    route_cache = ctx.cache.get("route")
    return {
        "providers": snapshot.model_dump(),
        "cache": {"route": route_cache.stats if route_cache is not None else {}},
        "records": len(ctx.ledger.records),
    }


# ── catalog / prices / routes ─────────────────────


@app.get("/vehicles/brands", response_model=BrandsResponse)
def list_brands():
    return BrandsResponse(brands=vehicle_catalog.list_brands())


@app.get("/vehicles/last-used", response_model=LastUsedVehicleResponse)
def last_used_vehicle(ctx: AppContext = Depends(get_context)):
    return LastUsedVehicleResponse(vehicle=ctx.ledger.last_used_vehicle())


@app.get("/vehicles/{brand}/models", response_model=ModelsResponse)
def list_models(brand: str):
    return ModelsResponse(brand=brand, models=vehicle_catalog.list_models(brand))


@app.get("/vehicles/{brand}/{model}/variants", response_model=VariantsResponse)
def list_variants(brand: str, model: str):
    entry = vehicle_catalog.get_model(brand, model)
    return VariantsResponse(
        brand=brand,
        model=model,
        default_fuel_type=entry.default_fuel_type if entry else None,
        fuel_types=vehicle_catalog.available_fuel_types(brand, model),
        variants=[
            VariantItem(index=i, fuel_type=v.fuel_type, efficiency=v.efficiency)
            for i, v in enumerate(vehicle_catalog.list_variants(brand, model))
        ],
    )


@app.get("/fuel-prices", response_model=FuelPrices)
def fuel_prices(ctx: AppContext = Depends(get_context)):
    return ctx.pricing.get_current_prices()


@app.post("/routes/search", response_model=RouteSearchResult)
def search_routes(req: RouteSearchRequest, ctx: AppContext = Depends(get_context)):
    result = ctx.routes.search(req.departure, req.destination)
    if result.error_code in ("missing_location", "same_location"):
        return _declined(ValidationIssue(code=result.error_code, message=result.message or ""))
    return result


# ── drafts / ledger ───────────────────────────────


@app.get("/drafts/blank", response_model=DraftForm)
def blank_draft(ctx: AppContext = Depends(get_context)):
    return ctx.session.blank(ctx.today(), ctx.ledger.last_used_vehicle())


@app.post("/calculate", response_model=CalculateResponse)
def calculate(form: DraftForm, ctx: AppContext = Depends(get_context)):
    draft = ctx.session.build(form)
    return CalculateResponse(breakdown=ctx.session.breakdown(form), draft=draft)


@app.get("/expenses", response_model=ExpenseListResponse)
def list_expenses(ctx: AppContext = Depends(get_context)):
    records = ctx.ledger.records
    return ExpenseListResponse(records=records, total_amount=sum(r.breakdown.total for r in records))


@app.post("/expenses", response_model=ExpenseRecord, status_code=status.HTTP_201_CREATED)
def confirm_expense(form: DraftForm, ctx: AppContext = Depends(get_context)):
    result = ctx.ledger.confirm(ctx.session.build(form))
    if not result.accepted:
        return _declined(result.reason)
    return result.record


@app.get("/expenses/{record_id}/draft", response_model=DraftForm)
def edit_expense(record_id: str, ctx: AppContext = Depends(get_context)):
    draft = ctx.ledger.edit(record_id)
    if draft is None:
        return _not_found()
    return ctx.session.form_for(draft)


@app.delete("/expenses/{record_id}", response_model=DeleteResponse)
def delete_expense(record_id: str, ctx: AppContext = Depends(get_context)):
    if not ctx.ledger.delete(record_id):
        return _not_found()
    return DeleteResponse(deleted=1)


@app.delete("/expenses", response_model=DeleteResponse)
def delete_all_expenses(ctx: AppContext = Depends(get_context)):
    return DeleteResponse(deleted=ctx.ledger.delete_all())


# ── export ────────────────────────────────────────


@app.get("/exports/defaults", response_model=ExportDefaultsResponse)
def export_defaults(ctx: AppContext = Depends(get_context)):
    start, end = default_date_range(ctx.ledger.records, ctx.today)
    return ExportDefaultsResponse(created_date=ctx.today(), start_date=start, end_date=end)


@app.post("/exports")
def export_expenses(req: ExportRequest, ctx: AppContext = Depends(get_context)):
    issue = validate_export_request(req.author, req.start_date, req.end_date, req.created_date)
    if issue is not None:
        return _declined(issue)

    projection = project(
        ctx.ledger.records,
        author=req.author.strip(),
        created_date=req.created_date or ctx.today(),
        start_date=req.start_date,
        end_date=req.end_date,
    )
    rendered = render(projection, req.format)
    return Response(
        content=rendered.content,
        media_type=rendered.media_type,
        headers={"Content-Disposition": f'attachment; filename="{rendered.filename}"'},
    )
