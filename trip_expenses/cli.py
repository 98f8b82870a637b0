"""trip-expenses CLI: catalog lookup, calculation, ledger and export."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from trip_expenses.application.context import AppContext, make_app_context
from trip_expenses.calculator import vehicle_catalog
from trip_expenses.calculator.cost import format_currency
from trip_expenses.domain.enums import ExportFormat, FuelType, IncidentalCategory
from trip_expenses.domain.models import (
    AddressSearch,
    CatalogVehicle,
    DraftForm,
    FormState,
    IncidentalToggle,
    ManualRoute,
    ManualVehicle,
)
from trip_expenses.services.export_formatter import render
from trip_expenses.services.export_projection import default_date_range, project, validate_export_request


def _print_json(data) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def _declined_input(exc: ValidationError) -> int:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "input"
    print(f"❌ {field}: {first['msg']}", file=sys.stderr)
    return 1


def _add_draft_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--date", default="", help="YYYY-MM-DD (default: today)")
    parser.add_argument("--from", dest="departure", default="", help="출발지, searched via the route provider")
    parser.add_argument("--to", dest="destination", default="", help="도착지")
    parser.add_argument("--route-index", type=_non_negative_int, default=0)
    parser.add_argument("--distance", type=float, default=0, help="manual distance in km")
    parser.add_argument("--duration", type=float, default=0, help="manual duration in minutes")
    parser.add_argument("--toll", type=int, default=0)
    parser.add_argument("--brand", default="")
    parser.add_argument("--model", default="")
    parser.add_argument("--variant", type=_non_negative_int, default=0)
    parser.add_argument("--efficiency", type=float, default=0, help="manual km per liter")
    parser.add_argument("--fuel-type", choices=[f.value for f in FuelType], default=FuelType.GASOLINE.value)
    parser.add_argument("--fuel-price", type=int, default=None, help="manual per-liter price override")
    for category in IncidentalCategory:
        parser.add_argument(f"--{category.value}", type=int, default=0)
    parser.add_argument("--memo", default="")


def _build_form(args: argparse.Namespace, ctx: AppContext) -> DraftForm:
    selected_route = None
    if args.departure or args.destination:
        route_input = AddressSearch(departure=args.departure, destination=args.destination, selected_index=args.route_index)
        result = ctx.routes.search(args.departure, args.destination)
        if result.message:
            print(f"[route] {result.message}", file=sys.stderr)
        if result.routes:
            selected_route = result.routes[min(args.route_index, len(result.routes) - 1)]
    else:
        route_input = ManualRoute(distance_km=args.distance, duration_min=args.duration, toll_fee_krw=args.toll)

    if args.brand and args.model:
        vehicle_input = CatalogVehicle(brand=args.brand, model=args.model, variant_index=args.variant)
    elif args.efficiency > 0:
        vehicle_input = ManualVehicle(efficiency_km_per_liter=args.efficiency, fuel_type=FuelType(args.fuel_type))
    else:
        vehicle_input = None

    toggles = {}
    for category in IncidentalCategory:
        amount = getattr(args, category.value)
        if amount > 0:
            toggles[category] = IncidentalToggle(enabled=True, amount=amount)

    return DraftForm(
        date=args.date or ctx.today(),
        form_state=FormState(
            route=route_input,
            vehicle=vehicle_input,
            manual_fuel_price=args.fuel_price,
            incidental_toggles=toggles,
        ),
        selected_route=selected_route,
        memo=args.memo,
        editing_id=getattr(args, "edit", None),
    )


def _cmd_brands(args, ctx: AppContext) -> int:
    for brand in vehicle_catalog.list_brands():
        print(brand)
    return 0


def _cmd_models(args, ctx: AppContext) -> int:
    models = vehicle_catalog.list_models(args.brand)
    if not models:
        print(f"unknown brand: {args.brand}", file=sys.stderr)
        return 1
    for model in models:
        variants = ", ".join(
            f"[{i}] {v.fuel_type.value} {v.efficiency}" for i, v in enumerate(vehicle_catalog.list_variants(args.brand, model))
        )
        print(f"{model}: {variants}")
    return 0


def _cmd_prices(args, ctx: AppContext) -> int:
    _print_json(ctx.pricing.get_current_prices().to_json_dict())
    return 0


def _cmd_calc(args, ctx: AppContext) -> int:
    try:
        form = _build_form(args, ctx)
    except ValidationError as exc:
        return _declined_input(exc)
    breakdown = ctx.session.breakdown(form)
    _print_json(breakdown.to_json_dict())
    return 0


def _cmd_add(args, ctx: AppContext) -> int:
    try:
        form = _build_form(args, ctx)
    except ValidationError as exc:
        return _declined_input(exc)
    if form.editing_id:
        existing = ctx.ledger.edit(form.editing_id)
        if existing is None:
            print(f"not found: {form.editing_id}", file=sys.stderr)
            return 1
    result = ctx.ledger.confirm(ctx.session.build(form))
    if not result.accepted:
        print(f"❌ {result.reason.message}", file=sys.stderr)
        return 1
    record = result.record
    print(f"{record.id}  {record.date}  {format_currency(record.breakdown.total)}")
    return 0


def _cmd_list(args, ctx: AppContext) -> int:
    records = ctx.ledger.records
    if args.json:
        _print_json([r.to_json_dict() for r in records])
        return 0
    for record in records:
        memo = f"  {record.memo}" if record.memo else ""
        print(f"{record.id}  {record.date}  {format_currency(record.breakdown.total)}{memo}")
    print(f"합계: {format_currency(sum(r.breakdown.total for r in records))} ({len(records)}건)")
    return 0


def _cmd_delete(args, ctx: AppContext) -> int:
    if not ctx.ledger.delete(args.id):
        print(f"not found: {args.id}", file=sys.stderr)
        return 1
    return 0


def _cmd_clear(args, ctx: AppContext) -> int:
    print(f"deleted {ctx.ledger.delete_all()} records")
    return 0


def _cmd_export(args, ctx: AppContext) -> int:
    records = ctx.ledger.records
    default_start, default_end = default_date_range(records, ctx.today)
    start = args.start or default_start
    end = args.end or default_end

    issue = validate_export_request(args.author, start, end, args.created)
    if issue is not None:
        print(f"❌ {issue.message}", file=sys.stderr)
        return 1

    projection = project(records, author=args.author.strip(), created_date=args.created or ctx.today(), start_date=start, end_date=end)
    rendered = render(projection, args.format)
    out_dir = Path(args.output)
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / rendered.filename
    target.write_bytes(rendered.content)
    print(str(target))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="trip-expenses", description="Business-trip expense calculator")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("brands", help="list catalog brands").set_defaults(handler=_cmd_brands)

    models = sub.add_parser("models", help="list models and variants of a brand")
    models.add_argument("brand")
    models.set_defaults(handler=_cmd_models)

    sub.add_parser("prices", help="current fuel prices").set_defaults(handler=_cmd_prices)

    calc = sub.add_parser("calc", help="print the breakdown without saving")
    _add_draft_arguments(calc)
    calc.set_defaults(handler=_cmd_calc)

    add = sub.add_parser("add", help="confirm an entry into the ledger")
    _add_draft_arguments(add)
    add.add_argument("--edit", default=None, help="id of the record to replace")
    add.set_defaults(handler=_cmd_add)

    listing = sub.add_parser("list", help="list confirmed entries")
    listing.add_argument("--json", action="store_true")
    listing.set_defaults(handler=_cmd_list)

    delete = sub.add_parser("delete", help="delete one entry")
    delete.add_argument("id")
    delete.set_defaults(handler=_cmd_delete)

    sub.add_parser("clear", help="delete every entry").set_defaults(handler=_cmd_clear)

    export = sub.add_parser("export", help="render entries in a date range")
    export.add_argument("--author", default="")
    export.add_argument("--created", default="")
    export.add_argument("--start", default="")
    export.add_argument("--end", default="")
    export.add_argument("--format", choices=[f.value for f in ExportFormat], default=ExportFormat.CSV.value)
    export.add_argument("--output", default=".")
    export.set_defaults(handler=_cmd_export)
    return parser


def main(argv: list[str] | None = None, ctx: AppContext | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    return args.handler(args, ctx or make_app_context())


if __name__ == "__main__":
    raise SystemExit(main())
