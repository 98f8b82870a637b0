"""Draft session: the in-progress form turned into a ``Draft`` and back.

The HTTP API and CLI are stateless, so the "session" is the submitted
``DraftForm``; this module holds the rules for reading it.
"""

from __future__ import annotations

from typing import Optional

from trip_expenses.calculator import vehicle_catalog
from trip_expenses.calculator.fuel_pricing import FuelPricing
from trip_expenses.domain.enums import IncidentalCategory
from trip_expenses.domain.models import (
    AddressSearch,
    CatalogVehicle,
    CostBreakdown,
    Draft,
    DraftForm,
    FormState,
    IncidentalExpenses,
    IncidentalToggle,
    ManualRoute,
    ManualVehicle,
    RouteCandidate,
    VehicleSelection,
)
from trip_expenses.services.ledger import breakdown_for


def resolve_route(form: DraftForm) -> Optional[RouteCandidate]:
    route_input = form.form_state.route
    if isinstance(route_input, ManualRoute):
        return route_input.to_candidate()
    return form.selected_route


def resolve_vehicle(form: DraftForm) -> Optional[VehicleSelection]:
    vehicle_input = form.form_state.vehicle
    if isinstance(vehicle_input, CatalogVehicle):
        return vehicle_catalog.resolve_variant(vehicle_input.brand, vehicle_input.model, vehicle_input.variant_index)
    if isinstance(vehicle_input, ManualVehicle):
        return vehicle_input.to_selection()
    return form.selected_vehicle


def _incidental_toggles(incidentals: IncidentalExpenses) -> dict[IncidentalCategory, IncidentalToggle]:
    toggles = {}
    for category in IncidentalCategory:
        amount = getattr(incidentals, category.value)
        toggles[category] = IncidentalToggle(enabled=amount > 0, amount=amount)
    return toggles


class DraftSession:
    def __init__(self, pricing: FuelPricing):
        self._pricing = pricing

    def price_for(self, form: DraftForm, vehicle: Optional[VehicleSelection]) -> float:
        if vehicle is None:
            return 0
        manual = form.form_state.manual_fuel_price
        if manual is not None and manual > 0:
            return manual
        if form.pinned_price is not None and form.pinned_fuel_type == vehicle.fuel_type:
            return form.pinned_price
        return self._pricing.resolve_price(vehicle.fuel_type)

    def build(self, form: DraftForm) -> Draft:
        vehicle = resolve_vehicle(form)
        return Draft(
            date=form.date,
            route=resolve_route(form),
            vehicle=vehicle,
            price_per_liter=self.price_for(form, vehicle),
            incidentals=IncidentalExpenses.from_toggles(form.form_state.incidental_toggles),
            form_state=form.form_state.model_copy(deep=True),
            memo=form.memo,
            editing_id=form.editing_id,
        )

    def breakdown(self, form: DraftForm) -> CostBreakdown:
        return breakdown_for(self.build(form))

    @staticmethod
    def form_for(draft: Draft) -> DraftForm:
        """Form that reproduces ``draft`` exactly when submitted unchanged."""
        form_state = draft.form_state
        if form_state is None:
            form_state = FormState(incidental_toggles=_incidental_toggles(draft.incidentals))
        return DraftForm(
            date=draft.date,
            form_state=form_state.model_copy(deep=True),
            selected_route=draft.route,
            selected_vehicle=draft.vehicle,
            memo=draft.memo,
            editing_id=draft.editing_id,
            pinned_price=draft.price_per_liter if draft.vehicle else None,
            pinned_fuel_type=draft.vehicle.fuel_type if draft.vehicle else None,
        )

    @staticmethod
    def blank(date: str, last_vehicle: Optional[VehicleSelection] = None) -> DraftForm:
        """Empty form for a new entry, pre-filled with the last-used vehicle when known."""
        vehicle_input = None
        if last_vehicle is not None and not last_vehicle.is_manual:
            vehicle_input = CatalogVehicle(
                brand=last_vehicle.brand,
                model=last_vehicle.model,
                variant_index=vehicle_catalog.variant_index_of(last_vehicle),
            )
        elif last_vehicle is not None:
            vehicle_input = ManualVehicle(
                efficiency_km_per_liter=last_vehicle.efficiency_km_per_liter,
                fuel_type=last_vehicle.fuel_type,
            )
        return DraftForm(
            date=date,
            form_state=FormState(route=AddressSearch(), vehicle=vehicle_input),
        )
