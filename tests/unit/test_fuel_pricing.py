from trip_expenses.calculator.fuel_pricing import FuelPricing, price_for
from trip_expenses.domain.constants import FUEL_PRICE_TTL_MS
from trip_expenses.domain.enums import FuelType, PriceSource
from trip_expenses.shared.exceptions import ExternalServiceError, KeyMissingError


class _FeedTool:
    def __init__(self, prices=None, error=None):
        self.prices = prices
        self.error = error
        self.calls = 0

    def fetch_prices(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return dict(self.prices)


_FEED = {"gasoline": 1700, "premium_gasoline": 1950, "diesel": 1500, "lpg": 900}


def test_provider_prices_are_returned_and_cached(clock):
    tool = _FeedTool(_FEED)
    pricing = FuelPricing(tool, clock=clock)

    first = pricing.get_current_prices()
    second = pricing.get_current_prices()

    assert first.source is PriceSource.PROVIDER
    assert first.gasoline == 1700
    assert second.source is PriceSource.CACHE
    assert second.diesel == 1500
    assert tool.calls == 1


def test_expired_cache_refetches(clock):
    tool = _FeedTool(_FEED)
    pricing = FuelPricing(tool, clock=clock)
    pricing.get_current_prices()

    clock.advance(FUEL_PRICE_TTL_MS)
    prices = pricing.get_current_prices()

    assert prices.source is PriceSource.PROVIDER
    assert tool.calls == 2


def test_stale_cache_used_when_provider_fails(clock):
    tool = _FeedTool(_FEED)
    pricing = FuelPricing(tool, clock=clock)
    pricing.get_current_prices()

    clock.advance(FUEL_PRICE_TTL_MS * 5)
    tool.error = ExternalServiceError("opinet", "quota exceeded")
    prices = pricing.get_current_prices()

    assert prices.source is PriceSource.STALE_CACHE
    assert prices.gasoline == 1700


def test_fallback_constants_without_cache(clock):
    pricing = FuelPricing(_FeedTool(error=KeyMissingError("OPINET_API_KEY", tool="opinet")), clock=clock)

    prices = pricing.get_current_prices()

    assert prices.source is PriceSource.FALLBACK
    assert (prices.gasoline, prices.diesel, prices.lpg) == (1850, 1650, 950)
    assert prices.premium_gasoline is None
    assert prices.fetched_at == clock.now


def test_partial_feed_keeps_fallback_values(clock):
    pricing = FuelPricing(_FeedTool({"gasoline": 1699}), clock=clock)

    prices = pricing.get_current_prices()

    assert prices.gasoline == 1699
    assert prices.diesel == 1650


def test_malformed_feed_values_fall_back(clock):
    pricing = FuelPricing(_FeedTool({"gasoline": "n/a"}), clock=clock)

    assert pricing.get_current_prices().source is PriceSource.FALLBACK


def test_manual_override_wins(clock):
    pricing = FuelPricing(_FeedTool(_FEED), clock=clock)

    assert pricing.resolve_price(FuelType.GASOLINE, manual_override=2100) == 2100
    assert pricing.resolve_price(FuelType.GASOLINE, manual_override=0) == 1700
    assert pricing.resolve_price(FuelType.LPG) == 900


def test_electric_price_is_zero():
    prices = FuelPricing(_FeedTool(_FEED)).get_current_prices()

    assert price_for(FuelType.ELECTRIC, prices) == 0
    assert price_for(FuelType.DIESEL, prices) == 1500


def test_default_tool_without_key_serves_fallback_values():
    prices = FuelPricing().get_current_prices()

    assert prices.gasoline == 1850
