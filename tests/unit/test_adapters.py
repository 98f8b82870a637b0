"""Provider adapters: Naver Directions parsing and the Opinet price feed."""

import pytest

from trip_expenses.adapters.fuel import opinet
from trip_expenses.adapters.route import naver
from trip_expenses.adapters import tool_factory
from trip_expenses.security.key_manager import get_key_manager
from trip_expenses.shared.exceptions import ExternalServiceError, KeyMissingError, ToolError

_DRIVING_RESPONSE = {
    "code": 0,
    "message": "길찾기를 성공하였습니다.",
    "route": {
        "trafast": [
            {
                "summary": {"distance": 325420, "duration": 13_530_000, "tollFare": 18600},
                "path": [[127.0276, 37.4979], [129.0403, 35.1151]],
            },
            {"summary": {"distance": 200, "duration": 20000, "tollFare": 0}, "path": []},
        ]
    },
}

_OPINET_XML = """<?xml version="1.0" encoding="UTF-8"?>
<RESULT>
  <OIL><TRADE_DT>20240301</TRADE_DT><PRODCD>B034</PRODCD><PRODNM>고급휘발유</PRODNM><PRICE>1945.12</PRICE></OIL>
  <OIL><TRADE_DT>20240301</TRADE_DT><PRODCD>B027</PRODCD><PRODNM>보통휘발유</PRODNM><PRICE>1685.50</PRICE></OIL>
  <OIL><TRADE_DT>20240301</TRADE_DT><PRODCD>D047</PRODCD><PRODNM>자동차용경유</PRODNM><PRICE>1,548.2</PRICE></OIL>
  <OIL><TRADE_DT>20240301</TRADE_DT><PRODCD>K015</PRODCD><PRODNM>자동차용부탄</PRODNM><PRICE>1012.9</PRICE></OIL>
  <OIL><TRADE_DT>20240301</TRADE_DT><PRODCD>C004</PRODCD><PRODNM>실내등유</PRODNM><PRICE>1301.3</PRICE></OIL>
</RESULT>"""


def test_parse_routes_converts_units_and_skips_degenerate_candidates():
    routes = naver._parse_routes(_DRIVING_RESPONSE)

    assert len(routes) == 1
    assert routes[0].distance_km == 325
    assert routes[0].duration_min == 226
    assert routes[0].toll_fee_krw == 18600
    assert routes[0].path[0] == (127.0276, 37.4979)


def test_parse_routes_raises_on_error_code():
    with pytest.raises(ToolError):
        naver._parse_routes({"code": 2, "message": "No route"})


@pytest.mark.parametrize(
    "item",
    [
        {"summary": {"distance": None, "duration": 600000}},
        {"summary": {"distance": "far", "duration": 600000}},
        {"summary": {"distance": 5000, "duration": 600000, "tollFare": -100}},
        {"summary": {"distance": float("nan"), "duration": 600000}},
        {"summary": {"distance": 5000, "duration": 600000}, "path": [None]},
        "junk",
    ],
)
def test_parse_routes_skips_malformed_candidates(item):
    good = {"summary": {"distance": 12000, "duration": 1200000}}

    routes = naver._parse_routes({"code": 0, "route": {"trafast": [item, good]}})

    assert [r.distance_km for r in routes] == [12]


@pytest.mark.parametrize("payload", [["not", "a", "dict"], {"code": 0, "route": "x"}, {"code": 0, "route": {"trafast": 7}}])
def test_parse_routes_rejects_malformed_envelope(payload):
    with pytest.raises(ToolError):
        naver._parse_routes(payload)


def test_naver_search_uses_credentials_and_caches(monkeypatch):
    monkeypatch.setenv("NAVER_CLIENT_ID", "client-id-1234")
    monkeypatch.setenv("NAVER_CLIENT_SECRET", "client-secret-5678")
    km = get_key_manager()
    km.reload("NAVER_CLIENT_ID")
    km.reload("NAVER_CLIENT_SECRET")
    calls = []

    def fake_get(url, *, params=None, headers=None):
        calls.append((params, headers))
        return _DRIVING_RESPONSE

    monkeypatch.setattr(naver._http, "get", fake_get)

    first = naver.search_routes("127.0276,37.4979", "129.0403,35.1151")
    second = naver.search_routes("127.0276,37.4979", "129.0403,35.1151")

    assert first == second
    assert len(calls) == 1
    params, headers = calls[0]
    assert params["option"] == "trafast"
    assert headers["X-NCP-APIGW-API-KEY-ID"] == "client-id-1234"


def test_naver_search_without_credentials_raises():
    with pytest.raises(KeyMissingError):
        naver.search_routes("a", "b")


def test_parse_avg_all_price_maps_product_codes():
    prices = opinet.parse_avg_all_price(_OPINET_XML)

    assert prices["gasoline"] == 1686
    assert prices["premium_gasoline"] == 1945
    assert prices["diesel"] == 1548
    assert prices["lpg"] == 1013


def test_parse_avg_all_price_reads_lpg_from_c004_when_k015_absent():
    xml = "<RESULT><OIL><PRODCD>C004</PRODCD><PRICE>990.4</PRICE></OIL></RESULT>"

    prices = opinet.parse_avg_all_price(xml)

    assert prices["lpg"] == 990
    assert prices["gasoline"] == 1850


def test_parse_avg_all_price_error_payload():
    with pytest.raises(ExternalServiceError):
        opinet.parse_avg_all_price("<RESULT><ERROR>invalid key</ERROR></RESULT>")


def test_parse_avg_all_price_malformed_xml():
    with pytest.raises(ToolError):
        opinet.parse_avg_all_price("<RESULT><OIL>")


def test_opinet_fetch_without_key_raises():
    with pytest.raises(KeyMissingError):
        opinet.fetch_prices()


def test_opinet_fetch_passes_key_as_code(monkeypatch):
    monkeypatch.setenv("OPINET_API_KEY", "opinet-test-key")
    get_key_manager().reload("OPINET_API_KEY")
    seen = {}

    def fake_get_text(url, *, params=None, headers=None):
        seen.update(params)
        return _OPINET_XML

    monkeypatch.setattr(opinet._http, "get_text", fake_get_text)

    assert opinet.fetch_prices()["gasoline"] == 1686
    assert seen == {"code": "opinet-test-key", "out": "xml"}


def test_tool_factory_selection(monkeypatch):
    assert tool_factory.get_fuel_tool().__name__.endswith(".mock")
    assert tool_factory.get_route_tool().__name__.endswith(".naver")

    monkeypatch.setenv("ROUTE_PROVIDER", "mock")
    monkeypatch.setenv("OPINET_API_KEY", "k")

    assert tool_factory.get_route_tool().__name__.endswith(".mock")
    assert tool_factory.get_fuel_tool().__name__.endswith(".opinet")
    assert tool_factory.describe_active_tools() == {"route": "mock", "fuel": "opinet"}


def test_adapter_modules_satisfy_protocols():
    from trip_expenses.adapters.fuel import mock as mock_fuel
    from trip_expenses.adapters.interfaces import FuelPriceTool, RouteTool
    from trip_expenses.adapters.route import mock as mock_route

    assert isinstance(naver, RouteTool)
    assert isinstance(mock_route, RouteTool)
    assert isinstance(opinet, FuelPriceTool)
    assert isinstance(mock_fuel, FuelPriceTool)
