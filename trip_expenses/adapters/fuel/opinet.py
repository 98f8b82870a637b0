"""Opinet (Korea National Oil Corporation) nationwide average price feed.

Env: ``OPINET_API_KEY``. The feed answers XML::

    <RESULT><OIL><PRODCD>B027</PRODCD><PRICE>1685.38</PRICE>...</OIL>...</RESULT>

or ``<RESULT><ERROR>message</ERROR></RESULT>`` on failure.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from trip_expenses.domain.constants import FALLBACK_FUEL_PRICES
from trip_expenses.security.http_client import SecureHttpClient
from trip_expenses.security.key_manager import OPINET_API_KEY, get_key_manager
from trip_expenses.shared.exceptions import ExternalServiceError, KeyMissingError, ToolError

AVG_ALL_PRICE_URL = "https://www.opinet.co.kr/api/avgAllPrice.do"

_PRODUCT_CODES = {
    "B027": "gasoline",
    "B034": "premium_gasoline",
    "D047": "diesel",
    "K015": "lpg",
    "C004": "lpg",
}
# Used for lpg only when the feed has no K015 entry, as are codes merely containing "LPG".
_SECONDARY_CODES = {"C004"}

_logger = logging.getLogger("trip-expenses.fuel")
_http = SecureHttpClient(tool_name="opinet", max_retries=1)


def _field_for(code: str) -> Optional[str]:
    if code in _PRODUCT_CODES:
        return _PRODUCT_CODES[code]
    if "LPG" in code.upper():
        return "lpg"
    return None


def _parse_price(raw: Optional[str]) -> Optional[int]:
    if not raw:
        return None
    try:
        value = Decimal(raw.strip().replace(",", ""))
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_avg_all_price(xml_text: str) -> dict[str, Optional[int]]:
    """Map the feed onto fuel keys; codes absent from the feed keep the fallback values."""
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise ToolError("opinet", f"malformed XML: {exc}") from None

    error = root if root.tag == "ERROR" else root.find(".//ERROR")
    if error is not None:
        raise ExternalServiceError("opinet", (error.text or "unknown error").strip())

    prices: dict[str, Optional[int]] = dict(FALLBACK_FUEL_PRICES)
    found: set[str] = set()
    for oil in root.iter("OIL"):
        code = (oil.findtext("PRODCD") or "").strip()
        field = _field_for(code)
        if field is None:
            continue
        price = _parse_price(oil.findtext("PRICE"))
        if price is None:
            _logger.debug("Skipping unparseable Opinet price for %s", code)
            continue
        if field in found and (code in _SECONDARY_CODES or code not in _PRODUCT_CODES):
            continue
        prices[field] = price
        found.add(field)
    return prices


def fetch_prices() -> dict[str, Optional[int]]:
    key = get_key_manager().opinet_key()
    if not key:
        raise KeyMissingError(OPINET_API_KEY, tool="opinet")
    body = _http.get_text(
        AVG_ALL_PRICE_URL,
        params={"code": key, "out": "xml"},
        headers={"Accept": "application/xml"},
    )
    return parse_avg_all_price(body)
