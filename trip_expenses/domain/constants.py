"""Domain constants shared by deterministic logic."""

from decimal import ROUND_HALF_UP, Decimal

# Currency amounts are whole won. Half-up matches what users see from the
# fuel feed and toll tables, and every amount here is non-negative.
CURRENCY_ROUNDING = ROUND_HALF_UP
CURRENCY_QUANTUM = Decimal("1")
CURRENCY_SYMBOL = "₩"

# Fixed estimate for electric vehicles; catalog efficiency is display-only.
ELECTRIC_KWH_PER_KM = Decimal("0.2")
ELECTRIC_PRICE_PER_KWH = Decimal("150")

FALLBACK_FUEL_PRICES = {
    "gasoline": 1850,
    "premium_gasoline": None,
    "diesel": 1650,
    "lpg": 950,
}

FUEL_PRICE_TTL_MS = 60 * 60 * 1000
VEHICLE_CACHE_TTL_MS = 24 * 60 * 60 * 1000
ROUTE_CACHE_TTL_MS = 30 * 60 * 1000

EXPENSE_LIST_KEY = "expense_list"
VEHICLE_CACHE_KEY = "trip_expenses_cache"

# (field, header label) in export column order.
EXPORT_COLUMNS = (
    ("date", "날짜"),
    ("departure", "출발지"),
    ("destination", "도착지"),
    ("distance", "거리"),
    ("duration", "소요시간"),
    ("toll_fee", "통행료"),
    ("vehicle", "차량"),
    ("fuel_cost", "연료비"),
    ("parking", "주차비"),
    ("meals", "식비"),
    ("accommodation", "숙박비"),
    ("other", "기타"),
    ("total", "총액"),
    ("memo", "비고"),
)

# Latin-1 fallback labels for renderers without a Unicode font.
EXPORT_COLUMN_LABELS_EN = {
    "date": "Date",
    "departure": "From",
    "destination": "To",
    "distance": "Distance",
    "duration": "Duration",
    "toll_fee": "Toll",
    "vehicle": "Vehicle",
    "fuel_cost": "Fuel",
    "parking": "Parking",
    "meals": "Meals",
    "accommodation": "Lodging",
    "other": "Other",
    "total": "Total",
    "memo": "Memo",
}
