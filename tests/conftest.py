"""pytest fixtures: isolate tests from real providers and stores."""

import pytest

from trip_expenses.domain.models import IncidentalExpenses, RouteCandidate, VehicleSelection
from trip_expenses.domain.enums import FuelType
from trip_expenses.infrastructure.store import MemoryStore
from trip_expenses.infrastructure.logging import StructuredLogger


@pytest.fixture(autouse=True)
def no_real_apis(monkeypatch):
    """Keep provider keys out of the environment so no test reaches Naver or Opinet."""
    for name in ("NAVER_CLIENT_ID", "NAVER_CLIENT_SECRET", "OPINET_API_KEY", "ROUTE_PROVIDER", "PDF_FONT_PATH"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("EXPENSE_STORE", "memory")

    from trip_expenses.infrastructure.cache import route_cache
    from trip_expenses.security.key_manager import get_key_manager

    km = get_key_manager()
    for key_name in ("NAVER_CLIENT_ID", "NAVER_CLIENT_SECRET", "OPINET_API_KEY"):
        km.reload(key_name)
    route_cache.clear()
    yield
    route_cache.clear()


class FakeClock:
    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def audit(tmp_path):
    with open(tmp_path / "audit.log", "w", encoding="utf-8") as fh:
        yield StructuredLogger(trace_id="test", output=fh)


@pytest.fixture
def route_250():
    return RouteCandidate(distance_km=250, duration_min=180, toll_fee_krw=15000)


@pytest.fixture
def sonata():
    return VehicleSelection(brand="Hyundai", model="Sonata", efficiency_km_per_liter=12.5, fuel_type=FuelType.GASOLINE)


@pytest.fixture
def no_incidentals():
    return IncidentalExpenses()
