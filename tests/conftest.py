"""Test configuration and shared fixtures"""

import time
from typing import Any, Dict, List, Tuple

import pytest
from fastapi.testclient import TestClient

from jobboard_currency.core.config import Settings
from jobboard_currency.db.store import MemoryKeyValueStore
from jobboard_currency.main import create_app
from jobboard_currency.services.currency_service import build_currency_service
from jobboard_currency.services.http_client import HttpError

GEO_URL = "https://geo.test/json/"
RATES_URL = "https://rates.test/v4/latest/USD"

# units per 1 USD; ratios between these stay small so round trips hold
RATES = {
    "USD": 1.0,
    "GBP": 0.8,
    "EUR": 0.9,
    "NGN": 1500.0,
    "KES": 130.0,
    "ZAR": 18.0,
    "GHS": 15.0,
    "CAD": 1.35,
}


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher:
    """Stands in for http_client.get_json; responses are keyed by URL.

    A response may be a dict (returned), an exception instance (raised) or a
    ``("sleep", seconds, payload)`` tuple to simulate a slow provider.
    """

    def __init__(self):
        self.responses: Dict[str, Any] = {
            GEO_URL: {"country_code": "GB"},
            RATES_URL: {"base": "USD", "rates": dict(RATES)},
        }
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def __call__(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append((url, kwargs))
        response = self.responses[url]
        if isinstance(response, tuple) and response[0] == "sleep":
            time.sleep(response[1])
            return response[2]
        if isinstance(response, Exception):
            raise response
        return response

    def count(self, url: str) -> int:
        return sum(1 for called, _ in self.calls if called == url)


@pytest.fixture
def settings(tmp_path) -> Settings:
    s = Settings(
        data_dir=tmp_path,
        debug=False,
        exchange_api_url=RATES_URL,
        geolocation_url=GEO_URL,
        exchange_rate_provider="external-http",
        default_currency="GBP",
        initial_currency="USD",
    )
    s.init_post_load()
    return s


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def service(settings, store, fetcher, clock):
    return build_currency_service(settings, store=store, fetch_json=fetcher, clock=clock)


@pytest.fixture
def ready_service(service):
    service.initialize()
    return service


@pytest.fixture
def http_500() -> HttpError:
    return HttpError("Failed to fetch JSON from https://rates.test: HTTP Error 500")


@pytest.fixture
def test_app(settings, service):
    app = create_app(settings_override=settings, service_override=service)
    with TestClient(app) as client:
        yield client
