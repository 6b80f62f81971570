from __future__ import annotations

"""Concrete rate providers and factory.

'static' serves a fixed table (offline development, demos); 'external-http'
pulls the latest USD-anchored table from exchangerate-api.com.
"""
import logging
from typing import Any, Dict, Optional

from jobboard_currency.core.config import Settings
from jobboard_currency.core.errors import RateFetchFailure
from jobboard_currency.services.http_client import HttpError, JsonFetcher, get_json
from .base import RateProvider

logger = logging.getLogger("jobboard_currency.rates.providers")

# Approximate units per 1 USD; only used when explicitly configured.
_STATIC_RATES: Dict[str, float] = {
    "USD": 1.0,
    "GBP": 0.79,
    "EUR": 0.92,
    "NGN": 1550.0,
    "KES": 129.0,
    "ZAR": 18.4,
    "GHS": 15.2,
    "CAD": 1.37,
}


class StaticRateProvider(RateProvider):
    def fetch_rates(self) -> Dict[str, float]:
        return dict(_STATIC_RATES)


def parse_rates_payload(payload: Any) -> Dict[str, float]:
    """Extract ``{code: rate}`` from a ``{"rates": {...}}`` body.

    Non-numeric and non-positive entries are dropped; a body with no usable
    ``rates`` object is a failure.
    """
    if not isinstance(payload, dict):
        raise RateFetchFailure("response body is not an object")
    raw = payload.get("rates")
    if not isinstance(raw, dict):
        raise RateFetchFailure("response has no 'rates' object")
    rates: Dict[str, float] = {}
    for code, value in raw.items():
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if value > 0:
            rates[str(code).upper()] = float(value)
    if not rates:
        raise RateFetchFailure("response contained no usable rates")
    return rates


class ExternalHTTPRateProvider(RateProvider):
    def __init__(
        self,
        url: str,
        *,
        timeout: float = 5.0,
        retries: int = 1,
        fetch_json: Optional[JsonFetcher] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.retries = retries
        self._fetch_json = fetch_json or get_json

    def fetch_rates(self) -> Dict[str, float]:
        try:
            data = self._fetch_json(self.url, timeout=self.timeout, retries=self.retries)
        except (HttpError, OSError) as e:
            raise RateFetchFailure(str(e)) from e
        rates = parse_rates_payload(data)
        rates.setdefault(self.base_currency, 1.0)
        logger.info("fetched %d exchange rates from %s", len(rates), self.url)
        return rates


_PROVIDER_REGISTRY = {
    "static": StaticRateProvider,
    "external-http": ExternalHTTPRateProvider,
}


def make_rate_provider(
    settings: Settings, fetch_json: Optional[JsonFetcher] = None
) -> RateProvider:
    kind = settings.exchange_rate_provider
    cls = _PROVIDER_REGISTRY.get(kind)
    if not cls:
        raise ValueError(f"Unknown rate provider kind '{kind}'")
    if cls is ExternalHTTPRateProvider:
        provider: RateProvider = ExternalHTTPRateProvider(
            str(settings.exchange_api_url),
            timeout=settings.http_timeout_seconds,
            retries=settings.http_retries,
            fetch_json=fetch_json,
        )
    else:
        provider = cls()
    provider.base_currency = settings.base_currency
    return provider
