from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Dict, Optional

from jobboard_currency.core.config import Settings
from jobboard_currency.core.errors import DetectionFailure, RateFetchFailure
from jobboard_currency.db.store import KeyValueStore, SqliteKeyValueStore
from jobboard_currency.models.constants import (
    PREFERRED_CURRENCY_KEY,
    RATES_FALLBACK_ERROR,
    SUPPORTED_CODES,
    USER_SELECTED_KEY,
)
from jobboard_currency.models.currency import (
    CurrencyPhase,
    CurrencyState,
    SupportedCurrency,
    find_currency,
)
from jobboard_currency.services.geolocation import GeolocationClient, currency_for_country
from jobboard_currency.services.http_client import JsonFetcher
from jobboard_currency.services.money import group_thousands
from .rates.base import RateProvider
from .rates.cache_service import Clock, PersistedRateCache
from .rates.conversion import ConversionResult, convert_amount
from .rates.providers import make_rate_provider

"""Session currency service.

Owns the visitor's currency preference and the current rate table, and is the
only thing UI consumers talk to for conversion and display.

Lifecycle:
    uninitialized -> loading -> ready. Detection and rate loading run
    independently (``initialize`` starts both together); the service is ready
    once both have resolved. Every failure resolves to a fallback value:
    geolocation failures pick the default currency silently, rate failures
    install an identity table and set ``error`` for a passive UI badge.

Collaborators (store, rate provider, geolocation client, clock) are injected;
``build_currency_service`` wires the production ones from settings.
"""

logger = logging.getLogger("jobboard_currency.service")


def identity_rates() -> Dict[str, float]:
    return {code: 1.0 for code in sorted(SUPPORTED_CODES)}


class CurrencyService:
    def __init__(
        self,
        settings: Settings,
        *,
        store: KeyValueStore,
        rate_provider: RateProvider,
        geolocation: GeolocationClient,
        clock: Clock = time.time,
    ):
        self._settings = settings
        self._store = store
        self._provider = rate_provider
        self._geolocation = geolocation
        self._cache = PersistedRateCache(
            store, ttl_seconds=settings.rates_cache_ttl_seconds, clock=clock
        )

        self._selected: str = settings.initial_currency
        self._detected: Optional[str] = None
        self._user_selected = False
        self._error: Optional[str] = None
        self._rates: Dict[str, float] = {}
        self._rates_fetched_at: Optional[datetime] = None

        self._loading_rates = False
        self._detecting = False
        self._rates_resolved = False
        self._detection_resolved = False

        self._restore_preference()

    # Internal --------------------------------------------------
    def _restore_preference(self) -> None:
        saved = self._store.get_many([PREFERRED_CURRENCY_KEY, USER_SELECTED_KEY])
        preferred = saved[PREFERRED_CURRENCY_KEY]
        if preferred and preferred in SUPPORTED_CODES:
            self._selected = preferred
            self._user_selected = saved[USER_SELECTED_KEY] == "true"
            logger.debug("restored preferred currency %s", preferred)

    # Read-only state -------------------------------------------
    @property
    def selected_currency(self) -> str:
        return self._selected

    @property
    def detected_currency(self) -> Optional[str]:
        return self._detected

    @property
    def loading(self) -> bool:
        return self._loading_rates or self._detecting

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def exchange_rates(self) -> Dict[str, float]:
        return dict(self._rates)

    @property
    def phase(self) -> CurrencyPhase:
        if self._rates_resolved and self._detection_resolved and not self.loading:
            return CurrencyPhase.READY
        if not (self.loading or self._rates_resolved or self._detection_resolved):
            return CurrencyPhase.UNINITIALIZED
        return CurrencyPhase.LOADING

    def state(self) -> CurrencyState:
        return CurrencyState(
            selected_currency=self._selected,
            detected_currency=self._detected,
            loading=self.loading,
            error=self._error,
            phase=self.phase,
            rates_fetched_at=self._rates_fetched_at,
            exchange_rates=self.exchange_rates,
            selected=find_currency(self._selected),
        )

    # Detection -------------------------------------------------
    def detect_currency(self) -> str:
        """Guess the visitor's currency from IP geolocation; never raises."""
        default = self._settings.default_currency
        self._detecting = True
        try:
            try:
                country = self._geolocation.country_code()
            except DetectionFailure as e:
                logger.info(
                    "currency detection failed, using %s: %s",
                    default,
                    e,
                    extra={"currency": default},
                )
                currency = default
            else:
                currency = currency_for_country(country) or default
                logger.info(
                    "detected country %s",
                    country,
                    extra={"currency": currency},
                )
            self._detected = currency
            if not self._user_selected:
                self._selected = currency
            return currency
        finally:
            self._detecting = False
            self._detection_resolved = True

    # Rates -----------------------------------------------------
    def load_rates(self, force_refresh: bool = False) -> Dict[str, float]:
        """Return the current rate table, fetching only when the cache is stale.

        On provider failure the identity table is installed and returned and
        ``error`` is set; callers never see an exception.
        """
        self._loading_rates = True
        self._error = None
        try:
            if not force_refresh:
                snapshot = self._cache.read_fresh()
                if snapshot is not None:
                    logger.debug("using cached exchange rates from %s", snapshot.fetched_at)
                    self._rates = dict(snapshot.rates)
                    self._rates_fetched_at = snapshot.fetched_at
                    return dict(self._rates)
            try:
                rates = self._provider.fetch_rates()
            except RateFetchFailure as e:
                logger.warning("exchange rates unavailable, converting 1:1: %s", e)
                self._error = RATES_FALLBACK_ERROR
                self._rates = identity_rates()
                self._rates_fetched_at = None
                return dict(self._rates)
            snapshot = self._cache.write(rates)
            self._rates = dict(snapshot.rates)
            self._rates_fetched_at = snapshot.fetched_at
            return dict(self._rates)
        finally:
            self._loading_rates = False
            self._rates_resolved = True

    def refresh(self) -> Dict[str, float]:
        self._cache.clear()
        return self.load_rates(force_refresh=True)

    def initialize(self) -> CurrencyState:
        """Run detection and rate loading side by side and wait for both."""
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="currency-init") as pool:
            detection = pool.submit(self.detect_currency)
            rates = pool.submit(self.load_rates)
            detection.result()
            rates.result()
        logger.info(
            "currency service ready",
            extra={"currency": self._selected},
        )
        return self.state()

    # Selection -------------------------------------------------
    def set_selected_currency(self, code: str) -> None:
        # No validation here; display helpers fall back to the raw code.
        self._selected = code
        self._user_selected = True
        self._store.set_many({PREFERRED_CURRENCY_KEY: code, USER_SELECTED_KEY: "true"})

    def currency_info(self, code: Optional[str] = None) -> Optional[SupportedCurrency]:
        return find_currency(code or self._selected)

    def display_label(self, code: Optional[str] = None) -> str:
        code = code or self._selected
        info = find_currency(code)
        if info is None:
            return code
        return f"{info.flag} {info.code} ({info.symbol})"

    # Conversion & formatting -----------------------------------
    def convert_detailed(
        self, amount: float, from_currency: str, to_currency: Optional[str] = None
    ) -> ConversionResult:
        return convert_amount(
            amount,
            from_currency,
            to_currency or self._selected,
            self._rates,
            base=self._settings.base_currency,
        )

    def convert(
        self, amount: float, from_currency: str, to_currency: Optional[str] = None
    ) -> float:
        return self.convert_detailed(amount, from_currency, to_currency).converted_amount

    def format(self, amount: float, currency: Optional[str] = None) -> str:
        code = currency or self._selected
        info = find_currency(code)
        symbol = info.symbol if info else code
        return f"{symbol}{group_thousands(amount)}"

    def format_salary_range(
        self,
        minimum: float,
        maximum: float,
        currency: str,
        convert: bool = True,
    ) -> str:
        """Job-card salary text, e.g. '£40,000 - £55,000'."""
        target = self._selected if convert else currency
        low = self.convert(minimum, currency, target)
        high = self.convert(maximum, currency, target)
        return f"{self.format(low, target)} - {self.format(high, target)}"

    def format_price(self, price: float, base_currency: str = "USD") -> str:
        """Pricing-card text for a plan price quoted in ``base_currency``."""
        return self.format(self.convert(price, base_currency), self._selected)


def build_currency_service(
    settings: Settings,
    *,
    store: Optional[KeyValueStore] = None,
    fetch_json: Optional[JsonFetcher] = None,
    clock: Clock = time.time,
) -> CurrencyService:
    if store is None:
        store = SqliteKeyValueStore(settings.db_path)  # type: ignore[arg-type]
    return CurrencyService(
        settings,
        store=store,
        rate_provider=make_rate_provider(settings, fetch_json=fetch_json),
        geolocation=GeolocationClient(
            str(settings.geolocation_url),
            timeout=settings.geolocation_timeout_seconds,
            fetch_json=fetch_json,
        ),
        clock=clock,
    )
