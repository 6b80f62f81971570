import logging

import pytest

from jobboard_currency.core.config import Settings
from jobboard_currency.core.errors import DetectionFailure
from jobboard_currency.db.store import MemoryKeyValueStore
from jobboard_currency.models.constants import PREFERRED_CURRENCY_KEY, USER_SELECTED_KEY
from jobboard_currency.services.currency_service import build_currency_service
from jobboard_currency.services.geolocation import GeolocationClient, currency_for_country
from jobboard_currency.services.http_client import HttpError

from .conftest import GEO_URL


class TestDetectCurrency:
    def test_country_maps_to_currency(self, service, fetcher):
        fetcher.responses[GEO_URL] = {"country_code": "NG", "country_name": "Nigeria"}
        assert service.detect_currency() == "NGN"
        assert service.detected_currency == "NGN"
        assert service.selected_currency == "NGN"

    def test_timeout_falls_back_to_default_silently(self, tmp_path, store, fetcher, clock, caplog):
        settings = Settings(
            data_dir=tmp_path,
            geolocation_url=GEO_URL,
            geolocation_timeout_seconds=0.05,
        )
        settings.init_post_load()
        fetcher.responses[GEO_URL] = ("sleep", 0.5, {"country_code": "NG"})
        svc = build_currency_service(settings, store=store, fetch_json=fetcher, clock=clock)

        with caplog.at_level(logging.INFO, logger="jobboard_currency.service"):
            assert svc.detect_currency() == "GBP"

        assert svc.selected_currency == "GBP"
        assert svc.detected_currency == "GBP"
        assert svc.error is None
        assert "currency detection failed" in caplog.text

    def test_default_deadline_is_three_seconds(self):
        assert Settings.model_fields["geolocation_timeout_seconds"].default == 3.0

    def test_network_error_falls_back(self, service, fetcher):
        fetcher.responses[GEO_URL] = HttpError("connection refused")
        assert service.detect_currency() == "GBP"
        assert service.error is None

    def test_connection_reset_falls_back(self, service, fetcher):
        fetcher.responses[GEO_URL] = ConnectionResetError(104, "Connection reset by peer")
        assert service.detect_currency() == "GBP"
        assert service.detected_currency == "GBP"
        assert service.error is None

    @pytest.mark.parametrize(
        "body",
        [{}, {"country_code": None}, {"country_code": 44}, {"country_code": "Britain"}],
    )
    def test_unexpected_body_falls_back(self, service, fetcher, body):
        fetcher.responses[GEO_URL] = body
        assert service.detect_currency() == "GBP"

    def test_unmapped_country_uses_default(self, service, fetcher):
        fetcher.responses[GEO_URL] = {"country_code": "JP"}
        assert service.detect_currency() == "GBP"

    def test_explicit_choice_is_not_overridden(self, service, fetcher):
        service.set_selected_currency("KES")
        fetcher.responses[GEO_URL] = {"country_code": "CA"}
        assert service.detect_currency() == "CAD"
        assert service.detected_currency == "CAD"
        assert service.selected_currency == "KES"

    def test_geolocation_is_called_without_retries(self, service, fetcher):
        service.detect_currency()
        url, kwargs = fetcher.calls[0]
        assert url == GEO_URL
        assert kwargs["retries"] == 0
        assert kwargs["timeout"] == pytest.approx(3.0)


class TestPreference:
    def test_selection_is_persisted(self, service, store):
        service.set_selected_currency("ZAR")
        assert store.get(PREFERRED_CURRENCY_KEY) == "ZAR"
        assert store.get(USER_SELECTED_KEY) == "true"

    def test_persisted_selection_survives_new_session(self, settings, fetcher, clock):
        store = MemoryKeyValueStore({PREFERRED_CURRENCY_KEY: "EUR", USER_SELECTED_KEY: "true"})
        svc = build_currency_service(settings, store=store, fetch_json=fetcher, clock=clock)
        assert svc.selected_currency == "EUR"
        svc.detect_currency()  # fetcher answers GB
        assert svc.detected_currency == "GBP"
        assert svc.selected_currency == "EUR"

    def test_unsupported_persisted_code_is_ignored(self, settings, fetcher, clock):
        store = MemoryKeyValueStore({PREFERRED_CURRENCY_KEY: "XYZ", USER_SELECTED_KEY: "true"})
        svc = build_currency_service(settings, store=store, fetch_json=fetcher, clock=clock)
        assert svc.selected_currency == "USD"
        svc.detect_currency()
        assert svc.selected_currency == "GBP"

    def test_unsupported_selection_is_accepted_as_is(self, service):
        service.set_selected_currency("JPY")
        assert service.selected_currency == "JPY"
        assert service.currency_info() is None
        assert service.state().selected is None
        assert service.format(1500) == "JPY1,500"


class TestGeolocationClient:
    def test_normalizes_country_code(self):
        client = GeolocationClient(GEO_URL, fetch_json=lambda url, **kw: {"country_code": " ke "})
        assert client.country_code() == "KE"

    def test_wraps_transport_errors(self):
        def boom(url, **kw):
            raise HttpError("HTTP 503")

        client = GeolocationClient(GEO_URL, fetch_json=boom)
        with pytest.raises(DetectionFailure):
            client.country_code()

    def test_country_table(self):
        assert currency_for_country("uk") == "GBP"
        assert currency_for_country("FR") == "EUR"
        assert currency_for_country("BR") is None
