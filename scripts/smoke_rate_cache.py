"""Smoke script for the persisted rate cache.

Demonstrates:
 1. First load triggers a provider fetch and writes the snapshot.
 2. A second load within the freshness window reuses the snapshot (same timestamp).
 3. Backdating the stored timestamp beyond the window forces a refetch.

NOTE: This is a lightweight diagnostic and not a formal test. Uses the
configured provider (set EXCHANGE_RATE_PROVIDER=static to stay offline).
"""

import os
import sys
import tempfile
from pprint import pprint

from jobboard_currency.core.config import Settings
from jobboard_currency.db.store import SqliteKeyValueStore
from jobboard_currency.models.constants import RATES_TIMESTAMP_KEY
from jobboard_currency.services.currency_service import build_currency_service


def run():
    with tempfile.TemporaryDirectory() as d:
        settings = Settings(data_dir=d)
        settings.init_post_load()
        store = SqliteKeyValueStore(settings.db_path)
        svc = build_currency_service(settings, store=store)
        out = {}

        svc.load_rates()
        out["initial"] = {"fetched_at": str(svc.state().rates_fetched_at), "error": svc.error}

        svc.load_rates()
        out["second"] = {"fetched_at": str(svc.state().rates_fetched_at), "error": svc.error}

        stale_ms = int(store.get(RATES_TIMESTAMP_KEY) or 0) - (
            settings.rates_cache_ttl_seconds + 5
        ) * 1000
        store.set(RATES_TIMESTAMP_KEY, str(stale_ms))
        svc.load_rates()
        out["forced_refresh"] = {"fetched_at": str(svc.state().rates_fetched_at), "error": svc.error}

        out["sample"] = {
            "100 USD -> GBP": svc.format(svc.convert(100, "USD", "GBP"), "GBP"),
            "50000 GBP -> NGN": svc.format(svc.convert(50000, "GBP", "NGN"), "NGN"),
        }
        pprint(out)


if __name__ == "__main__":
    sys.path.append(os.getcwd())
    run()
