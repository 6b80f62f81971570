"""IP geolocation lookup used to guess a visitor's display currency.

The lookup is raced against a short deadline; anything other than a timely
JSON body with a two-letter ``country_code`` is a ``DetectionFailure``.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from jobboard_currency.core.errors import DetectionFailure
from jobboard_currency.models.constants import COUNTRY_CURRENCY
from jobboard_currency.services.http_client import (
    HttpError,
    JsonFetcher,
    call_with_deadline,
    get_json,
)

logger = logging.getLogger("jobboard_currency.geolocation")


class GeolocationClient:
    def __init__(
        self,
        url: str,
        *,
        timeout: float = 3.0,
        fetch_json: Optional[JsonFetcher] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._fetch_json = fetch_json or get_json

    def country_code(self) -> str:
        try:
            data = call_with_deadline(
                lambda: self._fetch_json(self.url, timeout=self.timeout, retries=0),
                self.timeout,
            )
        except (HttpError, OSError) as e:
            raise DetectionFailure(str(e)) from e
        code = data.get("country_code") if isinstance(data, dict) else None
        if not isinstance(code, str) or len(code.strip()) != 2:
            raise DetectionFailure(f"unexpected geolocation body: {data!r}")
        return code.strip().upper()


def currency_for_country(
    country_code: str, mapping: Dict[str, str] = COUNTRY_CURRENCY
) -> Optional[str]:
    return mapping.get(country_code.upper())
