"""Currency constants shared by the service, settings and API layer.

The supported list is fixed at import time; runtime code never mutates it.
"""

from typing import Dict, FrozenSet, Tuple

# (code, symbol, name, flag)
SUPPORTED_CURRENCY_ROWS: Tuple[Tuple[str, str, str, str], ...] = (
    ("USD", "$", "US Dollar", "\U0001F1FA\U0001F1F8"),
    ("GBP", "£", "British Pound", "\U0001F1EC\U0001F1E7"),
    ("EUR", "€", "Euro", "\U0001F1EA\U0001F1FA"),
    ("NGN", "₦", "Nigerian Naira", "\U0001F1F3\U0001F1EC"),
    ("KES", "KSh", "Kenyan Shilling", "\U0001F1F0\U0001F1EA"),
    ("ZAR", "R", "South African Rand", "\U0001F1FF\U0001F1E6"),
    ("GHS", "₵", "Ghanaian Cedi", "\U0001F1EC\U0001F1ED"),
    ("CAD", "C$", "Canadian Dollar", "\U0001F1E8\U0001F1E6"),
)

SUPPORTED_CODES: FrozenSet[str] = frozenset(row[0] for row in SUPPORTED_CURRENCY_ROWS)

# Country (ISO 3166 alpha-2) -> currency used for auto-detection.
# "UK" is not ISO but some geolocation services return it.
COUNTRY_CURRENCY: Dict[str, str] = {
    "US": "USD",
    "GB": "GBP",
    "UK": "GBP",
    "DE": "EUR",
    "FR": "EUR",
    "IT": "EUR",
    "ES": "EUR",
    "NG": "NGN",
    "KE": "KES",
    "ZA": "ZAR",
    "GH": "GHS",
    "CA": "CAD",
}

# Persisted store keys. The two rate keys are read and written as one unit.
RATES_CACHE_KEY = "exchange_rates_cache"
RATES_TIMESTAMP_KEY = "exchange_rates_timestamp"
PREFERRED_CURRENCY_KEY = "preferred_currency"
USER_SELECTED_KEY = "user_selected_currency"

RATES_FALLBACK_ERROR = "Failed to load exchange rates. Showing original currency."
