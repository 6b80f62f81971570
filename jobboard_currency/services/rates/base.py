from __future__ import annotations

"""Rate provider abstraction.

A provider returns a whole rate table anchored to the base currency; the
cache layer decides when to ask for one.
"""
from abc import ABC, abstractmethod
from typing import Dict


class RateProvider(ABC):
    base_currency: str = "USD"

    @abstractmethod
    def fetch_rates(self) -> Dict[str, float]:
        """Return units of each currency per 1 unit of the base currency.

        Raises RateFetchFailure when no usable table can be produced.
        """
        raise NotImplementedError
