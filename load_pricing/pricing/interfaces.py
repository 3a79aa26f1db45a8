"""Collaborator contracts consumed by the pricing ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List

from ..models.product import Product, ProductOption


class ProductCatalog(ABC):
    """Product search and fetch by id."""

    @abstractmethod
    async def search(self, query: str) -> List[ProductOption]:
        """Return selection candidates for query.

        Implementations swallow failures and return an empty list.
        """

    @abstractmethod
    async def get(self, product_id: int) -> Product:
        """Fetch one product. Raises on failure."""


class ExchangeRateLookup(ABC):
    """Current exchange rate from a currency to the base currency."""

    @abstractmethod
    async def get_rate(self, currency: str) -> Decimal:
        """Return the multiplier converting currency amounts to base currency.

        Returns 1 for the base currency without any network call. Raises on
        failure; the ledger substitutes 1.
        """
