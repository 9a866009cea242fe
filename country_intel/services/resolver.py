"""
Identifier resolution.

Turns a free-form country token into one canonical record:

1. Trim the token.
2. Two or three characters: look it up as an alpha-2/alpha-3 code.
   Anything else: look it up as an exact (full-text) name.
3. If that first attempt fails or comes back empty, retry once as a partial
   name search.

When the upstream returns several matches the first one wins. The order is
the upstream's, so the same token always resolves to the same country.
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Optional

from ..exceptions import DataProviderError, NotFoundError, ValidationError
from ..models import CountryRecord
from ..providers.restcountries import RestCountriesProvider
from .normalizer import normalize_many

logger = logging.getLogger(__name__)

CODE_LENGTHS = (2, 3)


def looks_like_code(token: str) -> bool:
    return len(token) in CODE_LENGTHS


class CountryResolver:
    """Resolves country codes and names against the upstream provider."""

    def __init__(self, provider: Optional[RestCountriesProvider] = None) -> None:
        self.provider = provider or RestCountriesProvider()

    async def resolve(self, token: str, field: str = "query") -> CountryRecord:
        """Resolve ``token`` to a single ``CountryRecord``.

        ``field`` names the input the token came from in validation errors.

        Raises:
            ValidationError: the token is empty after trimming
            NotFoundError: neither attempt matched anything
            UpstreamError: the fallback search hit an upstream failure
        """
        query = (token or "").strip()
        if not query:
            raise ValidationError("Country identifier must not be empty", field=field)

        if looks_like_code(query):
            primary = self.provider.by_code(query)
        else:
            primary = self.provider.by_name(query, full_text=True)

        try:
            return await self._first_match(primary, query)
        except DataProviderError as e:
            logger.info(f"Primary lookup for '{query}' failed ({e.code}), falling back to partial name search")

        return await self._first_match(self.provider.by_name(query), query)

    @staticmethod
    async def _first_match(request: Awaitable[Any], query: str) -> CountryRecord:
        records = normalize_many(await request)
        if not records:
            raise NotFoundError(f"No country matches '{query}'", provider="RestCountries")
        return records[0]
