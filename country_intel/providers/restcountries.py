from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..config import get_settings
from .base import BaseProvider

logger = logging.getLogger(__name__)


class RestCountriesProvider(BaseProvider):
    """REST Countries v3.1 provider.

    Every method returns the decoded JSON exactly as the API sent it, which is
    either a single object or an array of objects. Turning that into
    ``CountryRecord`` instances is the normalizer's job.
    Documentation: https://restcountries.com
    """

    OVERVIEW_FIELDS = ("name", "cca2")

    @property
    def provider_name(self) -> str:
        return "RestCountries"

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None) -> None:
        settings = get_settings()
        super().__init__(
            base_url=base_url or settings.restcountries_base_url,
            timeout=timeout if timeout is not None else settings.upstream_timeout,
        )

    async def all(self, fields: Sequence[str] = OVERVIEW_FIELDS) -> Any:
        # /all rejects requests without an explicit field list
        return await self._get_json(self._url("all"), params={"fields": ",".join(fields)})

    async def by_code(self, code: str) -> Any:
        return await self._get_json(self._url("alpha", code))

    async def by_name(self, name: str, full_text: bool = False) -> Any:
        params = {"fullText": "true"} if full_text else None
        return await self._get_json(self._url("name", name), params=params)

    async def by_region(self, region: str) -> Any:
        return await self._get_json(self._url("region", region))

    async def by_subregion(self, subregion: str) -> Any:
        return await self._get_json(self._url("subregion", subregion))

    async def by_currency(self, currency: str) -> Any:
        return await self._get_json(self._url("currency", currency))

    async def by_language(self, language: str) -> Any:
        return await self._get_json(self._url("lang", language))

    async def by_codes(self, codes: Sequence[str]) -> Any:
        """Look up several alpha codes in one request."""
        joined = ",".join(code.strip() for code in codes)
        logger.info(f"RestCountries: batched lookup of {len(codes)} code(s)")
        return await self._get_json(self._url("alpha"), params={"codes": joined})
