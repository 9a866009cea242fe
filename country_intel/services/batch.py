"""Batch fetching of several countries at once."""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Sequence

from ..exceptions import ValidationError
from ..models import CountryRecord
from ..providers.restcountries import RestCountriesProvider
from .normalizer import normalize_many
from .resolver import CountryResolver

logger = logging.getLogger(__name__)

MIN_BATCH_SIZE = 2
MAX_BATCH_SIZE = 10


class BatchFetcher:
    """Resolves multiple identifiers into records.

    ``fetch_batch`` resolves each token on its own, concurrently.
    ``fetch_by_border_codes`` uses the provider's multi-code lookup so a
    country's neighbors cost one upstream request.
    """

    def __init__(
        self,
        resolver: Optional[CountryResolver] = None,
        provider: Optional[RestCountriesProvider] = None,
    ) -> None:
        self.resolver = resolver or CountryResolver(provider)
        self.provider = provider or self.resolver.provider

    async def fetch_batch(self, tokens: Sequence[str]) -> List[CountryRecord]:
        """Resolve every token, returning records in input order.

        Fails fast: the first failing resolution cancels the others and its
        error is raised unchanged.
        """
        if not MIN_BATCH_SIZE <= len(tokens) <= MAX_BATCH_SIZE:
            raise ValidationError(
                f"Between {MIN_BATCH_SIZE} and {MAX_BATCH_SIZE} countries are required, got {len(tokens)}",
                field="countries",
            )

        tasks = [asyncio.ensure_future(self.resolver.resolve(token, field="countries")) for token in tokens]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

    async def fetch_by_border_codes(self, codes: Sequence[str]) -> List[CountryRecord]:
        """Fetch the records for a list of alpha-3 border codes.

        An empty list means no land borders and returns ``[]`` without
        touching the upstream. Results follow the order of ``codes``; a
        repeated code yields its record once.
        """
        codes = _unique_codes(codes)
        if not codes:
            return []

        records = normalize_many(await self.provider.by_codes(codes))
        return _order_by_codes(records, codes)


def _unique_codes(codes: Sequence[str]) -> List[str]:
    """Trimmed codes with repeats removed, compared case-insensitively."""
    seen: Dict[str, str] = {}
    for code in codes:
        code = code.strip()
        if code and code.upper() not in seen:
            seen[code.upper()] = code
    return list(seen.values())


def _order_by_codes(records: List[CountryRecord], codes: Sequence[str]) -> List[CountryRecord]:
    by_code: Dict[str, CountryRecord] = {}
    for record in records:
        if record.codes.cca3 and record.codes.cca3.upper() not in by_code:
            by_code[record.codes.cca3.upper()] = record

    placed = [code.upper() for code in _unique_codes(codes) if code.upper() in by_code]
    ordered = [by_code[code] for code in placed]
    # Anything the upstream returned that we could not place keeps upstream order
    ordered.extend(
        record for record in records
        if not record.codes.cca3 or record.codes.cca3.upper() not in placed
    )
    return ordered
