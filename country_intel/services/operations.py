"""
Operation catalog.

``CATALOG`` is the complete, fixed list of operations the service exposes:
one free overview and five priced queries. Each entry names its input model,
its price and the handler that composes resolver, batch fetcher and
derivations into a result. Prices are integer amounts in millionths of a USD.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, Type, Union

import pydantic
from pydantic import BaseModel

from ..exceptions import ValidationError
from ..models import (
    CompareInput,
    CompareOutput,
    ComparedCountry,
    Commonalities,
    CountryRecord,
    CountrySummary,
    EndpointSummary,
    LookupInput,
    LookupName,
    LookupOutput,
    NeighborsInput,
    NeighborsOutput,
    OverviewInput,
    OverviewOutput,
    Rankings,
    RegionCountry,
    RegionInput,
    RegionOutput,
    SampleCountry,
    SearchInput,
    SearchOutput,
    SearchResult,
    Totals,
)
from ..providers.restcountries import RestCountriesProvider
from . import derivations
from .batch import BatchFetcher
from .normalizer import normalize_many
from .resolver import CountryResolver

logger = logging.getLogger(__name__)

DATA_SOURCE = "REST Countries API (live)"
SAMPLE_SIZE = 5
MICRO_USD = 1_000_000


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================================
# Record projections
# ============================================================================

def _search_result(record: CountryRecord) -> SearchResult:
    return SearchResult(
        name=record.name.common,
        official=record.name.official,
        cca2=record.codes.cca2,
        cca3=record.codes.cca3,
        region=record.region,
        subregion=record.subregion,
        capital=record.capital,
        population=record.population,
        currencies=record.currencies,
        languages=record.languages,
        flag=record.flag,
    )


def _region_country(record: CountryRecord) -> RegionCountry:
    return RegionCountry(
        name=record.name.common,
        cca2=record.codes.cca2,
        cca3=record.codes.cca3,
        capital=record.capital,
        population=record.population,
        area=record.area,
        subregion=record.subregion,
        flag=record.flag,
    )


def _summary(record: CountryRecord) -> CountrySummary:
    return CountrySummary(
        name=record.name.common,
        official=record.name.official,
        cca2=record.codes.cca2,
        cca3=record.codes.cca3,
        capital=record.capital,
        region=record.region,
        subregion=record.subregion,
        landlocked=record.landlocked,
        flag=record.flag,
    )


def _compared(record: CountryRecord) -> ComparedCountry:
    return ComparedCountry(
        name=record.name.common,
        official=record.name.official,
        cca2=record.codes.cca2,
        cca3=record.codes.cca3,
        capital=record.capital,
        region=record.region,
        subregion=record.subregion,
        population=record.population,
        area=record.area,
        populationDensity=derivations.population_density(record),
        languages=record.languages,
        currencies=record.currencies,
        timezones=record.timezones,
        borders=record.borders,
        landlocked=record.landlocked,
        independent=record.independent,
        unMember=record.unMember,
        flag=record.flag,
    )


def _lookup(record: CountryRecord) -> LookupOutput:
    return LookupOutput(
        name=LookupName(
            common=record.name.common,
            official=record.name.official,
            native=record.name.native,
        ),
        codes=record.codes,
        capital=record.capital,
        region=record.region,
        subregion=record.subregion,
        languages=record.languages,
        currencies=record.currencies,
        callingCodes=record.idd,
        timezones=record.timezones,
        population=record.population,
        area=record.area,
        borders=record.borders,
        flag=record.flag,
        flagPng=record.flags.png,
        flagSvg=record.flags.svg,
        coatOfArms=record.coatOfArms,
        maps=record.maps,
        car=record.car,
        startOfWeek=record.startOfWeek,
        independent=record.independent,
        unMember=record.unMember,
        landlocked=record.landlocked,
        latlng=record.latlng,
        fetchedAt=_now(),
    )


# ============================================================================
# Service
# ============================================================================

class CountryIntelService:
    """Holds the collaborators an operation handler needs.

    Instances carry no per-request state, so one can serve any number of
    concurrent invocations.
    """

    def __init__(self, provider: Optional[RestCountriesProvider] = None) -> None:
        self.provider = provider or RestCountriesProvider()
        self.resolver = CountryResolver(self.provider)
        self.fetcher = BatchFetcher(self.resolver, self.provider)

    async def overview(self, params: OverviewInput) -> OverviewOutput:
        records = normalize_many(await self.provider.all())
        return OverviewOutput(
            totalCountries=len(records),
            sample=[
                SampleCountry(name=record.name.common, code=record.codes.cca2)
                for record in records[:SAMPLE_SIZE]
            ],
            fetchedAt=_now(),
            dataSource=DATA_SOURCE,
            availableEndpoints=[
                EndpointSummary(key=op.key, price=op.price_usd, description=op.description)
                for op in CATALOG
                if op.price > 0
            ],
        )

    async def lookup(self, params: LookupInput) -> LookupOutput:
        record = await self.resolver.resolve(params.query)
        return _lookup(record)

    async def search(self, params: SearchInput) -> SearchOutput:
        if params.by == "currency":
            payload = await self.provider.by_currency(params.query)
        elif params.by == "language":
            payload = await self.provider.by_language(params.query)
        else:
            payload = await self.provider.by_name(params.query)

        results = normalize_many(payload)[: params.limit]
        logger.info(f"search by {params.by} '{params.query}': {len(results)} result(s)")
        return SearchOutput(
            searchBy=params.by,
            query=params.query,
            count=len(results),
            countries=[_search_result(record) for record in results],
            fetchedAt=_now(),
        )

    async def region(self, params: RegionInput) -> RegionOutput:
        if params.subregion:
            payload = await self.provider.by_subregion(params.region)
        else:
            payload = await self.provider.by_region(params.region)

        records = normalize_many(payload)
        return RegionOutput(
            region=params.region,
            isSubregion=params.subregion,
            count=len(records),
            countries=[_region_country(record) for record in records],
            totalPopulation=derivations.total(records, "population"),
            totalArea=derivations.total(records, "area"),
            fetchedAt=_now(),
        )

    async def neighbors(self, params: NeighborsInput) -> NeighborsOutput:
        country = await self.resolver.resolve(params.country, field="country")
        neighbors = await self.fetcher.fetch_by_border_codes(country.borders)
        return NeighborsOutput(
            country=_summary(country),
            borderCount=len(neighbors),
            neighbors=[_search_result(record) for record in neighbors],
            sharedLanguages=derivations.union_keys(neighbors, "languages"),
            sharedCurrencies=derivations.union_keys(neighbors, "currencies"),
            fetchedAt=_now(),
        )

    async def compare(self, params: CompareInput) -> CompareOutput:
        records = await self.fetcher.fetch_batch(params.countries)
        return CompareOutput(
            count=len(records),
            countries=[_compared(record) for record in records],
            rankings=Rankings(
                byPopulation=derivations.rank_by(records, lambda r: r.population, "population"),
                byArea=derivations.rank_by(records, lambda r: r.area, "area"),
                byDensity=derivations.rank_by(records, derivations.population_density, "density"),
            ),
            totals=Totals(
                combinedPopulation=derivations.total(records, "population"),
                combinedArea=derivations.total(records, "area"),
            ),
            commonalities=Commonalities(
                sharedRegion=derivations.shared_value(records, "region"),
                sharedSubregion=derivations.shared_value(records, "subregion"),
                sharedLanguages=derivations.intersect_keys(records, "languages"),
                sharedCurrencies=derivations.intersect_keys(records, "currencies"),
            ),
            fetchedAt=_now(),
        )


# ============================================================================
# Catalog
# ============================================================================

Handler = Callable[[CountryIntelService, Any], Awaitable[BaseModel]]


@dataclass(frozen=True)
class Operation:
    key: str
    description: str
    price: int
    input_model: Type[BaseModel]
    handler: Handler

    @property
    def price_usd(self) -> str:
        return f"${self.price / MICRO_USD:g}"

    @property
    def is_paid(self) -> bool:
        return self.price > 0


CATALOG: Tuple[Operation, ...] = (
    Operation(
        key="overview",
        description="Free overview - get total country count and sample data. Try before you buy.",
        price=0,
        input_model=OverviewInput,
        handler=CountryIntelService.overview,
    ),
    Operation(
        key="lookup",
        description="Get comprehensive details for a country by ISO code (US, GB, AU) or name",
        price=1000,
        input_model=LookupInput,
        handler=CountryIntelService.lookup,
    ),
    Operation(
        key="search",
        description="Search countries by partial name, currency code, or language code",
        price=2000,
        input_model=SearchInput,
        handler=CountryIntelService.search,
    ),
    Operation(
        key="region",
        description="Get all countries in a region (Africa, Americas, Asia, Europe, Oceania) or subregion",
        price=2000,
        input_model=RegionInput,
        handler=CountryIntelService.region,
    ),
    Operation(
        key="neighbors",
        description="Get a country and full details of all its bordering neighbors",
        price=3000,
        input_model=NeighborsInput,
        handler=CountryIntelService.neighbors,
    ),
    Operation(
        key="compare",
        description="Compare multiple countries side by side - population, area, density, languages, currencies",
        price=5000,
        input_model=CompareInput,
        handler=CountryIntelService.compare,
    ),
)

OPERATIONS: Dict[str, Operation] = {op.key: op for op in CATALOG}


def get_operation(key: str) -> Operation:
    try:
        return OPERATIONS[key]
    except KeyError:
        raise ValidationError(f"Unknown operation: {key}", field="key") from None


async def invoke(
    key: str,
    params: Union[BaseModel, Mapping[str, Any], None] = None,
    service: Optional[CountryIntelService] = None,
) -> BaseModel:
    """Validate ``params`` against the operation's input model and run it."""
    operation = get_operation(key)
    if isinstance(params, operation.input_model):
        validated = params
    else:
        data = params.model_dump() if isinstance(params, BaseModel) else dict(params or {})
        try:
            validated = operation.input_model.model_validate(data)
        except pydantic.ValidationError as e:
            raise ValidationError(
                f"Invalid input for '{key}'",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

    logger.info(f"Invoking '{key}' (price {operation.price_usd})")
    return await operation.handler(service or CountryIntelService(), validated)
