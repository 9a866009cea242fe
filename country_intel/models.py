"""
Pydantic models shared across the service.

``CountryRecord`` is the canonical, normalized shape of one country. The
``*Input`` models are the validated operation inputs and the ``*Output``
models are the operation results returned under ``output``.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ============================================================================
# Canonical record
# ============================================================================

class NativeName(_Frozen):
    official: Optional[str] = None
    common: Optional[str] = None


class CountryName(_Frozen):
    common: Optional[str] = None
    official: Optional[str] = None
    native: Dict[str, NativeName] = Field(default_factory=dict)


class CountryCodes(_Frozen):
    cca2: Optional[str] = None
    cca3: Optional[str] = None
    ccn3: Optional[str] = None
    cioc: Optional[str] = None


class Currency(_Frozen):
    name: Optional[str] = None
    symbol: Optional[str] = None


class ImageLinks(_Frozen):
    png: Optional[str] = None
    svg: Optional[str] = None
    alt: Optional[str] = None


class CallingCode(_Frozen):
    root: Optional[str] = None
    suffixes: List[str] = Field(default_factory=list)


class MapLinks(_Frozen):
    googleMaps: Optional[str] = None
    openStreetMaps: Optional[str] = None


class CarInfo(_Frozen):
    signs: List[str] = Field(default_factory=list)
    side: Optional[str] = None


class CountryRecord(_Frozen):
    """One country, projected from a raw upstream payload.

    Optional scalars stay ``None`` when the upstream omits them so callers can
    tell "unknown" apart from zero.
    """

    name: CountryName = Field(default_factory=CountryName)
    codes: CountryCodes = Field(default_factory=CountryCodes)

    region: Optional[str] = None
    subregion: Optional[str] = None
    capital: List[str] = Field(default_factory=list)
    latlng: List[float] = Field(default_factory=list)
    landlocked: Optional[bool] = None
    area: Optional[float] = None

    population: Optional[int] = None

    borders: List[str] = Field(default_factory=list)

    currencies: Dict[str, Currency] = Field(default_factory=dict)
    languages: Dict[str, str] = Field(default_factory=dict)

    flag: Optional[str] = None
    flags: ImageLinks = Field(default_factory=ImageLinks)
    coatOfArms: ImageLinks = Field(default_factory=ImageLinks)
    idd: CallingCode = Field(default_factory=CallingCode)
    timezones: List[str] = Field(default_factory=list)

    maps: MapLinks = Field(default_factory=MapLinks)
    car: CarInfo = Field(default_factory=CarInfo)
    startOfWeek: Optional[str] = None
    independent: Optional[bool] = None
    unMember: Optional[bool] = None


# ============================================================================
# Operation inputs
# ============================================================================

class OverviewInput(BaseModel):
    pass


class LookupInput(BaseModel):
    query: str = Field(..., min_length=1, description="ISO 2/3 letter code or country name")


class SearchInput(BaseModel):
    query: str = Field(..., min_length=1, description="Search term")
    by: Literal["name", "currency", "language"] = Field(default="name")
    limit: int = Field(default=10, ge=1, le=250)


class RegionInput(BaseModel):
    region: str = Field(
        ...,
        min_length=1,
        description="Region name (Africa, Americas, Asia, Europe, Oceania) or subregion",
    )
    subregion: bool = Field(default=False, description="Set true if querying a subregion")


class NeighborsInput(BaseModel):
    country: str = Field(..., min_length=1, description="ISO code or country name")


class CompareInput(BaseModel):
    countries: List[str] = Field(
        ...,
        min_length=2,
        max_length=10,
        description="Array of ISO codes or country names",
    )


# ============================================================================
# Operation outputs
# ============================================================================

class EndpointSummary(BaseModel):
    key: str
    price: str
    description: str


class SampleCountry(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None


class OverviewOutput(BaseModel):
    totalCountries: int
    sample: List[SampleCountry]
    fetchedAt: str
    dataSource: str
    availableEndpoints: List[EndpointSummary]


class LookupName(BaseModel):
    common: Optional[str] = None
    official: Optional[str] = None
    native: Dict[str, NativeName] = Field(default_factory=dict)


class LookupOutput(BaseModel):
    name: LookupName
    codes: CountryCodes
    capital: List[str]
    region: Optional[str] = None
    subregion: Optional[str] = None
    languages: Dict[str, str]
    currencies: Dict[str, Currency]
    callingCodes: CallingCode
    timezones: List[str]
    population: Optional[int] = None
    area: Optional[float] = None
    borders: List[str]
    flag: Optional[str] = None
    flagPng: Optional[str] = None
    flagSvg: Optional[str] = None
    coatOfArms: ImageLinks
    maps: MapLinks
    car: CarInfo
    startOfWeek: Optional[str] = None
    independent: Optional[bool] = None
    unMember: Optional[bool] = None
    landlocked: Optional[bool] = None
    latlng: List[float]
    fetchedAt: str


class SearchResult(BaseModel):
    name: Optional[str] = None
    official: Optional[str] = None
    cca2: Optional[str] = None
    cca3: Optional[str] = None
    region: Optional[str] = None
    subregion: Optional[str] = None
    capital: List[str] = Field(default_factory=list)
    population: Optional[int] = None
    currencies: Dict[str, Currency] = Field(default_factory=dict)
    languages: Dict[str, str] = Field(default_factory=dict)
    flag: Optional[str] = None


class SearchOutput(BaseModel):
    searchBy: str
    query: str
    count: int
    countries: List[SearchResult]
    fetchedAt: str


class RegionCountry(BaseModel):
    name: Optional[str] = None
    cca2: Optional[str] = None
    cca3: Optional[str] = None
    capital: List[str] = Field(default_factory=list)
    population: Optional[int] = None
    area: Optional[float] = None
    subregion: Optional[str] = None
    flag: Optional[str] = None


class RegionOutput(BaseModel):
    region: str
    isSubregion: bool
    count: int
    countries: List[RegionCountry]
    totalPopulation: int
    totalArea: float
    fetchedAt: str


class CountrySummary(BaseModel):
    name: Optional[str] = None
    official: Optional[str] = None
    cca2: Optional[str] = None
    cca3: Optional[str] = None
    capital: List[str] = Field(default_factory=list)
    region: Optional[str] = None
    subregion: Optional[str] = None
    landlocked: Optional[bool] = None
    flag: Optional[str] = None


class NeighborsOutput(BaseModel):
    country: CountrySummary
    borderCount: int
    neighbors: List[SearchResult]
    sharedLanguages: List[str]
    sharedCurrencies: List[str]
    fetchedAt: str


class ComparedCountry(BaseModel):
    name: Optional[str] = None
    official: Optional[str] = None
    cca2: Optional[str] = None
    cca3: Optional[str] = None
    capital: List[str] = Field(default_factory=list)
    region: Optional[str] = None
    subregion: Optional[str] = None
    population: Optional[int] = None
    area: Optional[float] = None
    populationDensity: Optional[int] = None
    languages: Dict[str, str] = Field(default_factory=dict)
    currencies: Dict[str, Currency] = Field(default_factory=dict)
    timezones: List[str] = Field(default_factory=list)
    borders: List[str] = Field(default_factory=list)
    landlocked: Optional[bool] = None
    independent: Optional[bool] = None
    unMember: Optional[bool] = None
    flag: Optional[str] = None


class Rankings(BaseModel):
    byPopulation: List[Dict[str, Any]]
    byArea: List[Dict[str, Any]]
    byDensity: List[Dict[str, Any]]


class Totals(BaseModel):
    combinedPopulation: int
    combinedArea: float


class Commonalities(BaseModel):
    sharedRegion: Optional[str] = None
    sharedSubregion: Optional[str] = None
    sharedLanguages: List[str]
    sharedCurrencies: List[str]


class CompareOutput(BaseModel):
    count: int
    countries: List[ComparedCountry]
    rankings: Rankings
    totals: Totals
    commonalities: Commonalities
    fetchedAt: str


# ============================================================================
# Service-level responses
# ============================================================================

class OperationDescriptor(BaseModel):
    key: str
    description: str
    price: int
    priceUsd: str
    inputSchema: Dict[str, Any]


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    upstream: str
    paymentsEnabled: bool
    operations: List[str]
    httpPool: Dict[str, Any]
