from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

import httpx

BASE_URL = "https://restcountries.com/v3.1"


class MockRequest:
    def __init__(self, url: str):
        self.url = url


class MockAsyncResponse:
    def __init__(
        self,
        json_data: Any,
        *,
        headers: Optional[Dict[str, str]] = None,
        request_url: Optional[str] = None,
        status_code: int = 200,
        invalid_json: bool = False,
    ) -> None:
        self._json = json_data
        self.headers = headers or {}
        self.request = MockRequest(request_url or f"{BASE_URL}/mock")
        self.status_code = status_code
        self._invalid_json = invalid_json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise httpx.HTTPStatusError(
                f"HTTP {self.status_code}",
                request=httpx.Request("GET", self.request.url),
                response=self,
            )

    def json(self) -> Any:
        if self._invalid_json:
            raise json.JSONDecodeError("Expecting value", "<html>", 0)
        return self._json


def not_found() -> MockAsyncResponse:
    return MockAsyncResponse({"status": 404, "message": "Not Found"}, status_code=404)


class RoutedAsyncClient:
    """Stand-in for ``httpx.AsyncClient`` that answers from a route table.

    Routes are keyed by the path below ``BASE_URL`` with URL-decoding applied
    and query parameters appended in sorted order, e.g. ``"alpha/FR"``,
    ``"name/Korea"`` or ``"alpha?codes=ESP"``. A route value can be a
    payload, a ``MockAsyncResponse`` or an exception to raise. Unknown routes
    answer 404 like the real API. Every requested key is recorded in ``calls``.
    """

    def __init__(self, routes: Dict[str, Any]) -> None:
        self.routes = routes
        self.calls: List[str] = []

    @staticmethod
    def route_key(url: str, params: Optional[Dict[str, Any]] = None) -> str:
        path = unquote(url[len(BASE_URL):] if url.startswith(BASE_URL) else url).lstrip("/")
        if params:
            path += "?" + "&".join(f"{key}={value}" for key, value in sorted(params.items()))
        return path

    async def get(self, url: str, *, params: Optional[Dict[str, Any]] = None, **_kwargs) -> MockAsyncResponse:
        key = self.route_key(str(url), params)
        self.calls.append(key)
        # Yield once so concurrent callers really interleave
        await asyncio.sleep(0)

        if key not in self.routes:
            return not_found()
        value = self.routes[key]
        if isinstance(value, BaseException):
            raise value
        if isinstance(value, MockAsyncResponse):
            value.request = MockRequest(str(url))
            return value
        return MockAsyncResponse(value, request_url=str(url))


class GatedAsyncClient(RoutedAsyncClient):
    """``RoutedAsyncClient`` whose ``gated`` routes block until released.

    The gate opens by itself once ``open_at`` gated requests are in flight
    at the same time; with ``open_at=None`` it stays shut. Requests
    cancelled while blocked are recorded in ``cancelled``.
    """

    def __init__(self, routes: Dict[str, Any], gated: List[str], open_at: Optional[int] = None) -> None:
        super().__init__(routes)
        self.gated = set(gated)
        self.open_at = open_at
        self.in_flight = 0
        self.peak_in_flight = 0
        self.cancelled: List[str] = []
        self.release = asyncio.Event()

    async def get(self, url: str, *, params: Optional[Dict[str, Any]] = None, **kwargs) -> MockAsyncResponse:
        key = self.route_key(str(url), params)
        if key not in self.gated:
            return await super().get(url, params=params, **kwargs)

        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.open_at is not None and self.in_flight >= self.open_at:
                self.release.set()
            await self.release.wait()
        except asyncio.CancelledError:
            self.cancelled.append(key)
            raise
        finally:
            self.in_flight -= 1
        return await super().get(url, params=params, **kwargs)


def run(coro):
    """Helper to run async functions in synchronous tests."""
    return asyncio.run(coro)


# ============================================================================
# REST Countries v3.1 payloads
# ============================================================================

def country_payload(
    common: str,
    official: str,
    cca2: str,
    cca3: str,
    *,
    ccn3: Optional[str] = None,
    region: str = "Europe",
    subregion: Optional[str] = None,
    capital: Optional[List[str]] = None,
    population: Optional[int] = None,
    area: Optional[float] = None,
    borders: Optional[List[str]] = None,
    languages: Optional[Dict[str, str]] = None,
    currencies: Optional[Dict[str, Dict[str, str]]] = None,
    landlocked: bool = False,
    flag: str = "",
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "name": {"common": common, "official": official, "nativeName": {}},
        "cca2": cca2,
        "cca3": cca3,
        "ccn3": ccn3,
        "region": region,
        "subregion": subregion,
        "capital": capital or [],
        "landlocked": landlocked,
        "borders": borders or [],
        "languages": languages or {},
        "currencies": currencies or {},
        "flag": flag,
        "flags": {
            "png": f"https://flagcdn.com/w320/{cca2.lower()}.png",
            "svg": f"https://flagcdn.com/{cca2.lower()}.svg",
        },
        "timezones": ["UTC+01:00"],
    }
    if population is not None:
        payload["population"] = population
    if area is not None:
        payload["area"] = area
    return payload


EURO = {"EUR": {"name": "Euro", "symbol": "€"}}

FRANCE = country_payload(
    "France", "French Republic", "FR", "FRA", ccn3="250",
    subregion="Western Europe", capital=["Paris"],
    population=67391582, area=551695.0,
    borders=["AND", "BEL", "DEU", "ITA", "LUX", "MCO", "ESP", "CHE"],
    languages={"fra": "French"}, currencies=EURO, flag="\U0001F1EB\U0001F1F7",
)
FRANCE["name"]["nativeName"] = {"fra": {"official": "République française", "common": "France"}}
FRANCE["cioc"] = "FRA"
FRANCE["idd"] = {"root": "+3", "suffixes": ["3"]}
FRANCE["latlng"] = [46.0, 2.0]

GERMANY = country_payload(
    "Germany", "Federal Republic of Germany", "DE", "DEU", ccn3="276",
    subregion="Western Europe", capital=["Berlin"],
    population=83240525, area=357114.0,
    borders=["AUT", "BEL", "CZE", "DNK", "FRA", "LUX", "NLD", "POL", "CHE"],
    languages={"deu": "German"}, currencies=EURO, flag="\U0001F1E9\U0001F1EA",
)

PORTUGAL = country_payload(
    "Portugal", "Portuguese Republic", "PT", "PRT", ccn3="620",
    subregion="Southern Europe", capital=["Lisbon"],
    population=10305564, area=92090.0, borders=["ESP"],
    languages={"por": "Portuguese"}, currencies=EURO,
)

SPAIN = country_payload(
    "Spain", "Kingdom of Spain", "ES", "ESP", ccn3="724",
    subregion="Southern Europe", capital=["Madrid"],
    population=47351567, area=505992.0, borders=["AND", "FRA", "GIB", "PRT", "MAR"],
    languages={"spa": "Spanish"}, currencies=EURO,
)

SWITZERLAND = country_payload(
    "Switzerland", "Swiss Confederation", "CH", "CHE", ccn3="756",
    subregion="Western Europe", capital=["Bern"],
    population=8654622, area=41284.0, borders=["AUT", "FRA", "ITA", "LIE", "DEU"],
    languages={"fra": "French", "gsw": "Swiss German", "ita": "Italian", "roh": "Romansh"},
    currencies={"CHF": {"name": "Swiss franc", "symbol": "Fr."}}, landlocked=True,
)

SOUTH_KOREA = country_payload(
    "South Korea", "Republic of Korea", "KR", "KOR", ccn3="410",
    region="Asia", subregion="Eastern Asia", capital=["Seoul"],
    population=51780579, area=100210.0, borders=["PRK"],
    languages={"kor": "Korean"}, currencies={"KRW": {"name": "South Korean won", "symbol": "₩"}},
)

NORTH_KOREA = country_payload(
    "North Korea", "Democratic People's Republic of Korea", "KP", "PRK", ccn3="408",
    region="Asia", subregion="Eastern Asia", capital=["Pyongyang"],
    population=25778815, area=120538.0, borders=["CHN", "KOR", "RUS"],
    languages={"kor": "Korean"}, currencies={"KPW": {"name": "North Korean won", "symbol": "₩"}},
)

ICELAND = country_payload(
    "Iceland", "Iceland", "IS", "ISL", ccn3="352",
    subregion="Northern Europe", capital=["Reykjavik"],
    population=366425, area=103000.0,
    languages={"isl": "Icelandic"}, currencies={"ISK": {"name": "Icelandic króna", "symbol": "kr"}},
)
