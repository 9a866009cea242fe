"""
Record normalization.

This is the only module that looks at raw REST Countries payloads. It turns
whatever the upstream sent (one object, an array of objects, v3.1 or the
legacy v2 field layout) into ``CountryRecord`` instances. Values are moved,
never invented: a field the upstream omitted stays ``None`` or empty.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Mapping, Optional

from ..models import (
    CallingCode,
    CarInfo,
    CountryCodes,
    CountryName,
    CountryRecord,
    Currency,
    ImageLinks,
    MapLinks,
    NativeName,
)

logger = logging.getLogger(__name__)


def _get(raw: Mapping[str, Any], *names: str) -> Any:
    """Return the first present key among ``names``, matching case-insensitively."""
    for name in names:
        if name in raw:
            return raw[name]
    lowered = {str(key).lower(): value for key, value in raw.items()}
    for name in names:
        if name.lower() in lowered:
            return lowered[name.lower()]
    return None


def _str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _str_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return []


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # NaN and infinities are valid JSON to httpx but not valid figures
    return isinstance(value, int) or math.isfinite(value)


def _bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _population(value: Any) -> Optional[int]:
    if not _is_number(value) or value < 0:
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    return int(value)


def _area(value: Any) -> Optional[float]:
    if not _is_number(value) or value < 0:
        return None
    return float(value)


def _name(raw: Mapping[str, Any]) -> CountryName:
    value = _get(raw, "name")
    if isinstance(value, str):
        # v2 layout: plain string name, native name as a sibling string
        return CountryName(common=value)

    value = _mapping(value)
    native: Dict[str, NativeName] = {}
    for lang, variants in _mapping(_get(value, "nativeName", "native")).items():
        variants = _mapping(variants)
        native[str(lang)] = NativeName(
            official=_str(variants.get("official")),
            common=_str(variants.get("common")),
        )
    return CountryName(
        common=_str(_get(value, "common")),
        official=_str(_get(value, "official")),
        native=native,
    )


def _codes(raw: Mapping[str, Any]) -> CountryCodes:
    return CountryCodes(
        cca2=_str(_get(raw, "cca2", "alpha2Code")),
        cca3=_str(_get(raw, "cca3", "alpha3Code")),
        ccn3=_str(_get(raw, "ccn3", "numericCode")),
        cioc=_str(_get(raw, "cioc")),
    )


def _currencies(value: Any) -> Dict[str, Currency]:
    currencies: Dict[str, Currency] = {}
    if isinstance(value, Mapping):
        for code, info in value.items():
            info = _mapping(info)
            currencies[str(code)] = Currency(name=_str(info.get("name")), symbol=_str(info.get("symbol")))
    elif isinstance(value, list):
        for info in value:
            info = _mapping(info)
            code = _str(info.get("code"))
            if code:
                currencies[code] = Currency(name=_str(info.get("name")), symbol=_str(info.get("symbol")))
    return currencies


def _languages(value: Any) -> Dict[str, str]:
    languages: Dict[str, str] = {}
    if isinstance(value, Mapping):
        for code, name in value.items():
            if isinstance(name, str):
                languages[str(code)] = name
    elif isinstance(value, list):
        for info in value:
            info = _mapping(info)
            code = _str(info.get("iso639_2")) or _str(info.get("iso639_1"))
            name = _str(info.get("name"))
            if code and name:
                languages[code] = name
    return languages


def _images(value: Any) -> ImageLinks:
    if isinstance(value, list):
        urls = _str_list(value)
        return ImageLinks(
            png=next((url for url in urls if url.endswith(".png")), None),
            svg=next((url for url in urls if url.endswith(".svg")), None),
        )
    value = _mapping(value)
    return ImageLinks(png=_str(value.get("png")), svg=_str(value.get("svg")), alt=_str(value.get("alt")))


def _latlng(value: Any) -> List[float]:
    if not isinstance(value, list):
        return []
    return [float(item) for item in value if _is_number(item)]


def normalize(raw: Any) -> CountryRecord:
    """Project one raw upstream country payload onto ``CountryRecord``.

    Never raises: anything that is not a mapping yields an empty record, and
    fields of the wrong type are dropped rather than coerced.
    """
    if not isinstance(raw, Mapping):
        logger.debug(f"normalize: ignoring non-object payload of type {type(raw).__name__}")
        return CountryRecord()

    idd = _mapping(_get(raw, "idd"))
    maps = _mapping(_get(raw, "maps"))
    car = _mapping(_get(raw, "car"))

    return CountryRecord(
        name=_name(raw),
        codes=_codes(raw),
        region=_str(_get(raw, "region")),
        subregion=_str(_get(raw, "subregion")),
        capital=_str_list(_get(raw, "capital")),
        latlng=_latlng(_get(raw, "latlng")),
        landlocked=_bool(_get(raw, "landlocked")),
        area=_area(_get(raw, "area")),
        population=_population(_get(raw, "population")),
        borders=_str_list(_get(raw, "borders")),
        currencies=_currencies(_get(raw, "currencies")),
        languages=_languages(_get(raw, "languages")),
        flag=_str(_get(raw, "flag")),
        flags=_images(_get(raw, "flags")),
        coatOfArms=_images(_get(raw, "coatOfArms")),
        idd=CallingCode(root=_str(idd.get("root")), suffixes=_str_list(idd.get("suffixes"))),
        timezones=_str_list(_get(raw, "timezones")),
        maps=MapLinks(
            googleMaps=_str(maps.get("googleMaps")),
            openStreetMaps=_str(maps.get("openStreetMaps")),
        ),
        car=CarInfo(signs=_str_list(car.get("signs")), side=_str(car.get("side"))),
        startOfWeek=_str(_get(raw, "startOfWeek")),
        independent=_bool(_get(raw, "independent")),
        unMember=_bool(_get(raw, "unMember")),
    )


def normalize_many(payload: Any) -> List[CountryRecord]:
    """Normalize an upstream response that may be one object or an array.

    This is the one place the object-vs-array distinction is made; callers
    only ever see a list. Non-object array elements are skipped.
    """
    if isinstance(payload, Mapping):
        return [normalize(payload)]
    if isinstance(payload, list):
        return [normalize(item) for item in payload if isinstance(item, Mapping)]
    logger.warning(f"normalize_many: unexpected payload type {type(payload).__name__}")
    return []
