"""
Derived views over a batch of normalized records.

All functions here are pure: they read ``CountryRecord`` instances and return
new values, holding no state between calls.

Absent numbers are handled differently depending on the view:
- rankings order absent values as 0 but report them as absent
- density is absent whenever it cannot be computed
- totals count absent values as 0
"""
from __future__ import annotations

import math
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from ..models import CountryRecord

Number = Union[int, float]
KEYED_ATTRIBUTES = ("languages", "currencies")


def _keys(record: CountryRecord, attr: str) -> List[str]:
    if attr not in KEYED_ATTRIBUTES:
        raise ValueError(f"Unsupported keyed attribute: {attr}")
    return list(getattr(record, attr).keys())


def union_keys(records: Iterable[CountryRecord], attr: str) -> List[str]:
    """Distinct keys of ``attr`` across all records, in order of first appearance."""
    seen: Dict[str, None] = {}
    for record in records:
        for key in _keys(record, attr):
            seen.setdefault(key, None)
    return list(seen)


def intersect_keys(records: Sequence[CountryRecord], attr: str) -> List[str]:
    """Keys of ``attr`` present in every record, in the first record's order."""
    if not records:
        return []
    shared = list(dict.fromkeys(_keys(records[0], attr)))
    for record in records[1:]:
        keys = set(_keys(record, attr))
        shared = [key for key in shared if key in keys]
    return shared


def population_density(record: CountryRecord) -> Optional[int]:
    """People per square kilometre, rounded half-up.

    ``None`` when area is absent or zero, or population is unknown.
    """
    if not record.area or record.population is None:
        return None
    return int(math.floor(record.population / record.area + 0.5))


def rank_by(
    records: Sequence[CountryRecord],
    accessor: Callable[[CountryRecord], Optional[Number]],
    label: str,
) -> List[Dict[str, Any]]:
    """Rank records by ``accessor`` descending.

    Absent values sort as 0. Ties keep batch order. Each entry is
    ``{"rank", "name", label}`` with ranks 1..n.
    """
    values = [accessor(record) for record in records]
    order = sorted(range(len(records)), key=lambda i: -(values[i] or 0))
    return [
        {"rank": position, "name": records[i].name.common, label: values[i]}
        for position, i in enumerate(order, start=1)
    ]


def shared_value(records: Sequence[CountryRecord], attr: str) -> Optional[Any]:
    """The common value of ``attr`` when every record agrees, else ``None``."""
    distinct = {getattr(record, attr) for record in records}
    if len(distinct) != 1:
        return None
    return distinct.pop()


def total(records: Iterable[CountryRecord], attr: str) -> Number:
    """Sum of ``attr`` over the batch; absent values count as 0."""
    return sum(getattr(record, attr) or 0 for record in records)
