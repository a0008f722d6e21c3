"""
Cache keys for list entries.

A list is either unfiltered or filtered by one parameter. Both variants encode
to strings with distinct prefixes, so no filter value can collide with the
unfiltered list.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Unfiltered:
    """The list of every record the caller may see."""

    def encode(self) -> str:
        return "all"


@dataclass(frozen=True)
class FilteredBy:
    """The list narrowed by a single filter parameter."""

    param: str

    def encode(self) -> str:
        return f"by:{self.param}"


CacheKey = Union[Unfiltered, FilteredBy]

UNFILTERED = Unfiltered()

FilterParam = Union[str, Mapping[str, Any], None]


def list_key(filter_param: FilterParam = None) -> CacheKey:
    """
    Normalise a filter parameter into a cache key.

    ``None`` and empty values mean unfiltered. Mappings (query objects) are
    keyed by their sorted JSON with ``None`` values dropped, so the same query
    written in a different order hits the same entry.
    """
    if isinstance(filter_param, (Unfiltered, FilteredBy)):
        return filter_param
    if filter_param is None:
        return UNFILTERED
    if isinstance(filter_param, Mapping):
        query = {k: v for k, v in filter_param.items() if v is not None}
        if not query:
            return UNFILTERED
        return FilteredBy(json.dumps(query, sort_keys=True, default=str))
    if filter_param == "":
        return UNFILTERED
    return FilteredBy(str(filter_param))
