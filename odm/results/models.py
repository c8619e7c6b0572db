"""Typed search results."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Generic, TypeVar


T = TypeVar("T")


class TotalHitsRelation(Enum):
    """How the reported total relates to the real number of matches."""

    EQUAL_TO = "eq"
    GREATER_THAN_OR_EQUAL_TO = "gte"
    OFF = "off"


def _empty() -> Mapping[str, tuple[Any, ...]]:
    return MappingProxyType({})


@dataclass(frozen=True)
class SearchHit(Generic[T]):
    """One search hit with its reconstructed entity and hit metadata.

    `highlight_fields` holds the fragments per highlighted store field and
    `fields` the values of projected fields keyed by logical name; both are
    read-only mappings of tuples.
    """

    content: T
    id: str | None
    index: str | None = None
    score: float | None = None
    sort_values: tuple[Any, ...] = ()
    routing: str | None = None
    highlight_fields: Mapping[str, tuple[str, ...]] = field(default_factory=_empty)
    fields: Mapping[str, tuple[Any, ...]] = field(default_factory=_empty)
    version: int | None = None


@dataclass(frozen=True)
class SearchHits(Generic[T]):
    """One page of search hits plus response-level metadata."""

    hits: tuple[SearchHit[T], ...] = ()
    total: int | None = None
    total_relation: TotalHitsRelation = TotalHitsRelation.OFF
    max_score: float | None = None
    aggregations: dict[str, Any] | None = None
    scroll_id: str | None = None
    skipped_hits: int = 0

    def __iter__(self) -> Iterator[SearchHit[T]]:
        return iter(self.hits)

    def __len__(self) -> int:
        return len(self.hits)

    @property
    def contents(self) -> list[T]:
        """Entities of the hits, in hit order."""
        return [hit.content for hit in self.hits]

    @property
    def next_cursor(self) -> list[Any] | None:
        """Sort values of the last hit, to continue with search_after."""
        if not self.hits or not self.hits[-1].sort_values:
            return None
        return list(self.hits[-1].sort_values)

    def has_search_hits(self) -> bool:
        return bool(self.hits)

    def has_aggregations(self) -> bool:
        return bool(self.aggregations)
