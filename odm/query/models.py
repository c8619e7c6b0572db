"""Query model: every option a search request can carry."""

from datetime import timedelta
from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PAGE_SIZE = 10
MAX_RESULT_WINDOW = 10_000


class Direction(Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class Order(BaseModel):
    """Sort criterion on one logical field."""

    model_config = ConfigDict(frozen=True)

    field: str
    direction: Direction = Direction.ASC
    missing: str | None = None
    unmapped_type: str | None = None

    @classmethod
    def asc(cls, field: str) -> Self:
        return cls(field=field, direction=Direction.ASC)

    @classmethod
    def desc(cls, field: str) -> Self:
        return cls(field=field, direction=Direction.DESC)


class Pageable(BaseModel):
    """Offset pagination expressed as page number and page size."""

    model_config = ConfigDict(frozen=True)

    page: int = 0
    size: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return self.page * self.size

    def next(self) -> "Pageable":
        return Pageable(page=self.page + 1, size=self.size)


class SourceFilter(BaseModel):
    """Fields to include in or exclude from the returned `_source`."""

    includes: list[str] = Field(default_factory=list)
    excludes: list[str] = Field(default_factory=list)


class SearchType(Enum):
    """Search execution type."""

    QUERY_THEN_FETCH = "query_then_fetch"
    DFS_QUERY_THEN_FETCH = "dfs_query_then_fetch"


class ScoreMode(Enum):
    """How a rescore query's score combines with the original score."""

    TOTAL = "total"
    MULTIPLY = "multiply"
    AVG = "avg"
    MAX = "max"
    MIN = "min"


class ExpandWildcards(Enum):
    """Kinds of indices a wildcard index expression expands to."""

    OPEN = "open"
    CLOSED = "closed"
    HIDDEN = "hidden"
    NONE = "none"
    ALL = "all"


class IndicesOptions(BaseModel):
    """How unavailable, missing and wildcard indices are resolved for a search."""

    ignore_unavailable: bool | None = None
    allow_no_indices: bool | None = None
    expand_wildcards: list[ExpandWildcards] = Field(default_factory=list)


class RescorerQuery(BaseModel):
    """Secondary scoring pass over the top `window_size` hits of each shard."""

    query: dict[str, Any]
    window_size: int | None = None
    query_weight: float | None = None
    rescore_query_weight: float | None = None
    score_mode: ScoreMode | None = None


class HighlightField(BaseModel):
    """Highlighting options for one logical field."""

    name: str
    fragment_size: int | None = None
    number_of_fragments: int | None = None
    pre_tags: list[str] | None = None
    post_tags: list[str] | None = None


class HighlightQuery(BaseModel):
    """Highlighting request."""

    fields: list[HighlightField]
    pre_tags: list[str] | None = None
    post_tags: list[str] | None = None
    fragment_size: int | None = None
    number_of_fragments: int | None = None
    require_field_match: bool | None = None


class CriterionType(Enum):
    """Structured criteria on logical fields."""

    MATCH = "match"
    TERM = "term"
    TERMS = "terms"
    RANGE = "range"
    EXISTS = "exists"


class Criterion(BaseModel):
    """One condition on a logical field; criteria of a query are combined with AND."""

    type: CriterionType
    field: str
    value: Any = None


class Query(BaseModel):
    """Search request specification.

    A query with no criteria, native query, filters or ids matches every
    document. Construction never checks that options are consistent with each
    other; that happens when the query is translated.
    """

    criteria: list[Criterion] = Field(default_factory=list)
    native_query: dict[str, Any] | None = None
    filters: list[dict[str, Any]] = Field(default_factory=list)
    pageable: Pageable | None = Field(default_factory=Pageable)
    sort: list[Order] = Field(default_factory=list)
    fields: list[str] = Field(default_factory=list)
    source_filter: SourceFilter | None = None
    min_score: float = 0.0
    track_scores: bool = False
    ids: list[str] = Field(default_factory=list)
    route: str | None = None
    search_type: SearchType = SearchType.QUERY_THEN_FETCH
    preference: str | None = None
    indices_options: IndicesOptions | None = None
    track_total_hits: bool | None = None
    track_total_hits_up_to: int | None = None
    search_after: list[Any] | None = None
    rescorer_queries: list[RescorerQuery] = Field(default_factory=list)
    highlight_query: HighlightQuery | None = None
    scroll_time: timedelta | None = None
    timeout: timedelta | None = None
    explain: bool = False
    limiting: bool = False
    max_results: int | None = None
    aggregations: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @classmethod
    def find_all(cls) -> Self:
        """Return a query matching every document."""
        return cls()

    def is_match_all(self) -> bool:
        return not self.criteria and self.native_query is None and not self.filters and not self.ids

    def is_limiting(self) -> bool:
        """Whether the number of results is capped independently of pagination."""
        return self.limiting

    def has_scroll_time(self) -> bool:
        return self.scroll_time is not None
