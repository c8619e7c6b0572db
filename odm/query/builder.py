"""Query builder for entity searches."""

from datetime import timedelta
from typing import Any, Self

from odm.query.models import (
    Criterion,
    CriterionType,
    HighlightQuery,
    IndicesOptions,
    Order,
    Pageable,
    Query,
    RescorerQuery,
    SearchType,
    SourceFilter,
)


class QueryBuilder:
    """Fluent builder for a `Query`.

    Sort, pagination, native query, routing and scalar options replace any
    earlier value. Criteria, filters, ids, fields, rescorers and aggregations
    accumulate.
    """

    def __init__(self) -> None:
        """Initialize QueryBuilder with a match-all query."""
        self._query = Query()

    def match(self, *, field: str, value: Any) -> Self:
        """Match a logical field against analyzed text."""
        return self._add_criterion(CriterionType.MATCH, field, value)

    def match_exactly(self, *, field: str, value: Any) -> Self:
        """Match a logical field against an exact term."""
        return self._add_criterion(CriterionType.TERM, field, value)

    def match_any(self, *, field: str, values: list[Any]) -> Self:
        """Match a logical field against any of several exact terms."""
        return self._add_criterion(CriterionType.TERMS, field, list(values))

    def match_range(
        self,
        *,
        field: str,
        gte: Any = None,
        gt: Any = None,
        lte: Any = None,
        lt: Any = None,
    ) -> Self:
        """Match a logical field against a range of values."""
        bounds = {"gte": gte, "gt": gt, "lte": lte, "lt": lt}
        bounds = {name: bound for name, bound in bounds.items() if bound is not None}
        if not bounds:
            raise ValueError("match_range() requires at least one bound")
        return self._add_criterion(CriterionType.RANGE, field, bounds)

    def exists(self, *, field: str) -> Self:
        """Match documents with a value for a logical field."""
        return self._add_criterion(CriterionType.EXISTS, field, None)

    def with_native_query(self, query: dict[str, Any]) -> Self:
        """Use a store-native query clause, combined with any criteria."""
        self._query.native_query = query
        return self

    def add_filter(self, value: dict[str, Any]) -> Self:
        """Add a single filter to the query."""
        self.add_filters([value])
        return self

    def add_filters(self, values: list[dict[str, Any]]) -> Self:
        """Add multiple filters to the query."""
        self._query.filters.extend(values)
        return self

    def with_ids(self, ids: list[Any]) -> Self:
        """Restrict the query to the given document ids."""
        for document_id in ids:
            if str(document_id) not in self._query.ids:
                self._query.ids.append(str(document_id))
        return self

    def with_pageable(self, pageable: Pageable | None) -> Self:
        """Set pagination; None requests all results up to the result window."""
        self._query.pageable = pageable
        return self

    def page(self, page: int, size: int) -> Self:
        return self.with_pageable(Pageable(page=page, size=size))

    def with_sort(self, *orders: Order) -> Self:
        """Replace the sort criteria."""
        self._query.sort = list(orders)
        return self

    def add_fields(self, *fields: str) -> Self:
        """Request stored or docvalue fields by logical name."""
        self._query.fields.extend(fields)
        return self

    def include_fields(self, fields: list[str]) -> Self:
        """Include only these fields in the returned source."""
        self._source_filter().includes.extend(fields)
        return self

    def exclude_fields(self, fields: list[str]) -> Self:
        """Exclude fields from the returned source."""
        self._source_filter().excludes.extend(fields)
        return self

    def with_min_score(self, min_score: float) -> Self:
        self._query.min_score = min_score
        return self

    def track_scores(self, enabled: bool = True) -> Self:
        """Compute scores even when sorting on a field."""
        self._query.track_scores = enabled
        return self

    def with_route(self, route: str | None) -> Self:
        """Route the search to the shards owning this routing value."""
        self._query.route = route
        return self

    def with_search_type(self, search_type: SearchType) -> Self:
        self._query.search_type = search_type
        return self

    def with_preference(self, preference: str | None) -> Self:
        self._query.preference = preference
        return self

    def with_indices_options(self, indices_options: IndicesOptions | None) -> Self:
        self._query.indices_options = indices_options
        return self

    def track_total_hits(self, value: bool | int) -> Self:
        """Track the exact total (True), none (False) or up to a bound (int)."""
        if isinstance(value, bool):
            self._query.track_total_hits = value
            self._query.track_total_hits_up_to = None
        else:
            self._query.track_total_hits = None
            self._query.track_total_hits_up_to = value
        return self

    def search_after(self, values: list[Any] | None) -> Self:
        """Continue after the sort values of a previous page's last hit."""
        self._query.search_after = list(values) if values is not None else None
        return self

    def add_rescorer_query(self, rescorer_query: RescorerQuery) -> Self:
        self._query.rescorer_queries.append(rescorer_query)
        return self

    def with_rescorer_queries(self, rescorer_queries: list[RescorerQuery]) -> Self:
        """Replace every rescorer added so far."""
        self._query.rescorer_queries = list(rescorer_queries)
        return self

    def with_highlight(self, highlight_query: HighlightQuery | None) -> Self:
        self._query.highlight_query = highlight_query
        return self

    def with_scroll_time(self, scroll_time: timedelta | None) -> Self:
        """Keep a scroll context alive for this long between pages."""
        self._query.scroll_time = scroll_time
        return self

    def with_timeout(self, timeout: timedelta | None) -> Self:
        self._query.timeout = timeout
        return self

    def explain(self, enabled: bool = True) -> Self:
        self._query.explain = enabled
        return self

    def limit_results(self, size: int | None) -> Self:
        """Limit the number of results regardless of pagination."""
        self._query.limiting = True
        self._query.max_results = size
        return self

    def add_aggregation(self, name: str, aggregation: dict[str, Any]) -> Self:
        """Add a named, store-native aggregation."""
        self._query.aggregations[name] = aggregation
        return self

    def build(self) -> Query:
        """Build the query."""
        return self._query.model_copy(deep=True)

    def _add_criterion(self, criterion_type: CriterionType, field: str, value: Any) -> Self:
        self._query.criteria.append(Criterion(type=criterion_type, field=field, value=value))
        return self

    def _source_filter(self) -> SourceFilter:
        if self._query.source_filter is None:
            self._query.source_filter = SourceFilter()
        return self._query.source_filter
