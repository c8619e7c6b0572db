"""Translation of queries into store-native search requests."""

from datetime import timedelta
from typing import Any

from odm.exceptions import InvalidQueryError
from odm.interfaces import Operation, Request
from odm.mapping import EntityMapping
from odm.query.models import (
    MAX_RESULT_WINDOW,
    Criterion,
    CriterionType,
    HighlightField,
    HighlightQuery,
    IndicesOptions,
    Order,
    Query,
    RescorerQuery,
    SearchType,
)

RESERVED_SORT_FIELDS = frozenset({"_score", "_doc", "_id"})


def time_value(duration: timedelta) -> str:
    """Render a duration in the store's time unit syntax."""
    return f"{int(duration.total_seconds() * 1000)}ms"


class QueryTranslator:
    """Builds search and count requests from a query and an entity mapping.

    Translation is pure: it performs no I/O and keeps no state between calls.
    """

    def translate(self, query: Query, mapping: EntityMapping, *, routing: str | None = None) -> Request:
        """Translate a query into a search request against the mapping's index."""
        self._validate(query)

        body: dict[str, Any] = {"query": self.query_clause(query, mapping)}
        params: dict[str, Any] = {}

        self._add_pagination(query, body)

        if query.sort:
            body["sort"] = [self._sort_clause(order, mapping) for order in query.sort]
        if query.fields:
            body["fields"] = [self._resolve(name, mapping) for name in query.fields]
        if query.source_filter is not None:
            source: dict[str, list[str]] = {}
            if query.source_filter.includes:
                source["includes"] = [self._resolve(name, mapping) for name in query.source_filter.includes]
            if query.source_filter.excludes:
                source["excludes"] = [self._resolve(name, mapping) for name in query.source_filter.excludes]
            if source:
                body["_source"] = source
        if query.min_score > 0:
            body["min_score"] = query.min_score
        if query.track_scores:
            body["track_scores"] = True
        if query.explain:
            body["explain"] = True
        if query.timeout is not None:
            body["timeout"] = time_value(query.timeout)
        if mapping.version_field is not None:
            body["version"] = True

        # A boolean setting wins over the numeric cap.
        if query.track_total_hits is not None:
            body["track_total_hits"] = query.track_total_hits
        elif query.track_total_hits_up_to is not None:
            body["track_total_hits"] = query.track_total_hits_up_to

        if query.rescorer_queries:
            body["rescore"] = [self._rescore_clause(rescorer) for rescorer in query.rescorer_queries]
        if query.highlight_query is not None:
            body["highlight"] = self._highlight_clause(query.highlight_query, mapping)
        if query.aggregations:
            body["aggs"] = dict(query.aggregations)

        route = query.route if query.route is not None else routing
        if route is not None:
            params["routing"] = route
        if query.search_type is not SearchType.QUERY_THEN_FETCH:
            params["search_type"] = query.search_type.value
        if query.preference is not None:
            params["preference"] = query.preference
        params.update(self._indices_params(query.indices_options))
        if query.scroll_time is not None:
            params["scroll"] = time_value(query.scroll_time)

        return Request(operation=Operation.SEARCH, index=mapping.index_name, body=body, params=params)

    def translate_count(self, query: Query, mapping: EntityMapping, *, routing: str | None = None) -> Request:
        """Translate a query into a count request; pagination and sort are ignored."""
        params: dict[str, Any] = {}
        route = query.route if query.route is not None else routing
        if route is not None:
            params["routing"] = route
        if query.preference is not None:
            params["preference"] = query.preference
        params.update(self._indices_params(query.indices_options))
        return Request(
            operation=Operation.COUNT,
            index=mapping.index_name,
            body={"query": self.query_clause(query, mapping)},
            params=params,
        )

    def query_clause(self, query: Query, mapping: EntityMapping) -> dict[str, Any]:
        """Build the query clause of a request body."""
        must = [self._criterion_clause(criterion, mapping) for criterion in query.criteria]
        if query.native_query is not None:
            must.append(query.native_query)

        filters = list(query.filters)
        if query.ids:
            filters.append({"ids": {"values": list(query.ids)}})

        if not filters:
            if not must:
                return {"match_all": {}}
            if len(must) == 1:
                return must[0]

        clause: dict[str, Any] = {}
        if must:
            clause["must"] = must
        if filters:
            clause["filter"] = filters
        return {"bool": clause}

    def _validate(self, query: Query) -> None:
        if query.scroll_time is not None and query.search_after is not None:
            raise InvalidQueryError("scroll_time and search_after cannot be combined")
        if query.is_limiting():
            if query.max_results is None:
                raise InvalidQueryError("A limiting query requires max_results")
            if query.max_results < 0:
                raise InvalidQueryError(f"max_results must not be negative, got {query.max_results}")
        if query.pageable is not None:
            if query.pageable.page < 0:
                raise InvalidQueryError(f"Page number must not be negative, got {query.pageable.page}")
            if query.pageable.size < 1:
                raise InvalidQueryError(f"Page size must be at least 1, got {query.pageable.size}")
            if query.pageable.offset != 0 and query.search_after is not None:
                raise InvalidQueryError("search_after requires an offset of 0")
            if query.pageable.offset != 0 and query.scroll_time is not None:
                raise InvalidQueryError("A scroll query requires an offset of 0")
        if query.track_total_hits_up_to is not None and query.track_total_hits_up_to < 0:
            raise InvalidQueryError("track_total_hits_up_to must not be negative")
        for rescorer in query.rescorer_queries:
            if rescorer.window_size is not None and rescorer.window_size < 0:
                raise InvalidQueryError(f"Rescore window size must not be negative, got {rescorer.window_size}")

    def _add_pagination(self, query: Query, body: dict[str, Any]) -> None:
        if query.pageable is not None:
            offset, size = query.pageable.offset, query.pageable.size
        else:
            offset, size = 0, MAX_RESULT_WINDOW

        if query.is_limiting():
            size = query.max_results

        body["size"] = size
        if query.search_after is not None:
            body["search_after"] = list(query.search_after)
        elif query.scroll_time is None:
            body["from"] = offset

    def _resolve(self, name: str, mapping: EntityMapping) -> str:
        if "*" in name:
            return name
        return mapping.store_name(name)

    def _criterion_clause(self, criterion: Criterion, mapping: EntityMapping) -> dict[str, Any]:
        field = self._resolve(criterion.field, mapping)
        if criterion.type is CriterionType.EXISTS:
            return {"exists": {"field": field}}
        if criterion.type is CriterionType.TERMS:
            return {"terms": {field: list(criterion.value)}}
        return {criterion.type.value: {field: criterion.value}}

    def _sort_clause(self, order: Order, mapping: EntityMapping) -> dict[str, Any]:
        field = order.field if order.field in RESERVED_SORT_FIELDS else self._resolve(order.field, mapping)
        options: dict[str, Any] = {"order": order.direction.value}
        if order.missing is not None:
            options["missing"] = order.missing
        if order.unmapped_type is not None:
            options["unmapped_type"] = order.unmapped_type
        return {field: options}

    def _rescore_clause(self, rescorer: RescorerQuery) -> dict[str, Any]:
        inner: dict[str, Any] = {"rescore_query": rescorer.query}
        if rescorer.query_weight is not None:
            inner["query_weight"] = rescorer.query_weight
        if rescorer.rescore_query_weight is not None:
            inner["rescore_query_weight"] = rescorer.rescore_query_weight
        if rescorer.score_mode is not None:
            inner["score_mode"] = rescorer.score_mode.value

        clause: dict[str, Any] = {"query": inner}
        if rescorer.window_size is not None:
            clause["window_size"] = rescorer.window_size
        return clause

    def _highlight_clause(self, highlight: HighlightQuery, mapping: EntityMapping) -> dict[str, Any]:
        clause: dict[str, Any] = {
            "fields": {self._resolve(field.name, mapping): self._highlight_options(field) for field in highlight.fields}
        }
        clause.update(highlight.model_dump(exclude={"fields"}, exclude_none=True))
        return clause

    def _highlight_options(self, field: HighlightField) -> dict[str, Any]:
        return field.model_dump(exclude={"name"}, exclude_none=True)

    def _indices_params(self, options: IndicesOptions | None) -> dict[str, str]:
        if options is None:
            return {}
        params: dict[str, str] = {}
        if options.ignore_unavailable is not None:
            params["ignore_unavailable"] = str(options.ignore_unavailable).lower()
        if options.allow_no_indices is not None:
            params["allow_no_indices"] = str(options.allow_no_indices).lower()
        if options.expand_wildcards:
            params["expand_wildcards"] = ",".join(wildcard.value for wildcard in options.expand_wildcards)
        return params
