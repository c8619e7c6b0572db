"""
Queries.

This module holds the store-independent query model, the fluent builder used
to assemble it, and the translation of queries into store-native requests.
"""

from odm.query.builder import QueryBuilder
from odm.query.models import (
    DEFAULT_PAGE_SIZE,
    MAX_RESULT_WINDOW,
    Criterion,
    CriterionType,
    Direction,
    ExpandWildcards,
    HighlightField,
    HighlightQuery,
    IndicesOptions,
    Order,
    Pageable,
    Query,
    RescorerQuery,
    ScoreMode,
    SearchType,
    SourceFilter,
)
from odm.query.request_factory import RequestFactory
from odm.query.translator import QueryTranslator

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_RESULT_WINDOW",
    "Criterion",
    "CriterionType",
    "Direction",
    "ExpandWildcards",
    "HighlightField",
    "HighlightQuery",
    "IndicesOptions",
    "Order",
    "Pageable",
    "Query",
    "QueryBuilder",
    "QueryTranslator",
    "RequestFactory",
    "RescorerQuery",
    "ScoreMode",
    "SearchType",
    "SourceFilter",
]
