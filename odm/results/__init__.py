"""
Search results.

This module reconstructs typed entities from store responses and exposes
them as pages of hits or as lazy streams over every hit of a query.
"""

from odm.results.mapper import ResultMapper
from odm.results.models import SearchHit, SearchHits, TotalHitsRelation
from odm.results.stream import AsyncSearchHitStream, PageCursor, SearchHitStream

__all__ = [
    "AsyncSearchHitStream",
    "PageCursor",
    "ResultMapper",
    "SearchHit",
    "SearchHitStream",
    "SearchHits",
    "TotalHitsRelation",
]
