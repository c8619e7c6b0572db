"""
OpenSearch domain entities.

This module contains domain entities for cluster-level OpenSearch objects.
Entities are pure domain objects that delegate all persistence
operations to their repository.
"""

from odm.opensearch.entities.base_entity import BaseEntity
from odm.opensearch.entities.index import Index, Mappings

__all__ = [
    "BaseEntity",
    "Index",
    "Mappings",
]
