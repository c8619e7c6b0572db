"""
Entity mappings.

This module translates between the logical field names of application
entities and the field names and types stored in the index.
"""

from odm.mapping.entity_mapping import EntityMapping, IndexSettings, MappingBuilder, derive_mapping
from odm.mapping.fields import FieldDescriptor, FieldType, InnerField
from odm.mapping.registry import MappingFactory, MappingRegistry

__all__ = [
    "EntityMapping",
    "FieldDescriptor",
    "FieldType",
    "IndexSettings",
    "InnerField",
    "MappingBuilder",
    "MappingFactory",
    "MappingRegistry",
    "derive_mapping",
]
