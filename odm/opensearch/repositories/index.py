"""Index repository."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel

from odm.interfaces import Operation, Request
from odm.logging import get_logger
from odm.mapping import EntityMapping, FieldDescriptor, FieldType, IndexSettings
from odm.opensearch.entities.index import Index, Mappings
from odm.opensearch.repositories.base_repository import BaseRepository

logger = get_logger(__name__)

# Descriptor attributes that never appear in a mapping property.
_NON_PROPERTY_ATTRIBUTES = {"name", "store_name", "inner_fields"}


class IndexRepository(BaseRepository[Index]):
    """Repository for managing Index entities."""

    def create(self, *, mapping: EntityMapping, **_: Any) -> Index:
        """Create the index an entity mapping points to and return an Index instance.

        Args:
            mapping: Entity mapping providing the index name, settings and field properties

        Returns:
            An Index domain model instance
        """
        logger.info("Creating index '%s'", mapping.index_name)

        mappings = Mappings(properties=self.properties(mapping))
        body = {
            "settings": {"index": self._index_settings(mapping)},
            "mappings": {"properties": mappings.properties},
        }
        self._transport.execute(Request(operation=Operation.CREATE_INDEX, index=mapping.index_name, body=body))

        return Index(
            name=mapping.index_name,
            settings=mapping.settings,
            mappings=mappings,
            _repository=self,
        )

    def get(self, *, index: str, **_: Any) -> Index | None:
        """Get index information and return an Index instance, or None if it does not exist.

        Args:
            index: Name of the index
        """
        response = self._transport.execute(Request(operation=Operation.GET_INDEX, index=index))
        if not response.found:
            return None

        data = response.body[index]
        index_settings = data.get("settings", {}).get("index", {})
        return Index(
            name=index,
            settings=IndexSettings(
                shards=int(index_settings.get("number_of_shards", 1)),
                replicas=int(index_settings.get("number_of_replicas", 1)),
                refresh_interval=index_settings.get("refresh_interval", "1s"),
            ),
            mappings=Mappings.model_validate(data.get("mappings", {})),
            _repository=self,
        )

    def delete(self, *, index: Index | str, **_: Any) -> Any:
        """Delete an index; deleting a missing index is not an error.

        Args:
            index: The Index entity, or index name, to delete

        Returns:
            Deletion response
        """
        name = self._name(index)
        logger.info("Deleting index '%s'", name)
        response = self._transport.execute(Request(operation=Operation.DELETE_INDEX, index=name))
        if not response.found:
            logger.info("Index '%s' does not exist", name)
        return response.body

    def exists(self, *, index: Index | str) -> bool:
        """Check if an index exists."""
        return bool(self._transport.execute(Request(operation=Operation.INDEX_EXISTS, index=self._name(index))).body)

    def refresh(self, *, index: Index | str) -> Any:
        return self._transport.execute(Request(operation=Operation.REFRESH_INDEX, index=self._name(index))).body

    def put_mapping(self, *, index: Index, mapping: EntityMapping) -> Index:
        """Add the field properties of an entity mapping to an existing index.

        Returns:
            The index with the merged mappings
        """
        properties = self.properties(mapping)
        self._transport.execute(
            Request(operation=Operation.PUT_MAPPING, index=index.name, body={"properties": properties})
        )
        merged = Mappings(properties={**index.mappings.properties, **properties})
        return Index(name=index.name, settings=index.settings, mappings=merged, _repository=self)

    def properties(self, mapping: EntityMapping) -> dict[str, dict[str, Any]]:
        """Build the mapping properties of every explicitly typed field.

        Fields of type AUTO are left to dynamic mapping, and the version field
        is never part of the source.
        """
        properties = {}
        for descriptor in mapping.fields:
            if descriptor.type is FieldType.AUTO or descriptor.name == mapping.version_field:
                continue
            properties[descriptor.store_name] = self._property(descriptor)
        return properties

    def _property(self, descriptor: FieldDescriptor) -> dict[str, Any]:
        prop: dict[str, Any] = self._serialize_pydantic_with_enums(
            descriptor.model_dump(exclude=_NON_PROPERTY_ATTRIBUTES, exclude_defaults=True)
        )
        if descriptor.inner_fields:
            prop["fields"] = {}
            for inner_field in descriptor.inner_fields:
                inner = self._serialize_pydantic_with_enums(
                    inner_field.model_dump(exclude={"suffix"}, exclude_defaults=True)
                )
                prop["fields"][inner_field.suffix] = {"type": inner_field.type.value, **inner}
        return prop

    def _index_settings(self, mapping: EntityMapping) -> dict[str, Any]:
        settings: dict[str, Any] = {
            "number_of_shards": mapping.settings.shards,
            "number_of_replicas": mapping.settings.replicas,
            "refresh_interval": mapping.settings.refresh_interval,
        }
        if any(descriptor.type is FieldType.KNN_VECTOR for descriptor in mapping.fields):
            settings["knn"] = True
        return settings

    def _name(self, index: Index | str) -> str:
        return index.name if isinstance(index, Index) else index

    def _serialize_pydantic_with_enums(self, obj: Any) -> Any:
        """Convert Enum values, nested models and containers to plain JSON-ready values."""
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, BaseModel):
            return self._serialize_pydantic_with_enums(obj.model_dump(mode="python"))
        if isinstance(obj, dict):
            return {str(k): self._serialize_pydantic_with_enums(v) for k, v in obj.items()}
        if isinstance(obj, list | tuple):
            return [self._serialize_pydantic_with_enums(item) for item in obj]
        return obj
