"""Entity mappings and the builder used to declare them."""

import dataclasses
from collections import Counter
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from odm.exceptions import MappingError, UnknownFieldError
from odm.mapping.fields import FieldDescriptor, FieldType, InnerField

DEFAULT_ID_FIELD = "id"


class IndexSettings(BaseModel):
    """Index-level settings applied when the index is created."""

    model_config = ConfigDict(frozen=True)

    shards: int = Field(default=1, gt=0)
    replicas: int = Field(default=1, ge=0)
    refresh_interval: str = "1s"


class EntityMapping(BaseModel):
    """Field-name and type translation table for one entity type.

    `fields` keeps declaration order and includes the id, version and routing
    descriptors. The version field is never written to `_source`; its value
    round-trips through the document's `_version` metadata.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    entity_type: type
    index_name: str = Field(min_length=1)
    fields: tuple[FieldDescriptor, ...]
    id_field: str
    version_field: str | None = None
    routing_field: str | None = None
    settings: IndexSettings = Field(default_factory=IndexSettings)

    @model_validator(mode="after")
    def check_consistency(self) -> Self:
        """Reject mappings with missing or ambiguous descriptors."""
        type_name = self.entity_type.__name__
        names = [descriptor.name for descriptor in self.fields]

        duplicates = [name for name, count in Counter(names).items() if count > 1]
        if duplicates:
            raise MappingError(f"{type_name} declares field(s) {duplicates} more than once", self.entity_type)

        store_names = [descriptor.store_name for descriptor in self.fields]
        duplicates = [name for name, count in Counter(store_names).items() if count > 1]
        if duplicates:
            raise MappingError(f"{type_name} maps several fields to store name(s) {duplicates}", self.entity_type)

        for descriptor in self.fields:
            suffixes = [inner_field.suffix for inner_field in descriptor.inner_fields]
            if len(suffixes) != len(set(suffixes)):
                raise MappingError(
                    f"{type_name}.{descriptor.name} declares duplicate inner field suffixes", self.entity_type
                )

        if self.id_field not in names:
            raise MappingError(f"{type_name} has no id field", self.entity_type)
        for role, name in (("version", self.version_field), ("routing", self.routing_field)):
            if name is not None and name not in names:
                raise MappingError(f"{type_name} {role} field '{name}' is not mapped", self.entity_type)
        return self

    @property
    def id_descriptor(self) -> FieldDescriptor:
        return self._require(self.id_field)

    @property
    def version_descriptor(self) -> FieldDescriptor | None:
        return self._require(self.version_field) if self.version_field else None

    @property
    def routing_descriptor(self) -> FieldDescriptor | None:
        return self._require(self.routing_field) if self.routing_field else None

    def field(self, name: str) -> FieldDescriptor | None:
        """Return the descriptor for a logical field name."""
        for descriptor in self.fields:
            if descriptor.name == name:
                return descriptor
        return None

    def store_name(self, name: str) -> str:
        """Translate a logical field name into its store name.

        Dotted names resolve through inner fields (`authors.untouched`) and
        through the sub-properties of object and nested fields.
        """
        descriptor = self.field(name)
        if descriptor is not None:
            return descriptor.store_name

        base, _, suffix = name.partition(".")
        descriptor = self.field(base) if suffix else None
        if descriptor is not None and (
            descriptor.inner(suffix) is not None or descriptor.type in (FieldType.OBJECT, FieldType.NESTED)
        ):
            return f"{descriptor.store_name}.{suffix}"
        raise UnknownFieldError(name, self.entity_type)

    def logical_name(self, store_name: str) -> str:
        """Translate a store field name back to its logical name.

        Inner and sub-field paths keep their suffix; unmapped names are
        returned unchanged.
        """
        base, dot, suffix = store_name.partition(".")
        for descriptor in self.fields:
            if descriptor.store_name == store_name:
                return descriptor.name
        for descriptor in self.fields:
            if dot and descriptor.store_name == base:
                return f"{descriptor.name}.{suffix}"
        return store_name

    def to_store(self, document: dict[str, Any]) -> dict[str, Any]:
        """Rename a logical document to store names, dropping unmapped keys."""
        return {
            descriptor.store_name: document[descriptor.name]
            for descriptor in self.fields
            if descriptor.name in document and descriptor.name != self.version_field
        }

    def from_store(self, source: dict[str, Any]) -> dict[str, Any]:
        """Rename a store document to logical names, ignoring unknown keys."""
        return {
            descriptor.name: source[descriptor.store_name]
            for descriptor in self.fields
            if descriptor.store_name in source
        }

    def _require(self, name: str) -> FieldDescriptor:
        descriptor = self.field(name)
        if descriptor is None:
            raise UnknownFieldError(name, self.entity_type)
        return descriptor


class MappingBuilder:
    """Fluent builder for an entity mapping."""

    def __init__(self, entity_type: type, index_name: str | None = None) -> None:
        """Initialize MappingBuilder for an entity type and index."""
        self._entity_type = entity_type
        self._index_name = index_name or entity_type.__name__.lower()
        self._fields: dict[str, FieldDescriptor] = {}
        self._id_field: str | None = None
        self._version_field: str | None = None
        self._routing_field: str | None = None
        self._settings = IndexSettings()

    def id(self, name: str = DEFAULT_ID_FIELD, *, store_name: str | None = None) -> Self:
        """Declare the id field."""
        if self._id_field is not None and self._id_field != name:
            raise MappingError(
                f"{self._entity_type.__name__} already declares id field '{self._id_field}'", self._entity_type
            )
        self._id_field = name
        if name not in self._fields:
            self.field(name, store_name=store_name)
        return self

    def field(  # noqa: PLR0913
        self,
        name: str,
        type: FieldType = FieldType.AUTO,
        *,
        store_name: str | None = None,
        inner_fields: list[InnerField] | None = None,
        store: bool = False,
        doc_values: bool | None = None,
        fielddata: bool = False,
        analyzer: str | None = None,
        format: str | None = None,
        dimension: int | None = None,
    ) -> Self:
        """Declare a field, replacing any earlier declaration of the same name."""
        self._fields[name] = FieldDescriptor(
            name=name,
            store_name=store_name or name,
            type=type,
            inner_fields=tuple(inner_fields or ()),
            store=store,
            doc_values=doc_values,
            fielddata=fielddata,
            analyzer=analyzer,
            format=format,
            dimension=dimension,
        )
        return self

    def multi_field(
        self,
        name: str,
        type: FieldType,
        inner_fields: list[InnerField],
        **kwargs: Any,
    ) -> Self:
        """Declare a field indexed several ways through inner fields."""
        return self.field(name, type, inner_fields=inner_fields, **kwargs)

    def version(self, name: str = "version") -> Self:
        """Declare the field used for optimistic concurrency control."""
        self._version_field = name
        if name not in self._fields:
            self.field(name, FieldType.LONG)
        return self

    def routing(self, name: str = "routing") -> Self:
        """Declare the field whose value routes the document to a shard."""
        if self._routing_field is not None and self._routing_field != name:
            raise MappingError(
                f"{self._entity_type.__name__} already declares routing field '{self._routing_field}'",
                self._entity_type,
            )
        self._routing_field = name
        if name not in self._fields:
            self.field(name, FieldType.KEYWORD)
        return self

    def settings(self, *, shards: int = 1, replicas: int = 1, refresh_interval: str = "1s") -> Self:
        """Set the index settings used when the index is created."""
        self._settings = IndexSettings(shards=shards, replicas=replicas, refresh_interval=refresh_interval)
        return self

    def build(self) -> EntityMapping:
        """Build the mapping."""
        if self._id_field is None:
            raise MappingError(f"{self._entity_type.__name__} has no id field", self._entity_type)

        return EntityMapping(
            entity_type=self._entity_type,
            index_name=self._index_name,
            fields=tuple(self._fields.values()),
            id_field=self._id_field,
            version_field=self._version_field,
            routing_field=self._routing_field,
            settings=self._settings,
        )


def derive_mapping(entity_type: type) -> EntityMapping:
    """Derive a default mapping from a pydantic model or dataclass.

    Every field maps to a store field of the same name with its type left to
    the store's dynamic mapping; the field named `id` becomes the id field.
    """
    if isinstance(entity_type, type) and issubclass(entity_type, BaseModel):
        names = list(entity_type.model_fields)
    elif dataclasses.is_dataclass(entity_type):
        names = [field.name for field in dataclasses.fields(entity_type)]
    else:
        raise MappingError(
            f"{getattr(entity_type, '__name__', entity_type)} has no registered mapping "
            "and is neither a pydantic model nor a dataclass",
            entity_type if isinstance(entity_type, type) else None,
        )

    if DEFAULT_ID_FIELD not in names:
        raise MappingError(f"{entity_type.__name__} has no id field", entity_type)

    builder = MappingBuilder(entity_type)
    for name in names:
        builder.field(name)
    return builder.id(DEFAULT_ID_FIELD).build()
