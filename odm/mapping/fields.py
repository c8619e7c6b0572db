"""Field descriptors for entity mappings."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FieldType(Enum):
    """Store-side field types."""

    AUTO = "auto"
    TEXT = "text"
    KEYWORD = "keyword"
    BYTE = "byte"
    SHORT = "short"
    INTEGER = "integer"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    DATE = "date"
    BINARY = "binary"
    GEO_POINT = "geo_point"
    OBJECT = "object"
    NESTED = "nested"
    KNN_VECTOR = "knn_vector"


class InnerField(BaseModel):
    """A multi-field variant indexed under `<field>.<suffix>`."""

    model_config = ConfigDict(frozen=True)

    suffix: str = Field(min_length=1)
    type: FieldType
    analyzer: str | None = None
    store: bool = False
    fielddata: bool = False
    doc_values: bool | None = None


class FieldDescriptor(BaseModel):
    """Maps one logical entity field to its store-side name and type."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    store_name: str = ""
    type: FieldType = FieldType.AUTO
    inner_fields: tuple[InnerField, ...] = ()
    store: bool = False
    doc_values: bool | None = None
    fielddata: bool = False
    analyzer: str | None = None
    format: str | None = None
    dimension: int | None = Field(default=None, gt=0)

    @model_validator(mode="before")
    @classmethod
    def default_store_name(cls, data: Any) -> Any:
        """Use the logical name as store name unless one is given."""
        if isinstance(data, dict) and not data.get("store_name"):
            return {**data, "store_name": data.get("name", "")}
        return data

    def inner(self, suffix: str) -> InnerField | None:
        """Return the inner field with the given suffix, if any."""
        for inner_field in self.inner_fields:
            if inner_field.suffix == suffix:
                return inner_field
        return None
