"""Entity serialization."""

from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter

from odm.interfaces import ISerializer


@lru_cache(maxsize=None)
def _adapter(entity_type: type) -> TypeAdapter[Any]:
    return TypeAdapter(entity_type)


class PydanticSerializer(ISerializer):
    """Serializes pydantic models, dataclasses and typed dicts to JSON keyed by field name."""

    def to_bytes(self, value: Any) -> bytes:
        return _adapter(type(value)).dump_json(value)

    def from_bytes(self, data: bytes, entity_type: type) -> Any:
        return _adapter(entity_type).validate_json(data)
