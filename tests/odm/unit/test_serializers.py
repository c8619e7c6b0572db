"""Unit tests for PydanticSerializer."""

import json
from dataclasses import dataclass
from datetime import date

import pytest
from pydantic import BaseModel

from odm.serializers import PydanticSerializer


class Event(BaseModel):
    id: str
    day: date
    tags: list[str] = []


@dataclass
class Point:
    id: str
    x: float


@pytest.mark.unit
class TestPydanticSerializer:
    """Tests for PydanticSerializer."""

    def test_to_bytes_uses_field_names(self, serializer: PydanticSerializer) -> None:
        """Test that models serialize to JSON keyed by field name."""
        data = serializer.to_bytes(Event(id="1", day=date(2024, 5, 1), tags=["a"]))

        assert json.loads(data) == {"id": "1", "day": "2024-05-01", "tags": ["a"]}

    def test_from_bytes_validates(self, serializer: PydanticSerializer) -> None:
        """Test that JSON is validated into the entity type."""
        event = serializer.from_bytes(b'{"id": "1", "day": "2024-05-01"}', Event)

        assert event == Event(id="1", day=date(2024, 5, 1))

    def test_dataclasses(self, serializer: PydanticSerializer) -> None:
        """Test that dataclasses are supported too."""
        point = serializer.from_bytes(serializer.to_bytes(Point(id="p", x=1.5)), Point)

        assert point == Point(id="p", x=1.5)
