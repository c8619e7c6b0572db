"""Collaborator interfaces and request/response types for the mapping layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from odm.mapping import EntityMapping


class Operation(Enum):
    """Store operations a transport must be able to execute."""

    SEARCH = "search"
    SCROLL = "scroll"
    CLEAR_SCROLL = "clear_scroll"
    COUNT = "count"
    GET = "get"
    INDEX = "index"
    DELETE = "delete"
    CREATE_INDEX = "indices.create"
    DELETE_INDEX = "indices.delete"
    GET_INDEX = "indices.get"
    INDEX_EXISTS = "indices.exists"
    REFRESH_INDEX = "indices.refresh"
    PUT_MAPPING = "indices.put_mapping"


@dataclass
class Request:
    """Store-native request produced by the translator or request factory."""

    operation: Operation
    index: str | None = None
    id: str | None = None
    body: dict[str, Any] | None = None
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class Response:
    """Store-native response handed back by a transport."""

    status: int
    body: Any

    @property
    def found(self) -> bool:
        return self.status != 404


@dataclass(frozen=True)
class RoutingContext:
    """Context a routing resolver is consulted with for one operation.

    `document` holds the entity being written, keyed by logical field names,
    and is None for reads, deletes and searches.
    """

    mapping: EntityMapping
    document: dict[str, Any] | None = None


class ITransport(ABC):
    """Blocking transport interface."""

    @abstractmethod
    def execute(self, request: Request) -> Response:
        """Execute a request against the store."""


class IAsyncTransport(ABC):
    """Asynchronous transport interface."""

    @abstractmethod
    async def execute(self, request: Request) -> Response:
        """Execute a request against the store."""


class ISerializer(ABC):
    """Serializer interface."""

    @abstractmethod
    def to_bytes(self, value: Any) -> bytes:
        """Serialize an entity to JSON bytes keyed by logical field names."""

    @abstractmethod
    def from_bytes(self, data: bytes, entity_type: type) -> Any:
        """Deserialize JSON bytes keyed by logical field names into an entity."""


class IRoutingResolver(ABC):
    """Routing resolver interface."""

    @abstractmethod
    def resolve(self, context: RoutingContext) -> str | None:
        """Return the routing value for the operation, or None for none."""
