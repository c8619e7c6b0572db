"""Base repository class for OpenSearch entity repositories."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from odm.interfaces import ITransport


T = TypeVar("T")


class BaseRepository(ABC, Generic[T]):
    """Abstract base class for OpenSearch entity repositories.

    Repositories handle all persistence operations for cluster entities such
    as indexes. Entities are plain domain objects that delegate to their
    repository for any persistence operation.

    Type Parameters:
        T: The type of entity this repository manages
    """

    def __init__(self, *, transport: ITransport) -> None:
        """Initialize the repository with a transport."""
        self._transport = transport

    @abstractmethod
    def create(self, **_: Any) -> T:
        """Create a new entity and return a domain model instance."""

    @abstractmethod
    def get(self, **_: Any) -> T | None:
        """Get an entity by identifier, or None if it does not exist."""

    @abstractmethod
    def delete(self, **_: Any) -> Any:
        """Delete an entity and return the store's response."""
