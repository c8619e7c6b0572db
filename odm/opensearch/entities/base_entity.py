"""Base entity class for OpenSearch domain models."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from odm.opensearch.repositories.base_repository import BaseRepository


T = TypeVar("T")


class BaseEntity(ABC, Generic[T]):
    """Abstract base class for OpenSearch domain entities.

    Entities keep a reference to their repository and delegate every
    persistence operation to it, passing themselves as argument.
    """

    _repository: BaseRepository[T]

    @abstractmethod
    def delete(self) -> Any:
        """Delete this entity through its repository."""
