"""Index domain entity."""

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, PrivateAttr

from odm.mapping import EntityMapping, IndexSettings
from odm.opensearch.entities.base_entity import BaseEntity

if TYPE_CHECKING:
    from odm.opensearch.repositories.index import IndexRepository


class Mappings(BaseModel):
    """Index mappings container."""

    properties: dict[str, dict[str, Any]] = Field(default_factory=dict)


class Index(BaseModel, BaseEntity["Index"]):
    """Domain model representing an OpenSearch index."""

    name: str
    settings: IndexSettings = Field(default_factory=IndexSettings)
    mappings: Mappings = Field(default_factory=Mappings)
    _repository: "IndexRepository" = PrivateAttr()  # type: ignore[assignment]

    def __init__(self, **data: Any) -> None:
        """Initialize Index with repository support."""
        repository = data.pop("_repository", None)
        super().__init__(**data)
        if repository is not None:
            object.__setattr__(self, "_repository", repository)

    def delete(self) -> Any:
        """Delete this index.

        Returns:
            Deletion response from OpenSearch
        """
        return self._repository.delete(index=self)

    def exists(self) -> bool:
        return self._repository.exists(index=self)

    def refresh(self) -> Any:
        """Make every document indexed so far visible to searches."""
        return self._repository.refresh(index=self)

    def put_mapping(self, mapping: EntityMapping) -> "Index":
        """Add the fields of an entity mapping to this index.

        Returns:
            The index with its updated mappings
        """
        return self._repository.put_mapping(index=self, mapping=mapping)
