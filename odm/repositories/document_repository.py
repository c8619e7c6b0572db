"""Blocking document repository."""

from collections.abc import Iterable
from typing import Any, TypeVar

from odm.interfaces import ITransport
from odm.query import Pageable, Query
from odm.repositories.base_repository import BaseDocumentRepository
from odm.results import SearchHits, SearchHitStream


T = TypeVar("T")
ID = TypeVar("ID")


class DocumentRepository(BaseDocumentRepository[T, ID]):
    """Repository for the documents of one entity type, over a blocking transport."""

    def __init__(self, *, transport: ITransport, **kwargs: Any) -> None:
        """Initialize DocumentRepository; see `BaseDocumentRepository` for the other arguments."""
        super().__init__(**kwargs)
        self._transport = transport

    def save(self, entity: T) -> T:
        """Index an entity, replacing any document with the same id.

        Returns:
            The entity as stored, carrying the store's id and version

        Raises:
            OptimisticLockError: If the entity's version is stale
        """
        request, document = self._save_request(entity)
        response = self._transport.execute(request)
        return self._saved_entity(response, request, document)

    def save_all(self, entities: Iterable[T]) -> list[T]:
        return [self.save(entity) for entity in entities]

    def find_by_id(self, document_id: ID) -> T | None:
        """Get an entity by id, or None when no document has that id."""
        return self._found_entity(self._transport.execute(self._get_request(document_id)))

    def exists_by_id(self, document_id: ID) -> bool:
        return self._exists(self._transport.execute(self._exists_request(document_id)))

    def delete_by_id(self, document_id: ID) -> ID | None:
        """Delete an entity by id.

        Returns:
            The id when a document was deleted, None when none matched
        """
        response = self._transport.execute(self._delete_request(document_id))
        return self._deleted_id(response, document_id)

    def search(self, query: Query) -> SearchHits[T]:
        """Run a query and return one page of hits."""
        return self._search_hits(self._transport.execute(self._search_request(query)))

    def find_all(self, pageable: Pageable | None = None) -> SearchHits[T]:
        """Return every entity, or one page of them."""
        return self.search(self._find_all_query(pageable))

    def count(self, query: Query | None = None) -> int:
        return self._transport.execute(self._count_request(query)).body["count"]

    def stream(self, query: Query) -> SearchHitStream[T]:
        """Lazily iterate over every hit of a query, fetching pages on demand."""
        return SearchHitStream(
            transport=self._transport,
            mapper=self._result_mapper,
            cursor=self._page_cursor(query),
            entity_type=self._entity_type,
            mapping=self.mapping,
        )
