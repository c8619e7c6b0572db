"""Asynchronous document repository."""

from collections.abc import Iterable
from typing import Any, TypeVar

from odm.interfaces import IAsyncTransport
from odm.query import Pageable, Query
from odm.repositories.base_repository import BaseDocumentRepository
from odm.results import AsyncSearchHitStream, SearchHits


T = TypeVar("T")
ID = TypeVar("ID")


class AsyncDocumentRepository(BaseDocumentRepository[T, ID]):
    """Repository for the documents of one entity type, over an asynchronous transport.

    Every operation awaits exactly one transport call; streams await one call
    per page.
    """

    def __init__(self, *, transport: IAsyncTransport, **kwargs: Any) -> None:
        """Initialize AsyncDocumentRepository; see `BaseDocumentRepository` for the other arguments."""
        super().__init__(**kwargs)
        self._transport = transport

    async def save(self, entity: T) -> T:
        """Index an entity, replacing any document with the same id.

        Raises:
            OptimisticLockError: If the entity's version is stale
        """
        request, document = self._save_request(entity)
        response = await self._transport.execute(request)
        return self._saved_entity(response, request, document)

    async def save_all(self, entities: Iterable[T]) -> list[T]:
        return [await self.save(entity) for entity in entities]

    async def find_by_id(self, document_id: ID) -> T | None:
        return self._found_entity(await self._transport.execute(self._get_request(document_id)))

    async def exists_by_id(self, document_id: ID) -> bool:
        return self._exists(await self._transport.execute(self._exists_request(document_id)))

    async def delete_by_id(self, document_id: ID) -> ID | None:
        """Delete an entity by id, returning None when no document matched."""
        response = await self._transport.execute(self._delete_request(document_id))
        return self._deleted_id(response, document_id)

    async def search(self, query: Query) -> SearchHits[T]:
        return self._search_hits(await self._transport.execute(self._search_request(query)))

    async def find_all(self, pageable: Pageable | None = None) -> SearchHits[T]:
        return await self.search(self._find_all_query(pageable))

    async def count(self, query: Query | None = None) -> int:
        return (await self._transport.execute(self._count_request(query))).body["count"]

    def stream(self, query: Query) -> AsyncSearchHitStream[T]:
        """Lazily iterate over every hit of a query with `async for`."""
        return AsyncSearchHitStream(
            transport=self._transport,
            mapper=self._result_mapper,
            cursor=self._page_cursor(query),
            entity_type=self._entity_type,
            mapping=self.mapping,
        )
