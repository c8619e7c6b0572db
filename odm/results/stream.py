"""Lazy streams over every hit of a query."""

from collections.abc import Iterator
from datetime import timedelta
from types import TracebackType
from typing import Any, Generic, Self, TypeVar

from odm.interfaces import IAsyncTransport, ITransport, Request
from odm.mapping import EntityMapping
from odm.query import Pageable, Query, QueryTranslator, RequestFactory
from odm.results.mapper import ResultMapper
from odm.results.models import SearchHit, SearchHits


T = TypeVar("T")


class PageCursor:
    """Decides which request fetches each page of a stream.

    Sorted queries without a scroll time continue with search_after from the
    sort values of the previous page's last hit. All other queries scroll,
    keeping the scroll context alive for the query's scroll time or
    `default_scroll_time`.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        query: Query,
        mapping: EntityMapping,
        translator: QueryTranslator,
        request_factory: RequestFactory,
        routing: str | None,
        default_scroll_time: timedelta,
        page_size: int,
    ) -> None:
        """Initialize PageCursor for one query."""
        self._mapping = mapping
        self._translator = translator
        self._request_factory = request_factory
        self._routing = routing
        self.scrolling = query.scroll_time is not None or not query.sort

        pageable = query.pageable if query.pageable is not None else Pageable(size=page_size)
        update: dict[str, Any] = {"pageable": pageable}
        if self.scrolling:
            self._scroll_time = query.scroll_time or default_scroll_time
            update["scroll_time"] = self._scroll_time
        self._query = query.model_copy(update=update)
        self.page_size = query.max_results if query.is_limiting() else pageable.size
        self.max_results = query.max_results if query.is_limiting() else None

    def next_request(self, page: SearchHits[Any] | None) -> Request | None:
        """Return the request for the page after `page`, or None when done."""
        if page is None:
            return self._translator.translate(self._query, self._mapping, routing=self._routing)

        if self.scrolling:
            if page.scroll_id is None:
                return None
            return self._request_factory.scroll(page.scroll_id, self._scroll_time)

        cursor = page.next_cursor
        if cursor is None or len(page.hits) + page.skipped_hits < self.page_size:
            return None
        self._query = self._query.model_copy(
            update={"search_after": cursor, "pageable": Pageable(size=self._query.pageable.size)}
        )
        return self._translator.translate(self._query, self._mapping, routing=self._routing)

    def close_request(self, scroll_id: str | None) -> Request | None:
        """Return the request releasing the scroll context `scroll_id`, if any."""
        if self.scrolling and scroll_id is not None:
            return self._request_factory.clear_scroll(scroll_id)
        return None


class _BaseSearchHitStream(Generic[T]):
    def __init__(self, *, mapper: ResultMapper, cursor: PageCursor, entity_type: type[T], mapping: EntityMapping) -> None:
        self._mapper = mapper
        self._cursor = cursor
        self._entity_type = entity_type
        self._mapping = mapping
        self._page: SearchHits[T] | None = None
        self._scroll_id: str | None = None
        self._hits: Iterator[SearchHit[T]] = iter(())
        self._remaining = cursor.max_results
        self._first_total: int | None = None
        self._exhausted = False
        self.closed = False

    @property
    def total(self) -> int | None:
        """Total reported by the first page, once fetched."""
        return self._first_total

    @property
    def aggregations(self) -> dict[str, Any] | None:
        return self._page.aggregations if self._page is not None else None

    def _take(self) -> SearchHit[T] | None:
        if self._remaining == 0:
            self._exhausted = True
            return None
        hit = next(self._hits, None)
        if hit is not None and self._remaining is not None:
            self._remaining -= 1
        return hit

    def _accept(self, body: dict[str, Any]) -> None:
        first = self._page is None
        # Tracked before mapping so a page that fails to map can still be released.
        self._scroll_id = body.get("_scroll_id", self._scroll_id)
        self._page = self._mapper.map_search(body, self._entity_type, self._mapping)
        if first:
            self._first_total = self._page.total
        if not self._page.hits and not self._page.skipped_hits:
            self._exhausted = True
        self._hits = iter(self._page.hits)


class SearchHitStream(_BaseSearchHitStream[T]):
    """Blocking, non-rewindable iterator over all hits of a query."""

    def __init__(
        self,
        *,
        transport: ITransport,
        mapper: ResultMapper,
        cursor: PageCursor,
        entity_type: type[T],
        mapping: EntityMapping,
    ) -> None:
        """Initialize SearchHitStream; no request is sent before the first hit is requested."""
        super().__init__(mapper=mapper, cursor=cursor, entity_type=entity_type, mapping=mapping)
        self._transport = transport

    def __iter__(self) -> Self:
        return self

    def __next__(self) -> SearchHit[T]:
        while not self.closed and not self._exhausted:
            hit = self._take()
            if hit is not None:
                return hit
            if self._exhausted:
                break
            request = self._cursor.next_request(self._page)
            if request is None:
                break
            try:
                self._accept(self._transport.execute(request).body)
            except Exception:
                self.close()
                raise
        self.close()
        raise StopIteration

    def close(self) -> None:
        """Release the scroll context, if one is open."""
        if self.closed:
            return
        self.closed = True
        request = self._cursor.close_request(self._scroll_id)
        if request is not None:
            self._transport.execute(request)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


class AsyncSearchHitStream(_BaseSearchHitStream[T]):
    """Asynchronous, non-rewindable iterator over all hits of a query."""

    def __init__(
        self,
        *,
        transport: IAsyncTransport,
        mapper: ResultMapper,
        cursor: PageCursor,
        entity_type: type[T],
        mapping: EntityMapping,
    ) -> None:
        """Initialize AsyncSearchHitStream; pages are fetched one at a time."""
        super().__init__(mapper=mapper, cursor=cursor, entity_type=entity_type, mapping=mapping)
        self._transport = transport

    def __aiter__(self) -> Self:
        return self

    async def __anext__(self) -> SearchHit[T]:
        while not self.closed and not self._exhausted:
            hit = self._take()
            if hit is not None:
                return hit
            if self._exhausted:
                break
            request = self._cursor.next_request(self._page)
            if request is None:
                break
            try:
                self._accept((await self._transport.execute(request)).body)
            except Exception:
                await self.aclose()
                raise
        await self.aclose()
        raise StopAsyncIteration

    async def aclose(self) -> None:
        """Release the scroll context, if one is open."""
        if self.closed:
            return
        self.closed = True
        request = self._cursor.close_request(self._scroll_id)
        if request is not None:
            await self._transport.execute(request)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()
