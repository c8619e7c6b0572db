"""Unit tests for SearchHitStream and AsyncSearchHitStream."""

from datetime import timedelta
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import BaseModel

from odm.exceptions import IncompleteResultError
from odm.interfaces import Operation, Response
from odm.mapping import EntityMapping, FieldType, MappingBuilder
from odm.query import Order, Query, QueryBuilder, QueryTranslator, RequestFactory
from odm.results import AsyncSearchHitStream, PageCursor, ResultMapper, SearchHitStream
from odm.serializers import PydanticSerializer


class Reading(BaseModel):
    id: str
    rate: int


def _page(*rates: int, scroll_id: str | None = None, sorted_hits: bool = False) -> Response:
    hits = []
    for rate in rates:
        hit: dict[str, Any] = {"_index": "readings", "_id": str(rate), "_source": {"rate": rate}}
        if sorted_hits:
            hit["sort"] = [rate]
        hits.append(hit)
    body: dict[str, Any] = {"hits": {"total": {"value": 3, "relation": "eq"}, "hits": hits}}
    if scroll_id is not None:
        body["_scroll_id"] = scroll_id
    return Response(status=200, body=body)


@pytest.mark.unit
class TestSearchHitStream:
    """Tests for SearchHitStream."""

    @pytest.fixture
    def mapping(self) -> EntityMapping:
        return MappingBuilder(Reading, "readings").id().field("rate", FieldType.INTEGER).build()

    @pytest.fixture
    def mapper(self) -> ResultMapper:
        return ResultMapper(serializer=PydanticSerializer())

    def _stream(self, transport: Any, mapper: ResultMapper, mapping: EntityMapping, query: Query) -> SearchHitStream:
        cursor = PageCursor(
            query=query,
            mapping=mapping,
            translator=QueryTranslator(),
            request_factory=RequestFactory(),
            routing=None,
            default_scroll_time=timedelta(minutes=1),
            page_size=500,
        )
        return SearchHitStream(transport=transport, mapper=mapper, cursor=cursor, entity_type=Reading, mapping=mapping)

    def test_scroll_stream_reads_every_page_and_clears(self, mapper: ResultMapper, mapping: EntityMapping) -> None:
        """Test that unsorted queries scroll until an empty page, then clear the scroll."""
        transport = MagicMock()
        transport.execute.side_effect = [
            _page(1, 2, scroll_id="s1"),
            _page(3, scroll_id="s2"),
            _page(scroll_id="s2"),
            Response(status=200, body={"succeeded": True}),
        ]

        stream = self._stream(transport, mapper, mapping, QueryBuilder().page(0, 2).build())
        rates = [hit.content.rate for hit in stream]

        assert rates == [1, 2, 3]
        assert stream.total == 3
        requests = [call.args[0] for call in transport.execute.call_args_list]
        assert [request.operation for request in requests] == [
            Operation.SEARCH,
            Operation.SCROLL,
            Operation.SCROLL,
            Operation.CLEAR_SCROLL,
        ]
        assert requests[0].params["scroll"] == "60000ms"
        assert requests[0].body["size"] == 2
        assert requests[1].body["scroll_id"] == "s1"
        assert requests[3].body == {"scroll_id": ["s2"]}

    def test_stream_is_lazy(self, mapper: ResultMapper, mapping: EntityMapping) -> None:
        """Test that no request is sent before the first hit is requested."""
        transport = MagicMock()

        self._stream(transport, mapper, mapping, Query.find_all())

        transport.execute.assert_not_called()

    def test_search_after_stream(self, mapper: ResultMapper, mapping: EntityMapping) -> None:
        """Test that sorted queries continue with the last hit's sort values."""
        transport = MagicMock()
        transport.execute.side_effect = [_page(1, 2, sorted_hits=True), _page(3, sorted_hits=True)]

        query = QueryBuilder().with_sort(Order.asc("rate")).page(0, 2).build()
        rates = [hit.content.rate for hit in self._stream(transport, mapper, mapping, query)]

        assert rates == [1, 2, 3]
        requests = [call.args[0] for call in transport.execute.call_args_list]
        assert len(requests) == 2
        assert "search_after" not in requests[0].body
        assert requests[1].body["search_after"] == [2]
        assert "from" not in requests[1].body
        assert "scroll" not in requests[1].params

    def test_limiting_stream_stops_at_max_results(self, mapper: ResultMapper, mapping: EntityMapping) -> None:
        """Test that a limiting stream yields at most max_results hits."""
        transport = MagicMock()
        transport.execute.side_effect = [_page(1, 2, scroll_id="s1"), Response(status=200, body={})]

        hits = list(self._stream(transport, mapper, mapping, QueryBuilder().limit_results(1).build()))

        assert [hit.id for hit in hits] == ["1"]
        assert transport.execute.call_args_list[-1].args[0].operation is Operation.CLEAR_SCROLL

    def test_close_clears_scroll_early(self, mapper: ResultMapper, mapping: EntityMapping) -> None:
        """Test that leaving a stream before exhaustion releases the scroll."""
        transport = MagicMock()
        transport.execute.side_effect = [_page(1, 2, scroll_id="s1"), Response(status=200, body={})]

        with self._stream(transport, mapper, mapping, Query.find_all()) as stream:
            first = next(stream)

        assert first.id == "1"
        assert stream.closed
        assert transport.execute.call_args_list[-1].args[0].body == {"scroll_id": ["s1"]}
        with pytest.raises(StopIteration):
            next(stream)

    def test_failing_page_clears_latest_scroll(self, mapper: ResultMapper, mapping: EntityMapping) -> None:
        """Test that a page which fails to map releases the newest scroll context before the error surfaces."""
        transport = MagicMock()
        broken = Response(
            status=200, body={"_scroll_id": "s2", "hits": {"hits": [{"_index": "readings", "_source": {"rate": 3}}]}}
        )
        transport.execute.side_effect = [_page(1, scroll_id="s1"), broken, Response(status=200, body={})]

        stream = self._stream(transport, mapper, mapping, Query.find_all())
        assert next(stream).id == "1"
        with pytest.raises(IncompleteResultError):
            next(stream)

        assert stream.closed
        last_request = transport.execute.call_args_list[-1].args[0]
        assert last_request.operation is Operation.CLEAR_SCROLL
        assert last_request.body == {"scroll_id": ["s2"]}

    def test_timeout_propagates(self, mapper: ResultMapper, mapping: EntityMapping) -> None:
        """Test that transport errors surface to the consumer."""
        transport = MagicMock()
        transport.execute.side_effect = TimeoutError("deadline exceeded")

        with pytest.raises(TimeoutError):
            next(self._stream(transport, mapper, mapping, Query.find_all()))


@pytest.mark.unit
class TestAsyncSearchHitStream:
    """Tests for AsyncSearchHitStream."""

    @pytest.mark.asyncio
    async def test_async_scroll_stream(self) -> None:
        """Test that the async stream awaits one request per page and clears the scroll."""
        mapping = MappingBuilder(Reading, "readings").id().field("rate", FieldType.INTEGER).build()
        transport = MagicMock()
        transport.execute = AsyncMock(
            side_effect=[_page(1, 2, scroll_id="s1"), _page(scroll_id="s1"), Response(status=200, body={})]
        )
        cursor = PageCursor(
            query=Query.find_all(),
            mapping=mapping,
            translator=QueryTranslator(),
            request_factory=RequestFactory(),
            routing="id2",
            default_scroll_time=timedelta(seconds=30),
            page_size=500,
        )
        stream = AsyncSearchHitStream(
            transport=transport,
            mapper=ResultMapper(serializer=PydanticSerializer()),
            cursor=cursor,
            entity_type=Reading,
            mapping=mapping,
        )

        rates = [hit.content.rate async for hit in stream]

        assert rates == [1, 2]
        assert transport.execute.await_count == 3
        first_request = transport.execute.await_args_list[0].args[0]
        assert first_request.params == {"routing": "id2", "scroll": "30000ms"}
        assert transport.execute.await_args_list[-1].args[0].operation is Operation.CLEAR_SCROLL

    @pytest.mark.asyncio
    async def test_async_failing_page_clears_scroll(self) -> None:
        """Test that the async stream closes itself before re-raising a mapping error."""
        mapping = MappingBuilder(Reading, "readings").id().field("rate", FieldType.INTEGER).build()
        transport = MagicMock()
        broken = Response(
            status=200, body={"_scroll_id": "s1", "hits": {"hits": [{"_index": "readings", "_source": {"rate": 3}}]}}
        )
        transport.execute = AsyncMock(side_effect=[broken, Response(status=200, body={})])
        cursor = PageCursor(
            query=Query.find_all(),
            mapping=mapping,
            translator=QueryTranslator(),
            request_factory=RequestFactory(),
            routing=None,
            default_scroll_time=timedelta(seconds=30),
            page_size=500,
        )
        stream = AsyncSearchHitStream(
            transport=transport,
            mapper=ResultMapper(serializer=PydanticSerializer()),
            cursor=cursor,
            entity_type=Reading,
            mapping=mapping,
        )

        with pytest.raises(IncompleteResultError):
            await stream.__anext__()

        assert stream.closed
        assert transport.execute.await_args_list[-1].args[0].body == {"scroll_id": ["s1"]}
