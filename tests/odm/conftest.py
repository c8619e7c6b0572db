"""Pytest fixtures shared by the mapping-layer tests."""

import uuid
from collections import Counter
from typing import Any

import pytest

from odm.interfaces import IAsyncTransport, ITransport, Operation, Request, Response
from odm.mapping import MappingRegistry
from odm.serializers import PydanticSerializer


class InMemoryTransport(ITransport):
    """Transport keeping documents in memory.

    Documents live under the key (shard key, id), where the shard key is the
    routing value the document was written with, or its id. A document written
    with routing is therefore only found again with the same routing.
    """

    def __init__(self) -> None:
        self.indices: dict[str, dict[tuple[str, str], dict[str, Any]]] = {}
        self.requests: list[Request] = []

    def execute(self, request: Request) -> Response:
        self.requests.append(request)
        handler = {
            Operation.INDEX: self._index,
            Operation.GET: self._get,
            Operation.DELETE: self._delete,
            Operation.SEARCH: self._search,
            Operation.COUNT: self._count,
        }[request.operation]
        return handler(request)

    def _documents(self, index: str) -> dict[tuple[str, str], dict[str, Any]]:
        return self.indices.setdefault(index, {})

    def _key(self, request: Request, document_id: str) -> tuple[str, str]:
        return (request.params.get("routing", document_id), document_id)

    def _index(self, request: Request) -> Response:
        document_id = request.id or uuid.uuid4().hex
        key = self._key(request, document_id)
        documents = self._documents(request.index)
        existing = documents.get(key)

        version = request.params.get("version")
        if version is not None:
            if existing is not None and existing["_version"] >= version:
                return Response(status=409, body={"error": {"type": "version_conflict_engine_exception"}})
        else:
            version = existing["_version"] + 1 if existing is not None else 1

        documents[key] = {
            "_id": document_id,
            "_source": dict(request.body),
            "_version": version,
            "_routing": request.params.get("routing"),
        }
        return Response(
            status=200,
            body={
                "_index": request.index,
                "_id": document_id,
                "_version": version,
                "result": "updated" if existing is not None else "created",
            },
        )

    def _get(self, request: Request) -> Response:
        record = self._documents(request.index).get(self._key(request, request.id))
        if record is None:
            return Response(status=404, body={"_index": request.index, "_id": request.id, "found": False})
        body = {"_index": request.index, "_id": request.id, "_version": record["_version"], "found": True}
        if request.params.get("_source") != "false":
            body["_source"] = record["_source"]
        if record["_routing"] is not None:
            body["_routing"] = record["_routing"]
        return Response(status=200, body=body)

    def _delete(self, request: Request) -> Response:
        record = self._documents(request.index).pop(self._key(request, request.id), None)
        if record is None:
            return Response(status=404, body={"_index": request.index, "_id": request.id, "result": "not_found"})
        return Response(status=200, body={"_index": request.index, "_id": request.id, "result": "deleted"})

    def _matching(self, request: Request) -> list[dict[str, Any]]:
        routing = request.params.get("routing")
        records = [
            record
            for (shard_key, _), record in self._documents(request.index).items()
            if routing is None or shard_key == routing
        ]
        ids = self._ids_filter(request.body.get("query", {}))
        if ids is not None:
            records = [record for record in records if record["_id"] in ids]
        return records

    def _ids_filter(self, query: dict[str, Any]) -> list[str] | None:
        for clause in query.get("bool", {}).get("filter", []):
            if "ids" in clause:
                return clause["ids"]["values"]
        return None

    def _search(self, request: Request) -> Response:
        records = self._matching(request)
        offset = request.body.get("from", 0)
        size = request.body.get("size", 10)

        hits = []
        for record in records[offset : offset + size]:
            hit = {"_index": request.index, "_id": record["_id"], "_score": 1.0, "_source": record["_source"]}
            if request.body.get("version"):
                hit["_version"] = record["_version"]
            if record["_routing"] is not None:
                hit["_routing"] = record["_routing"]
            hits.append(hit)

        body: dict[str, Any] = {
            "took": 1,
            "hits": {"total": {"value": len(records), "relation": "eq"}, "max_score": 1.0, "hits": hits},
        }
        if "aggs" in request.body:
            body["aggregations"] = {
                name: self._terms_aggregation(aggregation, records)
                for name, aggregation in request.body["aggs"].items()
            }
        return Response(status=200, body=body)

    def _terms_aggregation(self, aggregation: dict[str, Any], records: list[dict[str, Any]]) -> dict[str, Any]:
        field = aggregation["terms"]["field"]
        counts = Counter(record["_source"].get(field) for record in records if field in record["_source"])
        return {"buckets": [{"key": key, "doc_count": count} for key, count in counts.most_common()]}

    def _count(self, request: Request) -> Response:
        return Response(status=200, body={"count": len(self._matching(request))})


class AsyncInMemoryTransport(IAsyncTransport):
    """Asynchronous view of an in-memory transport."""

    def __init__(self, transport: InMemoryTransport) -> None:
        self.transport = transport

    async def execute(self, request: Request) -> Response:
        return self.transport.execute(request)


@pytest.fixture
def transport() -> InMemoryTransport:
    """Create an empty in-memory transport."""
    return InMemoryTransport()


@pytest.fixture
def async_transport(transport: InMemoryTransport) -> AsyncInMemoryTransport:
    """Create an asynchronous transport sharing the in-memory store."""
    return AsyncInMemoryTransport(transport)


@pytest.fixture
def registry() -> MappingRegistry:
    """Create an empty mapping registry."""
    return MappingRegistry()


@pytest.fixture
def serializer() -> PydanticSerializer:
    return PydanticSerializer()
