"""Base class shared by the blocking and asynchronous document repositories."""

import copy
from abc import ABC
from typing import Any, Generic, Self, TypeVar

from pydantic_core import from_json, to_json

from odm.config import ODMSettings
from odm.exceptions import OptimisticLockError
from odm.interfaces import IRoutingResolver, ISerializer, Request, Response, RoutingContext
from odm.mapping import EntityMapping, MappingRegistry
from odm.query import Pageable, Query, QueryTranslator, RequestFactory
from odm.results import PageCursor, ResultMapper, SearchHits
from odm.routing import DefaultRoutingResolver


T = TypeVar("T")
ID = TypeVar("ID")


class BaseDocumentRepository(ABC, Generic[T, ID]):
    """Builds requests for, and interprets responses of, document operations.

    Subclasses only add the execution model: each operation builds one
    request, hands it to the transport and interprets the response here.

    Type Parameters:
        T: The entity type this repository manages
        ID: The type of the entity's id field
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        entity_type: type[T],
        serializer: ISerializer,
        registry: MappingRegistry,
        routing_resolver: IRoutingResolver | None = None,
        result_mapper: ResultMapper | None = None,
        translator: QueryTranslator | None = None,
        request_factory: RequestFactory | None = None,
        settings: ODMSettings | None = None,
    ) -> None:
        """Initialize the repository for one entity type."""
        self._entity_type = entity_type
        self._serializer = serializer
        self._registry = registry
        self._settings = settings or ODMSettings()
        self._routing_resolver = routing_resolver or DefaultRoutingResolver()
        self._result_mapper = result_mapper or ResultMapper(
            serializer=serializer, skip_incomplete_hits=self._settings.skip_incomplete_hits
        )
        self._translator = translator or QueryTranslator()
        self._request_factory = request_factory or RequestFactory()

    @property
    def entity_type(self) -> type[T]:
        return self._entity_type

    @property
    def mapping(self) -> EntityMapping:
        return self._registry.resolve(self._entity_type)

    def with_routing(self, routing_resolver: IRoutingResolver) -> Self:
        """Return a copy of this repository that routes with another resolver."""
        repository = copy.copy(self)
        repository._routing_resolver = routing_resolver
        return repository

    def _routing(self, mapping: EntityMapping, document: dict[str, Any] | None = None) -> str | None:
        return self._routing_resolver.resolve(RoutingContext(mapping=mapping, document=document))

    def _save_request(self, entity: T) -> tuple[Request, dict[str, Any]]:
        mapping = self.mapping
        document: dict[str, Any] = from_json(self._serializer.to_bytes(entity))

        # Without a known version the store versions the document internally.
        version = None
        current = document.get(mapping.version_field) if mapping.version_field is not None else None
        if current is not None and document.get(mapping.id_field) is not None:
            version = current + 1

        request = self._request_factory.index(
            mapping,
            mapping.to_store(document),
            document_id=document.get(mapping.id_field),
            routing=self._routing(mapping, document),
            version=version,
        )
        return request, document

    def _saved_entity(self, response: Response, request: Request, document: dict[str, Any]) -> T:
        mapping = self.mapping
        if response.status == 409:
            raise OptimisticLockError(
                f"Version conflict saving {self._entity_type.__name__} '{request.id}'",
                document_id=request.id,
                version=request.params.get("version"),
            )

        saved = dict(document)
        if saved.get(mapping.id_field) is None:
            saved[mapping.id_field] = response.body["_id"]
        if mapping.version_field is not None:
            saved[mapping.version_field] = response.body.get("_version", request.params.get("version"))
        return self._serializer.from_bytes(to_json(saved), self._entity_type)

    def _get_request(self, document_id: ID) -> Request:
        mapping = self.mapping
        return self._request_factory.get(mapping, document_id, routing=self._routing(mapping))

    def _found_entity(self, response: Response) -> T | None:
        if not response.found or not response.body.get("found", True):
            return None
        return self._result_mapper.map_document(response.body, self._entity_type, self.mapping)

    def _exists_request(self, document_id: ID) -> Request:
        mapping = self.mapping
        return self._request_factory.exists(mapping, document_id, routing=self._routing(mapping))

    def _exists(self, response: Response) -> bool:
        return response.found and bool(response.body.get("found", True))

    def _delete_request(self, document_id: ID) -> Request:
        mapping = self.mapping
        return self._request_factory.delete(mapping, document_id, routing=self._routing(mapping))

    def _deleted_id(self, response: Response, document_id: ID) -> ID | None:
        if not response.found or response.body.get("result") == "not_found":
            return None
        return document_id

    def _search_request(self, query: Query) -> Request:
        mapping = self.mapping
        return self._translator.translate(query, mapping, routing=self._routing(mapping))

    def _search_hits(self, response: Response) -> SearchHits[T]:
        return self._result_mapper.map_search(response.body, self._entity_type, self.mapping)

    def _find_all_query(self, pageable: Pageable | None) -> Query:
        return Query.find_all().model_copy(update={"pageable": pageable})

    def _count_request(self, query: Query | None) -> Request:
        mapping = self.mapping
        return self._translator.translate_count(query or Query.find_all(), mapping, routing=self._routing(mapping))

    def _page_cursor(self, query: Query) -> PageCursor:
        mapping = self.mapping
        return PageCursor(
            query=query,
            mapping=mapping,
            translator=self._translator,
            request_factory=self._request_factory,
            routing=self._routing(mapping),
            default_scroll_time=self._settings.default_scroll_time,
            page_size=self._settings.stream_page_size,
        )
