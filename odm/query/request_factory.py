"""Document-level and scroll requests."""

from datetime import timedelta
from typing import Any

from odm.interfaces import Operation, Request
from odm.mapping import EntityMapping
from odm.query.translator import time_value


class RequestFactory:
    """Builds the requests the repository issues besides searches."""

    def get(self, mapping: EntityMapping, document_id: Any, *, routing: str | None = None) -> Request:
        return Request(
            operation=Operation.GET,
            index=mapping.index_name,
            id=str(document_id),
            params=self._routing_params(routing),
        )

    def exists(self, mapping: EntityMapping, document_id: Any, *, routing: str | None = None) -> Request:
        """Build a get request that skips fetching the document source."""
        request = self.get(mapping, document_id, routing=routing)
        request.params["_source"] = "false"
        return request

    def index(
        self,
        mapping: EntityMapping,
        source: dict[str, Any],
        *,
        document_id: Any = None,
        routing: str | None = None,
        version: int | None = None,
    ) -> Request:
        """Build an index request; with a version the store applies external versioning."""
        params = self._routing_params(routing)
        if version is not None:
            params["version"] = version
            params["version_type"] = "external"
        return Request(
            operation=Operation.INDEX,
            index=mapping.index_name,
            id=str(document_id) if document_id is not None else None,
            body=source,
            params=params,
        )

    def delete(self, mapping: EntityMapping, document_id: Any, *, routing: str | None = None) -> Request:
        return Request(
            operation=Operation.DELETE,
            index=mapping.index_name,
            id=str(document_id),
            params=self._routing_params(routing),
        )

    def scroll(self, scroll_id: str, scroll_time: timedelta) -> Request:
        """Build a request for the next page of a scroll."""
        return Request(operation=Operation.SCROLL, body={"scroll_id": scroll_id, "scroll": time_value(scroll_time)})

    def clear_scroll(self, scroll_id: str) -> Request:
        return Request(operation=Operation.CLEAR_SCROLL, body={"scroll_id": [scroll_id]})

    def _routing_params(self, routing: str | None) -> dict[str, Any]:
        return {"routing": routing} if routing is not None else {}
