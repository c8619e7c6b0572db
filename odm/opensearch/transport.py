"""Transports executing requests with opensearch-py."""

from typing import Any

from opensearchpy import AsyncOpenSearch, OpenSearch
from opensearchpy.exceptions import ConflictError, ConnectionTimeout, NotFoundError, TransportError

from odm.exceptions import RequestTimeoutError
from odm.interfaces import IAsyncTransport, ITransport, Operation, Request, Response
from odm.logging import get_logger

logger = get_logger(__name__)

# Operations for which a missing document or index is an answer, not an error.
NOT_FOUND_OPERATIONS = frozenset({Operation.GET, Operation.DELETE, Operation.GET_INDEX, Operation.DELETE_INDEX})


def _method(client: OpenSearch | AsyncOpenSearch, operation: Operation) -> Any:
    target: Any = client
    for attribute in operation.value.split("."):
        target = getattr(target, attribute)
    return target


def _arguments(request: Request) -> dict[str, Any]:
    arguments: dict[str, Any] = {"params": dict(request.params)}
    for name in ("index", "id", "body"):
        value = getattr(request, name)
        if value is not None:
            arguments[name] = value
    return arguments


def _error_response(request: Request, error: TransportError) -> Response:
    if isinstance(error, ConnectionTimeout):
        raise RequestTimeoutError(f"{request.operation.value} request on '{request.index}' timed out") from error
    if isinstance(error, NotFoundError) and request.operation in NOT_FOUND_OPERATIONS:
        return Response(status=404, body=error.info)
    if isinstance(error, ConflictError) and request.operation is Operation.INDEX:
        return Response(status=409, body=error.info)
    raise error


class OpenSearchTransport(ITransport):
    """Executes requests with a blocking opensearch-py client."""

    def __init__(self, *, client: OpenSearch) -> None:
        self._client = client

    def execute(self, request: Request) -> Response:
        logger.debug("Executing %s on %s", request.operation.value, request.index)
        try:
            body = _method(self._client, request.operation)(**_arguments(request))
        except TransportError as e:
            return _error_response(request, e)
        return Response(status=200, body=body)


class AsyncOpenSearchTransport(IAsyncTransport):
    """Executes requests with an asynchronous opensearch-py client."""

    def __init__(self, *, client: AsyncOpenSearch) -> None:
        self._client = client

    async def execute(self, request: Request) -> Response:
        logger.debug("Executing %s on %s", request.operation.value, request.index)
        try:
            body = await _method(self._client, request.operation)(**_arguments(request))
        except TransportError as e:
            return _error_response(request, e)
        return Response(status=200, body=body)

    async def close(self) -> None:
        await self._client.close()
