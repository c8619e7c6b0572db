import os
from typing import Any, TypeVar

from botocore.credentials import Credentials
from opensearchpy import (
    AsyncHttpConnection,
    AsyncOpenSearch,
    AWSV4SignerAsyncAuth,
    AWSV4SignerAuth,
    OpenSearch,
    RequestsHttpConnection,
)
from opensearchpy.exceptions import AuthorizationException, TransportError

from odm.config import ODMSettings, OpenSearchSettings
from odm.exceptions import ODMError
from odm.interfaces import IRoutingResolver, ISerializer
from odm.logging import get_logger
from odm.mapping import MappingRegistry
from odm.opensearch.repositories import IndexRepository
from odm.opensearch.transport import AsyncOpenSearchTransport, OpenSearchTransport
from odm.repositories import AsyncDocumentRepository, DocumentRepository
from odm.serializers import PydanticSerializer

T = TypeVar("T")
ID = TypeVar("ID")


logger = get_logger(__name__)


class OpenSearchConnectionError(ODMError):
    """Raised when the cluster cannot be reached or refuses access."""


class OpenSearchClient:
    def __init__(
        self,
        *,
        credentials: Credentials | None = None,
        settings: OpenSearchSettings | None = None,
        odm_settings: ODMSettings | None = None,
        registry: MappingRegistry | None = None,
        serializer: ISerializer | None = None,
    ) -> None:
        """Initialize OpenSearch client and test the connection."""
        self._settings = settings or OpenSearchSettings()
        self._odm_settings = odm_settings or ODMSettings()
        self._credentials = credentials
        self.registry = registry or MappingRegistry()
        self._serializer = serializer or PydanticSerializer()
        self._client = self._connect()
        self._async_transport: AsyncOpenSearchTransport | None = None

        self.transport = OpenSearchTransport(client=self._client)

        # Initialize repository classes
        self.indexes = IndexRepository(transport=self.transport)

    def _connection_options(self) -> dict[str, Any]:
        # Signed AWS domains require SSL
        use_ssl = self._settings.use_ssl if self._settings.use_ssl is not None else self._signed()
        verify_certs = self._settings.verify_certs if self._settings.verify_certs is not None else use_ssl
        return {
            "hosts": [{"host": self._settings.host, "port": self._settings.port}],
            "http_compress": self._settings.http_compress,
            "use_ssl": use_ssl,
            "verify_certs": verify_certs,
            "ssl_assert_hostname": False,
            "ssl_show_warn": False,
            "timeout": self._settings.timeout,
        }

    def _signed(self) -> bool:
        return self._credentials is not None and self._settings.is_aws_domain

    def _connect(self) -> OpenSearch:
        http_auth = AWSV4SignerAuth(self._credentials, self._settings.region) if self._signed() else None
        client = OpenSearch(
            **self._connection_options(),
            http_auth=http_auth,
            connection_class=RequestsHttpConnection,
        )

        # Test the connection
        try:
            info = client.info()
            logger.info("Connected to OpenSearch cluster: %s", info["cluster_name"])
        except AuthorizationException as e:
            if "AWS_EXECUTION_ENV" not in os.environ:
                raise OpenSearchConnectionError(
                    f"Authentication successful but access denied (403). "
                    f"Please check the OpenSearch domain's resource-based access policy. "
                    f"The user/role needs 'es:ESHttp*' permissions. "
                    f"Error details: {e.info if hasattr(e, 'info') else 'Access denied'}"
                ) from e
            logger.info("Skipping connection test")
        except TransportError as e:
            raise OpenSearchConnectionError(f"Failed to connect to OpenSearch: {type(e).__name__}: {e}") from e

        return client

    @property
    def async_transport(self) -> AsyncOpenSearchTransport:
        """Transport over an asynchronous client, created on first use."""
        if self._async_transport is None:
            http_auth = AWSV4SignerAsyncAuth(self._credentials, self._settings.region) if self._signed() else None
            client = AsyncOpenSearch(
                **self._connection_options(),
                http_auth=http_auth,
                connection_class=AsyncHttpConnection,
            )
            self._async_transport = AsyncOpenSearchTransport(client=client)
        return self._async_transport

    def repository(
        self,
        entity_type: type[T],
        *,
        routing_resolver: IRoutingResolver | None = None,
    ) -> DocumentRepository[T, ID]:
        """Create a blocking repository for an entity type."""
        return DocumentRepository(
            transport=self.transport,
            entity_type=entity_type,
            serializer=self._serializer,
            registry=self.registry,
            routing_resolver=routing_resolver,
            settings=self._odm_settings,
        )

    def async_repository(
        self,
        entity_type: type[T],
        *,
        routing_resolver: IRoutingResolver | None = None,
    ) -> AsyncDocumentRepository[T, ID]:
        """Create an asynchronous repository for an entity type."""
        return AsyncDocumentRepository(
            transport=self.async_transport,
            entity_type=entity_type,
            serializer=self._serializer,
            registry=self.registry,
            routing_resolver=routing_resolver,
            settings=self._odm_settings,
        )

    def get_settings(self) -> dict[str, Any]:
        """Get current OpenSearch cluster settings."""
        return self._client.cluster.get_settings(params={"include_defaults": "true"})

    def close(self) -> None:
        self._client.close()

    async def aclose(self) -> None:
        """Close both the blocking and the asynchronous client."""
        self.close()
        if self._async_transport is not None:
            await self._async_transport.close()
