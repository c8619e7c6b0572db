"""
OpenSearch integration.

This module connects the mapping layer to an OpenSearch cluster through
opensearch-py: transports, the client, and index management.
"""

from odm.opensearch.client import OpenSearchClient, OpenSearchConnectionError
from odm.opensearch.credentials import CredentialsError, get_aws_credentials
from odm.opensearch.transport import AsyncOpenSearchTransport, OpenSearchTransport

__all__ = [
    "AsyncOpenSearchTransport",
    "CredentialsError",
    "OpenSearchClient",
    "OpenSearchConnectionError",
    "OpenSearchTransport",
    "get_aws_credentials",
]
