"""Pytest fixtures for integration tests against a running OpenSearch cluster."""

import os
from collections.abc import Iterator
from typing import Any

import pytest

from odm.config import OpenSearchSettings
from odm.opensearch.client import OpenSearchClient
from odm.opensearch.credentials import get_aws_credentials


@pytest.fixture(scope="session")
def opensearch_settings() -> OpenSearchSettings:
    """Get connection settings from the environment, skipping when no cluster is configured."""
    if not os.getenv("OPENSEARCH_HOST") or not os.getenv("OPENSEARCH_PORT"):
        pytest.skip("OPENSEARCH_HOST and OPENSEARCH_PORT must be exported to run integration tests")
    return OpenSearchSettings.from_env()


@pytest.fixture(scope="session")
def aws_credentials(opensearch_settings: OpenSearchSettings) -> Any:
    """Fixture that provides credentials for managed domains, None for local clusters."""
    if not opensearch_settings.is_aws_domain:
        return None
    return get_aws_credentials(
        assume_role=os.getenv("ASSUME_ROLE"),
        profile=os.getenv("AWS_PROFILE"),
        region=opensearch_settings.region,
        role_session_name="pytest-integration-test",
    )


@pytest.fixture(scope="module")
def opensearch(opensearch_settings: OpenSearchSettings, aws_credentials: Any) -> Iterator[OpenSearchClient]:
    """
    Create a real OpenSearchClient instance for integration tests.

    The client tests the connection during initialization and raises if the
    cluster cannot be reached.
    """
    client = OpenSearchClient(settings=opensearch_settings, credentials=aws_credentials)

    yield client

    client.close()
