"""Unit tests for settings."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from odm.config import ODMSettings, OpenSearchSettings


@pytest.mark.unit
class TestOpenSearchSettings:
    """Tests for OpenSearchSettings."""

    def test_defaults(self) -> None:
        settings = OpenSearchSettings()

        assert settings.host == "localhost"
        assert settings.port == 9200
        assert not settings.is_aws_domain

    @pytest.mark.parametrize(
        ("host", "expected"),
        [
            ("https://search-x.us-east-1.es.amazonaws.com/", "search-x.us-east-1.es.amazonaws.com"),
            ("http://localhost", "localhost"),
            ("opensearch.internal", "opensearch.internal"),
        ],
    )
    def test_host_scheme_is_stripped(self, host: str, expected: str) -> None:
        assert OpenSearchSettings(host=host).host == expected

    def test_aws_domain(self) -> None:
        assert OpenSearchSettings(host="search-x.us-east-1.es.amazonaws.com").is_aws_domain
        assert OpenSearchSettings(host="abc.us-east-1.aoss.amazonaws.com").is_aws_domain

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that settings are read from the environment."""
        monkeypatch.setenv("OPENSEARCH_HOST", "https://search.example.com")
        monkeypatch.setenv("OPENSEARCH_PORT", "443")
        monkeypatch.setenv("AWS_REGION", "eu-west-1")
        monkeypatch.setenv("OPENSEARCH_USE_SSL", "true")
        monkeypatch.delenv("OPENSEARCH_TIMEOUT", raising=False)
        monkeypatch.delenv("OPENSEARCH_VERIFY_CERTS", raising=False)

        settings = OpenSearchSettings.from_env()

        assert settings.host == "search.example.com"
        assert settings.port == 443
        assert settings.region == "eu-west-1"
        assert settings.use_ssl is True
        assert settings.verify_certs is None
        assert settings.timeout == 60

    def test_invalid_port_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENSEARCH_PORT", "not-a-port")

        with pytest.raises(ValidationError):
            OpenSearchSettings.from_env()


@pytest.mark.unit
class TestODMSettings:
    """Tests for ODMSettings."""

    def test_defaults(self) -> None:
        settings = ODMSettings()

        assert settings.skip_incomplete_hits is False
        assert settings.default_scroll_time == timedelta(minutes=1)
        assert settings.stream_page_size == 500

    def test_page_size_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ODMSettings(stream_page_size=0)
