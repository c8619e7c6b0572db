"""Connection and mapping-layer settings."""

import os
from datetime import timedelta
from typing import Self

from pydantic import BaseModel, Field, field_validator

AWS_DOMAIN_SUFFIXES = (".es.amazonaws.com", ".es.amazonaws.com.cn", ".aoss.amazonaws.com")


class OpenSearchSettings(BaseModel):
    """Where and how to connect to the cluster."""

    host: str = "localhost"
    port: int = Field(default=9200, gt=0)
    region: str = "us-east-1"
    use_ssl: bool | None = None
    verify_certs: bool | None = None
    http_compress: bool = True
    timeout: int = Field(default=60, gt=0)

    @field_validator("host")
    @classmethod
    def strip_scheme(cls, v: str) -> str:
        """Accept endpoints given as URLs."""
        return v.removeprefix("https://").removeprefix("http://").rstrip("/")

    @property
    def is_aws_domain(self) -> bool:
        return any(suffix in self.host for suffix in AWS_DOMAIN_SUFFIXES)

    @classmethod
    def from_env(cls) -> Self:
        """Load settings from OPENSEARCH_* and AWS_REGION environment variables."""
        values: dict[str, str] = {}
        for field_name, variable in (
            ("host", "OPENSEARCH_HOST"),
            ("port", "OPENSEARCH_PORT"),
            ("region", "AWS_REGION"),
            ("timeout", "OPENSEARCH_TIMEOUT"),
            ("use_ssl", "OPENSEARCH_USE_SSL"),
            ("verify_certs", "OPENSEARCH_VERIFY_CERTS"),
        ):
            if variable in os.environ:
                values[field_name] = os.environ[variable]
        return cls.model_validate(values)


class ODMSettings(BaseModel):
    """Behaviour of the mapping layer itself."""

    skip_incomplete_hits: bool = False
    default_scroll_time: timedelta = timedelta(minutes=1)
    stream_page_size: int = Field(default=500, gt=0)
