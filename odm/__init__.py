"""
Object-document mapping for OpenSearch.

Application classes are mapped to index documents by `odm.mapping`, queried
with `odm.query`, and loaded back as typed hits by `odm.results`. The
repositories in `odm.repositories` tie these together over a transport;
`odm.opensearch` provides the transport for an OpenSearch cluster.
"""

from odm.exceptions import (
    IncompleteResultError,
    InvalidQueryError,
    MappingError,
    ODMError,
    OptimisticLockError,
    RequestTimeoutError,
    UnknownFieldError,
)

__all__ = [
    "IncompleteResultError",
    "InvalidQueryError",
    "MappingError",
    "ODMError",
    "OptimisticLockError",
    "RequestTimeoutError",
    "UnknownFieldError",
]
