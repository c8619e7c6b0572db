"""
Document repositories.

This module contains the repository classes applications use to save, load,
delete and search the documents of one entity type.
"""

from odm.repositories.async_document_repository import AsyncDocumentRepository
from odm.repositories.base_repository import BaseDocumentRepository
from odm.repositories.document_repository import DocumentRepository

__all__ = [
    "AsyncDocumentRepository",
    "BaseDocumentRepository",
    "DocumentRepository",
]
