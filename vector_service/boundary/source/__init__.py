"""
Source store boundary.

- DocumentSource / ChangeFeed: contracts for bulk scans and CDC
- MongoDocumentSource / MongoChangeFeed: pymongo implementations
"""

from vector_service.boundary.source.base import ChangeFeed, DocumentSource
from vector_service.boundary.source.source_schemas import (
    ChangeEvent,
    OperationType,
    SourceDocument,
)

__all__ = [
    "ChangeEvent",
    "ChangeFeed",
    "DocumentSource",
    "OperationType",
    "SourceDocument",
]
