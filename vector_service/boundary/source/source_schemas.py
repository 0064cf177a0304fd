"""
Source store schemas.

Snapshots of authoritative documents and the change events that describe
mutations to them.

Dependencies: pydantic
System role: Type definitions for the source-of-truth store
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class OperationType(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class SourceDocument(BaseModel):
    """
    Read-only snapshot of a source document.

    data holds every field except the primary key.
    """

    id: str = Field(description="Document primary key as a string")
    data: dict[str, Any] = Field(default_factory=dict)
    updated_at: datetime | None = Field(default=None, description="Mutation timestamp, when known")

    def text(self, field: str) -> str | None:
        """Return the text field when it holds a non-blank string."""
        value = self.data.get(field)
        if isinstance(value, str) and value.strip():
            return value
        return None


class ChangeEvent(BaseModel):
    """One insert/update/delete notification from the change feed."""

    operation_type: OperationType
    document_id: str
    full_document: SourceDocument | None = None
