"""Document domain models."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import UUID


@dataclass
class Document:
    """Metadata record of an uploaded document.

    created_at is set once at creation. is_indexed starts False and is only
    ever flipped to True, after the content was added to the vector index.
    """

    id: UUID
    filename: str  # Original upload name, not the storage key
    content_type: str
    size_bytes: int
    file_path: Path
    created_at: datetime
    is_indexed: bool = False

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Document":
        """Create a Document from a database row."""
        return cls(
            id=UUID(str(row["id"])),
            filename=str(row["filename"]),
            content_type=str(row["content_type"]),
            size_bytes=int(row["size_bytes"]),
            file_path=Path(str(row["file_path"])),
            created_at=datetime.fromisoformat(str(row["created_at"])),
            is_indexed=bool(row["is_indexed"]),
        )
