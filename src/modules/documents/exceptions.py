"""Document management exceptions."""


class DocumentError(Exception):
    """Base exception for document operations."""


class DocumentNotFoundError(DocumentError):
    """Raised when a document is not found."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Document not found: {identifier}")


class DocumentValidationError(DocumentError):
    """Raised when an upload is rejected before anything is stored."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class DocumentStorageError(DocumentError):
    """Raised when the document file cannot be written or removed."""

    def __init__(self, filename: str, reason: str) -> None:
        self.filename = filename
        self.reason = reason
        super().__init__(f"Storage operation failed for '{filename}': {reason}")
