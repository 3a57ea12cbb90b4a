"""Classified errors surfaced by the question-answering pipeline."""

from enum import Enum


class ErrorKind(str, Enum):
    """Fixed taxonomy of question-answering failures."""

    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    NO_DOCUMENTS_FOUND = "no_documents_found"
    API_ERROR = "api_error"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"

    @property
    def user_message(self) -> str:
        return _USER_MESSAGES[self]


_USER_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.RATE_LIMIT_EXCEEDED: (
        "We are receiving too many requests right now. "
        "Please wait a moment and try again."
    ),
    ErrorKind.NO_DOCUMENTS_FOUND: "No documents could be searched for your question.",
    ErrorKind.API_ERROR: "An error occurred while communicating with the AI service.",
    ErrorKind.TIMEOUT: "The request timed out. Please try again.",
    ErrorKind.UNKNOWN: "An unexpected error occurred.",
}


class ClassifiedError(Exception):
    """An upstream failure mapped onto ErrorKind.

    str(error) is the technical message, meant for logs only. user_message
    depends on the kind alone and is safe to show.
    """

    def __init__(self, kind: ErrorKind, technical_message: str) -> None:
        self.kind = kind
        self.technical_message = technical_message
        super().__init__(technical_message)

    @property
    def user_message(self) -> str:
        return self.kind.user_message

    def __repr__(self) -> str:
        return f"ClassifiedError(kind={self.kind.value!r}, message={self.technical_message!r})"
