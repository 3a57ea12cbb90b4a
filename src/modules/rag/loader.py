"""Text extraction from stored document files."""

from pathlib import Path

import structlog
from docx import Document as DocxDocument
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from src.modules.rag.schemas import TextSegment

logger = structlog.get_logger()

TEXT_EXTENSIONS = {".md", ".markdown", ".txt", ".csv", ".json", ".html", ".htm"}
PDF_EXTENSIONS = {".pdf"}
DOCX_EXTENSIONS = {".docx"}


class DocumentLoadError(Exception):
    """Raised when text cannot be extracted from a file."""

    def __init__(self, message: str, file_path: Path) -> None:
        self.file_path = file_path
        super().__init__(message)


def extract_text(file_path: Path, content_type: str | None = None) -> list[TextSegment]:
    """Extract raw text segments from a stored file.

    The format is chosen from the file extension, falling back to the
    content type for plain text. PDFs yield one segment per page with text;
    every other format yields a single segment.

    Args:
        file_path: Path to the stored file.
        content_type: MIME type reported at upload time, if known.

    Returns:
        Non-empty text segments. May be empty for documents without text.

    Raises:
        DocumentLoadError: If the file is missing, unsupported or unreadable.
    """
    if not file_path.exists():
        raise DocumentLoadError(f"File not found: {file_path}", file_path)

    suffix = file_path.suffix.lower()

    if suffix in PDF_EXTENSIONS or content_type == "application/pdf":
        segments = _extract_pdf(file_path)
    elif suffix in DOCX_EXTENSIONS:
        segments = _extract_docx(file_path)
    elif suffix in TEXT_EXTENSIONS or (content_type or "").startswith("text/"):
        segments = _extract_plain_text(file_path)
    else:
        raise DocumentLoadError(
            f"Unsupported file format: {suffix or content_type or 'unknown'}",
            file_path,
        )

    logger.debug(
        "document_text_extracted",
        file_path=str(file_path),
        segments=len(segments),
        content_length=sum(len(s.content) for s in segments),
    )
    return segments


def _extract_plain_text(file_path: Path) -> list[TextSegment]:
    try:
        content = file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise DocumentLoadError(
            f"Failed to decode file as UTF-8: {e}",
            file_path,
        ) from e
    except OSError as e:
        raise DocumentLoadError(f"Failed to read file: {e}", file_path) from e

    return [TextSegment(content=content)] if content.strip() else []


def _extract_pdf(file_path: Path) -> list[TextSegment]:
    try:
        reader = PdfReader(file_path)
        segments: list[TextSegment] = []
        for number, page in enumerate(reader.pages, 1):
            text = page.extract_text() or ""
            if text.strip():
                segments.append(TextSegment(content=text, page=number))
    except (PdfReadError, OSError, ValueError) as e:
        raise DocumentLoadError(f"Failed to read PDF: {e}", file_path) from e

    return segments


def _extract_docx(file_path: Path) -> list[TextSegment]:
    try:
        doc = DocxDocument(str(file_path))
    except Exception as e:
        # python-docx surfaces corrupt archives as several unrelated types
        raise DocumentLoadError(f"Failed to read DOCX: {e}", file_path) from e

    content = "\n".join(p.text for p in doc.paragraphs)
    return [TextSegment(content=content)] if content.strip() else []
