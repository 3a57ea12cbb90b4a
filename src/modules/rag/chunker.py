"""Paragraph- and sentence-aware text chunking.

Text is packed paragraph by paragraph up to max_size characters. Paragraphs
longer than that are packed sentence by sentence. Each new chunk starts with
the tail of the previous one so that context is not lost at the boundary.
"""

import re
from dataclasses import dataclass

import structlog

from src.modules.rag.schemas import Chunk, TextSegment

logger = structlog.get_logger()

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_SENTENCE_END = re.compile(r"([.!?。！？]+)\s+")


@dataclass
class ChunkingConfig:
    """Configuration for text chunking."""

    max_size: int = 1500  # Maximum characters per chunk
    overlap: int = 200  # Characters carried over from the previous chunk

    def __post_init__(self) -> None:
        if self.max_size <= 0:
            raise ValueError("max_size must be positive")
        if not 0 <= self.overlap < self.max_size:
            raise ValueError("overlap must be >= 0 and smaller than max_size")


def split_segments(
    segments: list[TextSegment],
    config: ChunkingConfig | None = None,
) -> list[Chunk]:
    """Split extracted text segments into chunks.

    Chunks never span two segments, so a chunk's page is always well
    defined. Positions are numbered across the whole document.

    Args:
        segments: Extracted text, in document order.
        config: Chunking configuration (uses defaults if not provided).

    Returns:
        Chunks in document order. Empty if the segments hold no text.
    """
    config = config or ChunkingConfig()

    chunks: list[Chunk] = []
    for segment in segments:
        for text in split_text(segment.content, config):
            chunks.append(Chunk(content=text, position=len(chunks), page=segment.page))

    logger.debug(
        "document_chunked",
        segments=len(segments),
        chunks_created=len(chunks),
    )
    return chunks


def split_text(text: str, config: ChunkingConfig) -> list[str]:
    """Split a single text into overlapping chunks."""
    paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(text) if p.strip()]

    chunks: list[str] = []
    current: list[str] = []
    current_length = 0

    for para in paragraphs:
        if len(para) > config.max_size:
            if current:
                chunks.append("\n\n".join(current))
                current, current_length = [], 0
            chunks.extend(_split_by_sentences(para, config))
            continue

        new_length = current_length + len(para) + (2 if current else 0)
        if new_length > config.max_size and current:
            previous = "\n\n".join(current)
            chunks.append(previous)
            current = _start_with_overlap(previous, para, config)
            current_length = len("\n\n".join(current))
        else:
            current.append(para)
            current_length = new_length

    if current:
        chunks.append("\n\n".join(current))

    return chunks


def _split_by_sentences(paragraph: str, config: ChunkingConfig) -> list[str]:
    sentences: list[str] = []
    last_end = 0
    for match in _SENTENCE_END.finditer(paragraph):
        sentence = paragraph[last_end : match.end()].strip()
        if sentence:
            sentences.append(sentence)
        last_end = match.end()
    remaining = paragraph[last_end:].strip()
    if remaining:
        sentences.append(remaining)

    chunks: list[str] = []
    current: list[str] = []
    current_length = 0

    for sentence in sentences:
        # A single run-on sentence is hard-cut at max_size
        while len(sentence) > config.max_size:
            if current:
                chunks.append(" ".join(current))
                current, current_length = [], 0
            chunks.append(sentence[: config.max_size])
            sentence = sentence[config.max_size - config.overlap :]

        new_length = current_length + len(sentence) + (1 if current else 0)
        if new_length > config.max_size and current:
            previous = " ".join(current)
            chunks.append(previous)
            overlap = _overlap_tail(previous, config.overlap)
            if overlap and len(overlap) + len(sentence) + 1 <= config.max_size:
                current = [overlap, sentence]
            else:
                current = [sentence]
            current_length = len(" ".join(current))
        else:
            current.append(sentence)
            current_length = new_length

    if current:
        chunks.append(" ".join(current))

    return chunks


def _start_with_overlap(previous: str, para: str, config: ChunkingConfig) -> list[str]:
    overlap = _overlap_tail(previous, config.overlap)
    if overlap and len(overlap) + len(para) + 2 <= config.max_size:
        return [overlap, para]
    return [para]


def _overlap_tail(text: str, overlap_size: int) -> str:
    """Return roughly the last overlap_size characters, cut at a boundary."""
    if overlap_size <= 0:
        return ""
    if len(text) <= overlap_size:
        return text

    tail = text[-overlap_size:]

    sentence_start = _SENTENCE_END.search(tail)
    if sentence_start:
        return tail[sentence_start.end() :].strip()

    word_start = tail.find(" ")
    if word_start > 0:
        return tail[word_start:].strip()

    return tail.strip()
