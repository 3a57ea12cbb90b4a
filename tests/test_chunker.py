"""Tests for text chunking."""

import pytest

from src.modules.rag.chunker import ChunkingConfig, split_segments, split_text
from src.modules.rag.schemas import TextSegment


class TestChunkingConfig:
    """Tests for configuration validation."""

    def test_defaults(self):
        config = ChunkingConfig()

        assert config.max_size == 1500
        assert config.overlap == 200

    @pytest.mark.parametrize(("max_size", "overlap"), [(0, 0), (100, 100), (100, -1)])
    def test_invalid_values(self, max_size, overlap):
        with pytest.raises(ValueError):
            ChunkingConfig(max_size=max_size, overlap=overlap)


class TestSplitText:
    """Tests for split_text function."""

    def test_empty_content_returns_empty(self):
        assert split_text("", ChunkingConfig()) == []

    def test_whitespace_only_returns_empty(self):
        assert split_text("   \n\n   ", ChunkingConfig()) == []

    def test_small_content_returns_single_chunk(self):
        content = "This is a short piece of content."

        assert split_text(content, ChunkingConfig()) == [content]

    def test_paragraphs_are_packed_together(self):
        content = "First paragraph.\n\nSecond paragraph."

        assert split_text(content, ChunkingConfig(max_size=100, overlap=10)) == [
            "First paragraph.\n\nSecond paragraph."
        ]

    def test_chunks_respect_max_size(self):
        paragraphs = [f"Paragraph {i} " + "word " * 30 for i in range(20)]
        content = "\n\n".join(paragraphs)
        config = ChunkingConfig(max_size=400, overlap=50)

        chunks = split_text(content, config)

        assert len(chunks) > 1
        assert all(len(c) <= config.max_size for c in chunks)

    def test_consecutive_chunks_overlap(self):
        paragraphs = [f"Sentence number {i} is here." for i in range(40)]
        content = "\n\n".join(paragraphs)
        config = ChunkingConfig(max_size=200, overlap=60)

        chunks = split_text(content, config)

        assert len(chunks) > 1
        for previous, current in zip(chunks, chunks[1:]):
            first_line = current.split("\n\n")[0]
            assert first_line in previous

    def test_long_paragraph_is_split_by_sentences(self):
        content = " ".join(f"This is sentence {i}." for i in range(100))
        config = ChunkingConfig(max_size=300, overlap=0)

        chunks = split_text(content, config)

        assert len(chunks) > 1
        assert all(len(c) <= 300 for c in chunks)
        assert all(c.endswith(".") for c in chunks)

    def test_run_on_text_is_hard_cut(self):
        content = "x" * 1000
        config = ChunkingConfig(max_size=300, overlap=50)

        chunks = split_text(content, config)

        assert all(len(c) <= 300 for c in chunks)
        assert chunks[0] == "x" * 300
        assert sum(len(c) for c in chunks) >= 1000

    def test_no_text_is_lost(self):
        words = [f"w{i}" for i in range(500)]
        content = " ".join(words)

        chunks = split_text(content, ChunkingConfig(max_size=120, overlap=20))

        joined = " ".join(chunks)
        assert all(w in joined for w in words)


class TestSplitSegments:
    """Tests for split_segments function."""

    def test_positions_run_across_segments(self):
        segments = [
            TextSegment(content="Page one text.", page=1),
            TextSegment(content="Page two text.", page=2),
        ]

        chunks = split_segments(segments)

        assert [c.position for c in chunks] == [0, 1]
        assert [c.page for c in chunks] == [1, 2]
        assert chunks[0].content == "Page one text."

    def test_chunks_never_span_segments(self):
        segments = [TextSegment(content="alpha"), TextSegment(content="beta")]

        chunks = split_segments(segments)

        assert [c.content for c in chunks] == ["alpha", "beta"]

    def test_empty_segments(self):
        assert split_segments([]) == []
        assert split_segments([TextSegment(content="  ")]) == []

    def test_metadata_starts_empty(self):
        chunks = split_segments([TextSegment(content="text")])

        assert chunks[0].metadata == {}

    def test_uses_given_config(self):
        segment = TextSegment(content="\n\n".join(["para " * 20] * 10))

        chunks = split_segments([segment], ChunkingConfig(max_size=150, overlap=0))

        assert len(chunks) > 1
        assert all(len(c.content) <= 150 for c in chunks)
