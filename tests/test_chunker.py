"""Tests for the paragraph chunker."""

from __future__ import annotations

import pytest

from knowledgescout.ingestion.chunker import Chunker


def _paragraphs(count: int, words: int = 9) -> list[str]:
    return [f"Paragraph {i} " + " ".join(f"word{i}" for _ in range(words)) for i in range(count)]


class TestChunkerConfig:
    """Test Chunker construction."""

    def test_defaults(self) -> None:
        chunker = Chunker()
        assert chunker.chunk_size == 400
        assert chunker.chunk_overlap == 100

    def test_rejects_overlap_not_below_size(self) -> None:
        with pytest.raises(ValueError):
            Chunker(chunk_size=100, chunk_overlap=100)

    def test_rejects_non_positive_size(self) -> None:
        with pytest.raises(ValueError):
            Chunker(chunk_size=0, chunk_overlap=0)


class TestSplit:
    """Test Chunker.split."""

    def test_empty_text(self) -> None:
        """Should yield no chunks for empty input."""
        assert Chunker().split("", 1) == []

    def test_whitespace_only_text(self) -> None:
        assert Chunker().split("   \n\n  \n", 1) == []

    def test_short_text_single_chunk(self) -> None:
        """Should return the whole text as one chunk."""
        chunks = Chunker().split("  Short text.  ", 1)

        assert len(chunks) == 1
        assert chunks[0].index == 0
        assert chunks[0].page == 1
        assert chunks[0].text == "Short text."

    def test_paragraphs_joined_under_chunk_size(self) -> None:
        text = "First paragraph.\n\nSecond paragraph."
        chunks = Chunker(chunk_size=400, chunk_overlap=100).split(text, 1)

        assert len(chunks) == 1
        assert chunks[0].text == "First paragraph.\n\nSecond paragraph."

    def test_indices_contiguous(self) -> None:
        """Chunk indices should start at 0 and increase by one."""
        text = "\n\n".join(_paragraphs(8))
        chunks = Chunker(chunk_size=100, chunk_overlap=20).split(text, 2)

        assert len(chunks) > 1
        assert [c.index for c in chunks] == list(range(len(chunks)))

    def test_chunks_non_empty(self) -> None:
        text = "\n\n".join(_paragraphs(8))
        chunks = Chunker(chunk_size=100, chunk_overlap=20).split(text, 2)

        assert all(c.text and c.text == c.text.strip() for c in chunks)

    def test_overlap_with_previous_chunk(self) -> None:
        """Each chunk after the first should begin with the previous chunk's tail."""
        text = "\n\n".join(_paragraphs(6))
        chunks = Chunker(chunk_size=100, chunk_overlap=20).split(text, 1)

        assert len(chunks) >= 3
        for previous, current in zip(chunks, chunks[1:]):
            assert current.text.startswith(previous.text[-20:].lstrip())

    def test_every_paragraph_preserved(self) -> None:
        """No paragraph content should be lost."""
        paragraphs = _paragraphs(6)
        chunks = Chunker(chunk_size=100, chunk_overlap=20).split("\n\n".join(paragraphs), 1)
        combined = "\n".join(c.text for c in chunks)

        for paragraph in paragraphs:
            assert paragraph in combined

    def test_blank_lines_with_spaces_separate_paragraphs(self) -> None:
        chunks = Chunker(chunk_size=30, chunk_overlap=5).split(
            "Alpha paragraph text here.\n   \nBeta paragraph text here.", 1
        )
        assert len(chunks) == 2
        assert chunks[1].text.endswith("Beta paragraph text here.")

    def test_long_paragraph_split_on_sentences(self) -> None:
        """An oversized paragraph should be split at sentence boundaries."""
        sentences = [f"This is sentence number {i} here." for i in range(10)]
        chunks = Chunker(chunk_size=100, chunk_overlap=20).split(" ".join(sentences), 1)

        assert len(chunks) > 1
        for chunk in chunks:
            assert len(chunk.text) <= 100
            assert chunk.text.endswith(".")
        combined = " ".join(c.text for c in chunks)
        for sentence in sentences:
            assert sentence in combined

    def test_short_sentence_fragments_dropped(self) -> None:
        sentences = [f"This is sentence number {i} here." for i in range(8)]
        text = " Ok! ".join(sentences)
        chunks = Chunker(chunk_size=100, chunk_overlap=20).split(text, 1)

        assert not any("Ok!" in chunk.text for chunk in chunks)

    def test_final_short_buffer_emitted(self) -> None:
        text = "\n\n".join(_paragraphs(3)) + "\n\nTail."
        chunks = Chunker(chunk_size=100, chunk_overlap=20).split(text, 1)

        assert chunks[-1].text.endswith("Tail.")


class TestPageEstimate:
    """Test page interpolation."""

    def test_first_chunk_on_first_page(self) -> None:
        assert Chunker(chunk_size=100, chunk_overlap=10)._estimate_page(0, 300, 3) == 1

    def test_linear_interpolation(self) -> None:
        chunker = Chunker(chunk_size=100, chunk_overlap=10)
        assert chunker._estimate_page(1, 300, 3) == 1
        assert chunker._estimate_page(2, 300, 3) == 2

    def test_clamped_to_page_count(self) -> None:
        assert Chunker(chunk_size=100, chunk_overlap=10)._estimate_page(10, 300, 3) == 3

    def test_pages_within_range(self) -> None:
        text = "\n\n".join(_paragraphs(12))
        chunks = Chunker(chunk_size=100, chunk_overlap=20).split(text, 4)

        pages = [c.page for c in chunks]
        assert pages[0] == 1
        assert all(1 <= p <= 4 for p in pages)
        assert pages == sorted(pages)
