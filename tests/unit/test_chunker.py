"""Unit tests for the chunker module."""

import pytest
from langchain_core.documents import Document

from workspace_rag.ingestion.chunker import (
    PARAGRAPH_BREAK,
    ParagraphTextSplitter,
    chunk_text_by_paragraphs,
)


def test_short_text_yields_single_trimmed_chunk() -> None:
    """Text below min_chunk_size becomes exactly one chunk."""
    assert chunk_text_by_paragraphs("  Hello world \n") == ["Hello world"]


def test_long_text_splits_on_paragraph_boundaries(long_text: str) -> None:
    chunks = chunk_text_by_paragraphs(long_text)
    assert len(chunks) == 3
    # Each window is extended to the next blank line, so chunks start on a paragraph.
    assert chunks[0].startswith("0: ")
    assert chunks[1].startswith("5: ")
    assert chunks[2].startswith("10: ")


def test_chunks_carry_no_surrounding_whitespace(long_text: str) -> None:
    chunks = chunk_text_by_paragraphs(long_text)
    assert all(c == c.strip() for c in chunks)
    assert not chunks[-1].endswith(PARAGRAPH_BREAK)


def test_all_but_last_chunk_meet_minimum(long_text: str) -> None:
    chunks = chunk_text_by_paragraphs(long_text, max_chunk_size=700, min_chunk_size=400)
    assert len(chunks) > 1
    assert all(len(c.strip()) >= 400 for c in chunks[:-1])


def test_chunks_preserve_content_and_order(long_text: str) -> None:
    chunks = chunk_text_by_paragraphs(long_text, max_chunk_size=600, min_chunk_size=200)
    assert " ".join(chunks).split() == long_text.split()


def test_no_characters_lost_at_window_edges() -> None:
    """Paragraphs without any whitespace expose a dropped boundary character."""
    text = PARAGRAPH_BREAK.join(["a" * 1600, "b" * 700, "c" * 900, "d" * 200])
    chunks = chunk_text_by_paragraphs(text)

    assert len(chunks) == 2
    assert chunks[0] == "a" * 1600
    assert chunks[-1].endswith(PARAGRAPH_BREAK + "d" * 200)
    rebuilt = "".join(c.replace(PARAGRAPH_BREAK, "") for c in chunks)
    assert rebuilt == text.replace(PARAGRAPH_BREAK, "")


def test_windows_never_shrink_below_max_chunk_size() -> None:
    text = ("a" * 40 + "\n\n") * 10
    chunks = chunk_text_by_paragraphs(text, max_chunk_size=100, min_chunk_size=10)
    assert all(len(c) >= 100 for c in chunks[:-1])


def test_short_tail_is_merged_into_previous_chunk() -> None:
    text = "a" * 12 + "\n\n" + "bb"
    chunks = chunk_text_by_paragraphs(text, max_chunk_size=10, min_chunk_size=5)
    assert chunks == ["a" * 12 + "\n\nbb"]


def test_tail_just_under_minimum_is_merged() -> None:
    """The tail's trimmed length decides, not the accumulated separator."""
    text = "a" * 12 + "\n\n" + "bbb"
    chunks = chunk_text_by_paragraphs(text, max_chunk_size=10, min_chunk_size=5)
    assert chunks == ["a" * 12 + "\n\nbbb"]

    chunks = chunk_text_by_paragraphs("x" * 1600 + "\n\n" + "y" * 498)
    assert chunks == ["x" * 1600 + "\n\n" + "y" * 498]


def test_tail_at_minimum_becomes_its_own_chunk() -> None:
    text = "a" * 12 + "\n\n" + "bbbbb"
    chunks = chunk_text_by_paragraphs(text, max_chunk_size=10, min_chunk_size=5)
    assert chunks == ["a" * 12, "bbbbb"]


def test_no_paragraph_break_takes_rest_of_text() -> None:
    text = "x" * 2500
    assert chunk_text_by_paragraphs(text) == [text]


def test_empty_text_yields_one_empty_chunk() -> None:
    assert chunk_text_by_paragraphs("") == [""]


def test_splitter_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError, match="min_chunk_size"):
        ParagraphTextSplitter(max_chunk_size=100, min_chunk_size=200)


def test_splitter_matches_chunk_function(long_text: str) -> None:
    splitter = ParagraphTextSplitter(max_chunk_size=700, min_chunk_size=400)
    assert splitter.split_text(long_text) == chunk_text_by_paragraphs(long_text, 700, 400)


def test_split_documents_preserves_metadata(long_text: str) -> None:
    """Metadata from the source document should be preserved in chunks."""
    docs = [Document(page_content=long_text, metadata={"source": "test.md"})]
    chunks = ParagraphTextSplitter().split_documents(docs)
    assert len(chunks) == 3
    assert all(c.metadata.get("source") == "test.md" for c in chunks)
