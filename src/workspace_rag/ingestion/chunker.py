"""Paragraph-aware text chunking."""

from __future__ import annotations

from typing import Any

from langchain_text_splitters import TextSplitter

PARAGRAPH_BREAK = "\n\n"
DEFAULT_MAX_CHUNK_SIZE = 1500
DEFAULT_MIN_CHUNK_SIZE = 500


def chunk_text_by_paragraphs(
    text: str,
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
    min_chunk_size: int = DEFAULT_MIN_CHUNK_SIZE,
) -> list[str]:
    """Split *text* into chunks that end on blank-line boundaries.

    Each window starts ``max_chunk_size`` characters long and is extended
    forward to the next ``"\\n\\n"`` (or to the end of the text).  Windows
    whose trimmed length is below ``min_chunk_size`` are held back and
    emitted later: on their own once the accumulation is large enough,
    otherwise appended to the last emitted chunk.

    Every chunk but the last meets ``min_chunk_size``.  When the whole text
    is shorter than ``min_chunk_size`` the result is a single chunk holding
    the trimmed text.

    Parameters
    ----------
    text:
        Extracted document text.
    max_chunk_size:
        Minimum window length before looking for a paragraph break.
    min_chunk_size:
        Smallest trimmed length emitted as a chunk of its own.

    Returns
    -------
    list[str]
        Chunks in document order.
    """
    chunks: list[str] = []
    pending = ""

    start = 0
    while start < len(text):
        end = start + max_chunk_size
        if end >= len(text):
            end = len(text)
        else:
            boundary = text.find(PARAGRAPH_BREAK, end)
            end = boundary if boundary != -1 else len(text)

        piece = text[start:end].strip()
        if len(piece) >= min_chunk_size:
            chunks.append(piece)
            pending = ""
        else:
            pending += piece + PARAGRAPH_BREAK

        start = end + 1

    tail = pending.strip()
    if len(tail) >= min_chunk_size:
        chunks.append(tail)
    elif chunks:
        if tail:
            chunks[-1] += PARAGRAPH_BREAK + tail
    else:
        chunks.append(tail)

    return chunks


class ParagraphTextSplitter(TextSplitter):
    """LangChain splitter wrapper around :func:`chunk_text_by_paragraphs`.

    This is the splitter the ingestion worker uses.  Because it is a regular
    ``TextSplitter``, ``split_documents`` also works on LangChain
    ``Document`` lists and keeps their metadata.
    """

    def __init__(
        self,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        min_chunk_size: int = DEFAULT_MIN_CHUNK_SIZE,
        **kwargs: Any,
    ) -> None:
        if min_chunk_size > max_chunk_size:
            raise ValueError(
                f"min_chunk_size ({min_chunk_size}) must not exceed "
                f"max_chunk_size ({max_chunk_size})"
            )
        kwargs.setdefault("chunk_overlap", 0)
        super().__init__(chunk_size=max_chunk_size, **kwargs)
        self.max_chunk_size = max_chunk_size
        self.min_chunk_size = min_chunk_size

    def split_text(self, text: str) -> list[str]:
        return chunk_text_by_paragraphs(text, self.max_chunk_size, self.min_chunk_size)
