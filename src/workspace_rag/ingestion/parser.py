"""Text extraction from raw uploaded bytes."""

from __future__ import annotations

import logging
import re

from langchain_community.document_loaders.parsers.pdf import PyPDFParser
from langchain_core.documents.base import Blob

from workspace_rag.errors import ParseError
from workspace_rag.models import ParsedFile

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPES = frozenset({"application/pdf", "application/x-pdf"})

_WHITESPACE = re.compile(r"\s+")


def _normalise_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def extract_pdf_text(data: bytes, filename: str) -> str:
    """Extract text page by page and join the pages with a single space."""
    blob = Blob.from_data(data, mime_type="application/pdf", path=filename)
    pages = PyPDFParser().lazy_parse(blob)
    return " ".join(_normalise_whitespace(page.page_content) for page in pages)


def count_words(text: str) -> int:
    """Number of pieces left after splitting on runs of whitespace."""
    return len(_WHITESPACE.split(text))


def parse_file(data: bytes, content_type: str, filename: str) -> ParsedFile:
    """Extract the text content of an uploaded file.

    Parameters
    ----------
    data:
        Raw file bytes.
    content_type:
        Declared MIME type.  PDFs are extracted page by page; everything
        else is decoded as UTF-8.
    filename:
        Original filename, used for error messages only.

    Raises
    ------
    ParseError
        When extraction or decoding fails.
    """
    mime = content_type.split(";", 1)[0].strip().lower()
    try:
        if mime in PDF_CONTENT_TYPES:
            content = extract_pdf_text(data, filename)
        else:
            content = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(filename, f"content is not valid UTF-8 ({exc.reason})") from exc
    except Exception as exc:
        raise ParseError(filename, str(exc) or type(exc).__name__) from exc

    logger.info("Parsed %s (%s, %d chars)", filename, mime, len(content))
    return ParsedFile(document_content=content, word_count=count_words(content))
