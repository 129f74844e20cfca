"""Default text-extraction collaborator."""

import io
import logging
from typing import Protocol

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from ebook_analyzer.errors import ExtractionError

logger = logging.getLogger("ebook_analyzer.jobs.extraction")

PDF_MIME_TYPES = {"application/pdf", "application/x-pdf"}
TEXT_MIME_TYPES = {"text/plain", "text/markdown", "text/x-markdown"}


class TextExtractor(Protocol):
    """Turns an uploaded document into plain text."""

    def __call__(self, payload: bytes, mime_type: str) -> str:
        ...


def _base_mime(mime_type: str) -> str:
    return mime_type.split(";", 1)[0].strip().lower()


def extract_pdf_text(payload: bytes) -> str:
    """Extract the text layer of a PDF, page by page.

    Raises:
        ExtractionError: If the PDF cannot be read or has no text layer.
    """
    try:
        reader = PdfReader(io.BytesIO(payload))
        pages = [(page.extract_text() or "").strip() for page in reader.pages]
    except (PyPdfError, ValueError, OSError) as e:
        raise ExtractionError(f"Failed to parse PDF file: {e}") from e

    text = "\n\n".join(page for page in pages if page)
    if not text.strip():
        raise ExtractionError(
            "PDF has no extractable text; it may be scanned, encrypted, or malformed"
        )

    logger.debug(f"Extracted {len(text)} chars from {len(pages)} PDF pages")
    return text


def decode_text(payload: bytes) -> str:
    """Decode a plain-text upload, tolerating a UTF-8 BOM."""
    try:
        return payload.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ExtractionError(f"Text file is not valid UTF-8: {e}") from e


def extract_text(payload: bytes, mime_type: str) -> str:
    """Extract plain text from an uploaded document.

    Args:
        payload: Raw document bytes.
        mime_type: Declared MIME type of the upload.

    Returns:
        Extracted text (may be empty for an empty text file).

    Raises:
        ExtractionError: If the type is unsupported or extraction fails.
    """
    mime = _base_mime(mime_type)
    if mime in PDF_MIME_TYPES:
        return extract_pdf_text(payload)
    if mime in TEXT_MIME_TYPES:
        return decode_text(payload)
    raise ExtractionError(f"No text extractor for MIME type {mime_type!r}")
