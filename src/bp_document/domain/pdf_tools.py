"""PDF helpers built on pypdf: page counting, duplex padding, validation, combining.

All functions are synchronous and CPU-bound; async callers run them through
asyncio.to_thread.
"""

from collections.abc import Sequence
from io import BytesIO

from pypdf import PdfReader, PdfWriter

from src.bp_common.errors import CorruptDocumentError


def _open(data: bytes) -> PdfReader:
    reader = PdfReader(BytesIO(data))
    if reader.is_encrypted:
        raise ValueError("encrypted documents are not supported")
    return reader


def _to_bytes(writer: PdfWriter) -> bytes:
    buf = BytesIO()
    writer.write(buf)
    return buf.getvalue()


def count_pages(data: bytes) -> int:
    """Number of real pages; raises CorruptDocumentError if unparseable or empty."""
    try:
        pages = len(_open(data).pages)
    except Exception as e:
        raise CorruptDocumentError(str(e) or type(e).__name__) from e
    if pages <= 0:
        raise CorruptDocumentError("document has no pages")
    return pages


def append_blank_page(data: bytes) -> bytes:
    """Copy of the document with one blank page sized like its last page."""
    try:
        reader = _open(data)
        last = reader.pages[-1]
        writer = PdfWriter()
        writer.append(reader)
        writer.add_blank_page(
            width=float(last.mediabox.width),
            height=float(last.mediabox.height),
        )
        return _to_bytes(writer)
    except Exception as e:
        raise CorruptDocumentError(f"padding failed: {e}") from e


def validate_pdf(data: bytes | None) -> str | None:
    """Return a human-readable reason if the bytes are not a usable PDF, else None."""
    if not data:
        return "Empty PDF file"
    try:
        pages = len(_open(data).pages)
    except Exception as e:
        return f"Corrupt or invalid PDF: {str(e) or type(e).__name__}"
    if pages == 0:
        return "PDF has no pages"
    return None


def combine_pdfs(parts: Sequence[tuple[bytes, int]]) -> bytes:
    """Concatenate (pdf_bytes, copies) parts in order, each repeated `copies` times.

    Every copy is appended from a fresh reader so the output holds distinct
    page objects rather than repeated references to one clone.
    """
    writer = PdfWriter()
    for data, copies in parts:
        for _ in range(copies):
            writer.append(PdfReader(BytesIO(data)))
    return _to_bytes(writer)
