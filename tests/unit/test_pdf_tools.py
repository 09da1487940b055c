from io import BytesIO

import pytest
from pypdf import PdfReader

from src.bp_common.errors import CorruptDocumentError
from src.bp_document.domain.pdf_tools import (
    append_blank_page,
    combine_pdfs,
    count_pages,
    validate_pdf,
)


def _widths(data: bytes) -> list[int]:
    return [round(float(p.mediabox.width)) for p in PdfReader(BytesIO(data)).pages]


class TestCountPages:
    def test_counts(self, make_pdf) -> None:
        assert count_pages(make_pdf(pages=5)) == 5

    def test_garbage_is_corrupt(self) -> None:
        with pytest.raises(CorruptDocumentError):
            count_pages(b"definitely not a pdf")


class TestAppendBlankPage:
    def test_adds_one_page(self, make_pdf) -> None:
        padded = append_blank_page(make_pdf(pages=7))
        assert count_pages(padded) == 8

    def test_blank_matches_last_page_size(self, make_pdf) -> None:
        padded = append_blank_page(make_pdf(pages=1, width=420, height=595))
        reader = PdfReader(BytesIO(padded))
        last = reader.pages[-1]
        assert round(float(last.mediabox.width)) == 420
        assert round(float(last.mediabox.height)) == 595

    def test_garbage_is_corrupt(self) -> None:
        with pytest.raises(CorruptDocumentError):
            append_blank_page(b"%PDF-1.4 broken")


class TestValidatePdf:
    def test_valid(self, make_pdf) -> None:
        assert validate_pdf(make_pdf(pages=2)) is None

    def test_empty(self) -> None:
        assert validate_pdf(b"") == "Empty PDF file"

    def test_none(self) -> None:
        assert validate_pdf(None) == "Empty PDF file"

    def test_corrupt(self) -> None:
        reason = validate_pdf(b"hello world")
        assert reason is not None
        assert reason.startswith("Corrupt or invalid PDF")


class TestCombinePdfs:
    def test_order_and_copies(self, make_pdf) -> None:
        a = make_pdf(pages=2, width=101)
        b = make_pdf(pages=1, width=202)
        out = combine_pdfs([(a, 2), (b, 3)])
        assert _widths(out) == [101, 101, 101, 101, 202, 202, 202]

    def test_single_part(self, make_pdf) -> None:
        assert count_pages(combine_pdfs([(make_pdf(pages=3), 1)])) == 3
