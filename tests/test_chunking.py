import pytest
from pypdf import PdfWriter

from conftest import page_text
from pdf_rag_backend.core.errors import ExtractionError
from pdf_rag_backend.services.chunker import chunk_pages
from pdf_rag_backend.services.extractor import extract_pdf_pages
from pdf_rag_backend.services.text_cleaning import normalize_text


class TestChunkPages:
    def test_chunks_respect_size_limit(self):
        pages = [{"page": p, "text": page_text(p)} for p in (1, 2, 3)]
        chunks = chunk_pages(pages, chunk_size=1000, chunk_overlap=200)
        assert chunks
        assert all(len(c.text) <= 1000 for c in chunks)

    def test_consecutive_chunks_overlap(self):
        chunks = chunk_pages([{"page": 1, "text": page_text(1, 4000)}], 1000, 200)
        assert len(chunks) >= 3
        for prev, nxt in zip(chunks, chunks[1:]):
            assert nxt.text[:30] in prev.text

    def test_three_pages_of_2500_chars(self):
        pages = [{"page": p, "text": page_text(p)} for p in (1, 2, 3)]
        chunks = chunk_pages(pages, 1000, 200)
        assert 9 <= len(chunks) <= 12

    def test_page_numbers_and_indexes(self):
        pages = [{"page": 1, "text": page_text(1)}, {"page": 2, "text": ""}, {"page": 3, "text": page_text(3)}]
        chunks = chunk_pages(pages, 1000, 200)
        assert [c.chunk_index for c in chunks] == list(range(len(chunks)))
        assert {c.page for c in chunks} == {1, 3}
        assert all("page 1" in c.text for c in chunks if c.page == 1)

    def test_prefers_paragraph_boundaries(self):
        para_a = "A" * 600
        para_b = "B" * 600
        chunks = chunk_pages([{"page": 1, "text": f"{para_a}\n\n{para_b}"}], 1000, 200)
        assert [c.text for c in chunks] == [para_a, para_b]


def test_normalize_text_joins_hyphenated_words_and_collapses_whitespace():
    raw = "Quarterly   re-\nport\r\n\n\n\nNext\tsection"
    assert normalize_text(raw) == "Quarterly report\n\nNext section"


class TestExtractor:
    def test_garbage_file_is_rejected(self, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"this is not a pdf at all")
        with pytest.raises(ExtractionError):
            extract_pdf_pages(str(path))

    def test_pdf_without_text_is_rejected(self, tmp_path):
        path = tmp_path / "scanned.pdf"
        writer = PdfWriter()
        writer.add_blank_page(width=612, height=792)
        writer.add_blank_page(width=612, height=792)
        with open(path, "wb") as f:
            writer.write(f)

        with pytest.raises(ExtractionError, match="No extractable text"):
            extract_pdf_pages(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ExtractionError):
            extract_pdf_pages(str(tmp_path / "nope.pdf"))

    def test_password_protected_pdf_is_rejected(self, tmp_path):
        path = tmp_path / "locked.pdf"
        writer = PdfWriter()
        writer.add_blank_page(width=612, height=792)
        writer.encrypt(user_password="secret", owner_password="owner", algorithm="RC4-128")
        with open(path, "wb") as f:
            writer.write(f)

        with pytest.raises(ExtractionError, match="encrypted"):
            extract_pdf_pages(str(path))
