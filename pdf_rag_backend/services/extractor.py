from pypdf import PdfReader
from pypdf.errors import PyPdfError

from pdf_rag_backend.core.errors import ExtractionError
from pdf_rag_backend.services.text_cleaning import normalize_text

def extract_pdf_pages(file_path: str) -> list[dict]:
    """
    Returns one {"page": n, "text": ...} entry per page (1-based).

    Raises ExtractionError for unreadable or encrypted files and for PDFs with
    no extractable text at all (scanned documents are not OCR'd).
    """
    try:
        reader = PdfReader(file_path)
        if reader.is_encrypted and not reader.decrypt(""):
            raise ExtractionError("PDF is encrypted and cannot be read")
        pages = []
        for i, page in enumerate(reader.pages, start=1):
            text = normalize_text(page.extract_text() or "")
            pages.append({"page": i, "text": text})
    except ExtractionError:
        raise
    except (PyPdfError, OSError, ValueError) as exc:
        raise ExtractionError(f"Could not read PDF: {exc}") from exc

    if not any(p["text"] for p in pages):
        raise ExtractionError(
            "No extractable text found in PDF (scanned or image-only PDFs are not supported)"
        )
    return pages
