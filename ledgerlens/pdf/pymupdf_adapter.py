import pymupdf

from ledgerlens.pdf.base import BasePdfExtractor
from ledgerlens.pdf.exceptions import PdfExtractionError


class PyMuPdfAdapter(BasePdfExtractor):
    """Reads the PDF text layer with PyMuPDF."""

    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                return [page.get_text() or "" for page in doc]
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf could not read text layer: {exc}") from exc
