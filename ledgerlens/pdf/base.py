from abc import ABC, abstractmethod


class BasePdfExtractor(ABC):
    """Contract for PDF text-layer adapters."""

    @abstractmethod
    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        """Return the text layer of every page, in page order.

        Raises:
            PdfExtractionError: if the document cannot be opened or read.
        """

    def extract(self, pdf_bytes: bytes) -> str:
        """Return the whole text layer as one newline-joined string."""
        return "\n".join(self.extract_pages(pdf_bytes)).strip()
