from ledgerlens.config.settings import Settings
from ledgerlens.pdf.base import BasePdfExtractor
from ledgerlens.pdf.pdfplumber_adapter import PdfPlumberAdapter
from ledgerlens.pdf.pymupdf_adapter import PyMuPdfAdapter
from ledgerlens.pdf.rasterizer import PyMuPdfRasterizer


class PdfExtractorFactory:
    """Builds the PDF text adapter and page rasterizer selected in settings."""

    ADAPTERS: dict[str, type[BasePdfExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfExtractor:
        engine = settings.pdf_engine.strip().lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()

    @classmethod
    def create_rasterizer(cls, settings: Settings) -> PyMuPdfRasterizer:
        return PyMuPdfRasterizer(
            width=settings.pdf_render_width,
            height=settings.pdf_render_height,
        )
