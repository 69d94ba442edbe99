from dataclasses import dataclass

import pymupdf

from ledgerlens.pdf.exceptions import PdfRasterizationError


@dataclass(frozen=True)
class PageImage:
    page_number: int
    png_bytes: bytes


class PyMuPdfRasterizer:
    """Renders PDF pages to PNG images fitted inside a fixed frame.

    The aspect ratio of each page is kept; the page is scaled so that it fills
    as much of the ``width`` x ``height`` frame as possible.
    """

    def __init__(self, width: int = 1920, height: int = 1080) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("Render frame dimensions must be positive")
        self._width = width
        self._height = height

    def render(self, pdf_bytes: bytes) -> list[PageImage]:
        """Render every page; page numbers start at 1.

        Raises:
            PdfRasterizationError: if the document cannot be opened or rendered.
        """
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                return [
                    PageImage(page_number=index, png_bytes=self._render_page(page))
                    for index, page in enumerate(doc, start=1)
                ]
        except Exception as exc:
            raise PdfRasterizationError(f"Failed to render PDF pages: {exc}") from exc

    def _render_page(self, page: pymupdf.Page) -> bytes:
        zoom = self._zoom_for(page.rect.width, page.rect.height)
        pixmap = page.get_pixmap(matrix=pymupdf.Matrix(zoom, zoom), alpha=False)
        return pixmap.tobytes("png")

    def _zoom_for(self, page_width: float, page_height: float) -> float:
        if page_width <= 0 or page_height <= 0:
            return 1.0
        return min(self._width / page_width, self._height / page_height)
