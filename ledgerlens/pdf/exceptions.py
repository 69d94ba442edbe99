class PdfError(Exception):
    """Base exception for PDF handling."""


class PdfExtractionError(PdfError):
    """Raised when the text layer of a PDF cannot be read."""


class PdfRasterizationError(PdfError):
    """Raised when PDF pages cannot be rendered to images."""
