class IngestionError(Exception):
    """Base exception for all ingestion errors."""


class UploadValidationError(IngestionError):
    """Raised when an upload is rejected before any document is created."""


class EmptyUploadError(UploadValidationError):
    """Raised when the uploaded stream has no content."""


class UploadTooLargeError(UploadValidationError):
    """Raised when the upload exceeds the configured size limit."""


class DisallowedExtensionError(UploadValidationError):
    """Raised when the file extension is not on the allow-list."""


class InvalidSignatureError(UploadValidationError):
    """Raised when the leading bytes do not match the declared file type."""


class UnsupportedFormatError(UploadValidationError):
    """Raised when no extractor exists for the detected format."""


class ExtractionError(IngestionError):
    """Raised when a file cannot be parsed as a whole."""


class ExtractionEmptyError(ExtractionError):
    """Raised when parsing succeeded but yielded no valid records."""
