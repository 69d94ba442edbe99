class FileStoreError(Exception):
    """Raised when an uploaded file cannot be written or read back."""
