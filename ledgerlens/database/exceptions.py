class RepositoryError(Exception):
    """Base exception for storage errors."""


class DocumentNotFoundError(RepositoryError):
    """Raised when a document id does not exist."""


class InvalidStatusTransitionError(RepositoryError):
    """Raised when a document status change would move backwards or leave a terminal state."""
