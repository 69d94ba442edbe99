class VisionError(Exception):
    """Raised when a vision model call does not yield a usable reply."""


class VisionNetworkError(VisionError):
    """Raised when the vision provider is unreachable, times out or rejects the call."""
