class AnalyticsError(Exception):
    """Base exception for analytics errors."""


class AnalyticsPreconditionError(AnalyticsError):
    """Raised when there is not enough data to compute the requested result."""
