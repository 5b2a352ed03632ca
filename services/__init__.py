"""External collaborators: quote and portfolio services."""


class ServiceError(Exception):
    """Base error raised by the quote and portfolio services."""
    pass


class QuoteServiceError(ServiceError):
    """Quotes could not be fetched."""
    pass


class PortfolioServiceError(ServiceError):
    """The portfolio could not be loaded."""
    pass


__all__ = ["ServiceError", "QuoteServiceError", "PortfolioServiceError"]
