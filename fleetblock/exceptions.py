"""Custom exceptions for the blocked-vehicle fetch pipeline."""


class FleetBlockError(Exception):
    """Base class for all fleetblock errors."""

    pass


class ValidationError(FleetBlockError):
    """Raised when a required input is missing, before any network call."""

    pass


class TokenExtractionError(FleetBlockError):
    """Raised when the login page cannot be fetched or its form tokens are missing."""

    pass


class AuthenticationFailure(FleetBlockError):
    """Raised when the login sequence does not end in an authenticated session."""

    pass


class SessionExpiredError(FleetBlockError):
    """Custom exception to indicate the session cookies are stale or invalid."""

    pass


class CategoryFetchError(FleetBlockError):
    """Raised when the first page of a category cannot be fetched or decoded."""

    def __init__(self, category_id: int, message: str):
        super().__init__(message)
        self.category_id = category_id


class PageFetchError(FleetBlockError):
    """Raised for a supplementary page failure. Always absorbed by the fetcher."""

    def __init__(self, category_id: int, row_no: int, message: str):
        super().__init__(message)
        self.category_id = category_id
        self.row_no = row_no


class ProxyError(FleetBlockError):
    """Raised when the diagnostic proxy GET fails."""

    def __init__(self, message: str, status: int | None = None, data: str | None = None):
        super().__init__(message)
        self.status = status
        self.data = data
