"""Custom exceptions for card search."""


class CardSearchError(Exception):
    """Base exception for card search errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class RepositoryError(CardSearchError):
    """Raised when a catalog lookup fails (connection loss, timeout, bad SQL)."""

    def __init__(self, operation: str, cause: BaseException | None = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Catalog lookup failed during {operation}{detail}")
        self.operation = operation
        self.cause = cause


class CatalogNotAvailableError(CardSearchError):
    """Raised when the catalog database file does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Card catalog not found at {path}. Run 'card-search init-db' first.")
        self.path = path


class SearchFailedError(CardSearchError):
    """Raised when the main retrieval query fails.

    Carries no partial results; the caller decides whether to retry.
    """

    def __init__(self, query: str):
        super().__init__("Search failed")
        self.query = query
