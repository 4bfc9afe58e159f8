from typing import Any, Optional


class CatalogError(Exception):
    """Error surfaced to API callers with a machine-readable code."""

    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, invalid_args: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.invalid_args = invalid_args


class BadUserInputError(CatalogError):
    code = "BAD_USER_INPUT"


class NotAuthenticatedError(CatalogError):
    code = "UNAUTHENTICATED"

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)
