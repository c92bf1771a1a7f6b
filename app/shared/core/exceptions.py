from typing import Optional, Dict, Any


class SpendLedgerException(Exception):
    """Base exception for all Spend Ledger errors."""
    def __init__(
        self,
        message: str,
        code: str = "internal_error",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}


class InputError(SpendLedgerException):
    """Raised when caller-supplied input cannot be processed. Never retried."""
    def __init__(self, message: str, code: str = "invalid_input", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, status_code=400, details=details)


class MissingFileError(InputError):
    """Raised when an upload request carries no file."""
    def __init__(self, message: str = "No file uploaded"):
        super().__init__(message, code="missing_file")


class EmptyInputError(InputError):
    """Raised when the uploaded CSV parses to zero rows."""
    def __init__(self, message: str = "Empty CSV file"):
        super().__init__(message, code="empty_csv")


class NoValidRowsError(InputError):
    """Raised when every parsed row was rejected by validation or in-batch dedup."""
    def __init__(self, message: str = "No valid rows found after parsing", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="no_valid_rows", details=details)


class MalformedRowError(InputError):
    """Raised when a required value is present but cannot be coerced (bad date, bad cost)."""
    def __init__(self, row_number: int, field: str, value: str):
        super().__init__(
            f"Row {row_number}: invalid {field} value '{value}'",
            code="malformed_row",
            details={"row": row_number, "field": field},
        )


class AuthError(SpendLedgerException):
    """Raised when authentication fails."""
    def __init__(self, message: str = "Unauthorized", code: str = "auth_error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, status_code=401, details=details)


class PermissionDeniedError(SpendLedgerException):
    """Raised when an authenticated user lacks the required role."""
    def __init__(self, message: str = "Forbidden: Insufficient permissions", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="forbidden", status_code=403, details=details)


class ResourceNotFoundError(SpendLedgerException):
    """Raised when a requested resource is not found."""
    def __init__(self, message: str, code: str = "not_found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, status_code=404, details=details)


class PersistenceError(SpendLedgerException):
    """
    Raised when the database layer fails.
    Messages are generic; the wrapped driver error is kept as __cause__ for logs only.
    """
    def __init__(self, message: str = "Database operation failed", code: str = "persistence_error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, status_code=500, details=details)


class ConnectionLostError(PersistenceError):
    """Transient connectivity failure (refused, reset, closed). Eligible for reconnect-and-retry."""
    def __init__(self, message: str = "Database connection lost"):
        super().__init__(message, code="connection_lost")


class ConstraintViolationError(PersistenceError):
    """A uniqueness / foreign-key / not-null constraint rejected the statement."""
    def __init__(self, message: str = "Database constraint violated"):
        super().__init__(message, code="constraint_violation")


class QueryError(PersistenceError):
    """Any other statement failure (malformed SQL, type mismatch, programming error)."""
    def __init__(self, message: str = "Database query failed"):
        super().__init__(message, code="query_error")
