from dataclasses import dataclass


UNAUTHENTICATED = "unauthenticated"
FORBIDDEN = "forbidden"
NOT_FOUND = "not_found"
CONFLICT = "conflict"
VALIDATION = "validation"
UNAVAILABLE = "unavailable"
INTERNAL = "internal"


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str
    category: str


class ErrorCatalog:
    INVALID_CREDENTIALS = ErrorDefinition("INVALID_CREDENTIALS", "Invalid credentials", UNAUTHENTICATED)
    TOKEN_MISSING = ErrorDefinition("TOKEN_MISSING", "Access token required", UNAUTHENTICATED)
    TOKEN_INVALID = ErrorDefinition("TOKEN_INVALID", "Invalid token", UNAUTHENTICATED)
    TOKEN_EXPIRED = ErrorDefinition("TOKEN_EXPIRED", "Token expired", UNAUTHENTICATED)
    TOKEN_MALFORMED = ErrorDefinition("TOKEN_MALFORMED", "Malformed token", UNAUTHENTICATED)
    IDENTITY_NOT_FOUND = ErrorDefinition("IDENTITY_NOT_FOUND", "User not found", UNAUTHENTICATED)
    INSUFFICIENT_ROLE = ErrorDefinition("INSUFFICIENT_ROLE", "Admin access required", FORBIDDEN)
    ACCESS_DENIED = ErrorDefinition("ACCESS_DENIED", "Access denied", FORBIDDEN)
    NOT_FOUND = ErrorDefinition("NOT_FOUND", "Resource not found", NOT_FOUND)
    CONFLICT = ErrorDefinition("CONFLICT", "Resource already exists", CONFLICT)
    VALIDATION_ERROR = ErrorDefinition("VALIDATION_ERROR", "Validation error", VALIDATION)
    STORE_UNAVAILABLE = ErrorDefinition("STORE_UNAVAILABLE", "Database unavailable", UNAVAILABLE)
    INTERNAL_ERROR = ErrorDefinition("INTERNAL_ERROR", "Internal server error", INTERNAL)


class AppError(Exception):
    def __init__(self, error: ErrorDefinition, details: object | None = None):
        self.error = error
        self.details = details
        super().__init__(error.message)

    @property
    def is_unauthenticated(self) -> bool:
        return self.error.category == UNAUTHENTICATED

    @property
    def is_forbidden(self) -> bool:
        return self.error.category == FORBIDDEN
