"""
Error taxonomy for the land registry.

Every failure that reaches an API caller carries a machine-readable ``kind``
and the HTTP status it maps to. The app registers a single handler for
``LandRegistryError`` that renders these as JSON.
"""


class LandRegistryError(Exception):
    """Base exception for registry failures"""
    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "kind": self.kind, "detail": self.message}


class ValidationError(LandRegistryError):
    """Raised when input is missing or malformed"""
    kind = "validation"
    status_code = 400


class NotFoundError(LandRegistryError):
    """Raised when a record or notification id is unknown"""
    kind = "not_found"
    status_code = 404


class InvalidStateError(LandRegistryError):
    """Raised when an action is not permitted from the record's current status"""
    kind = "invalid_state"
    status_code = 409


class ConflictError(LandRegistryError):
    """Raised on duplicate survey numbers or a lost conditional update"""
    kind = "conflict"
    status_code = 409


class ForbiddenError(LandRegistryError):
    """Raised when a client tries to bypass the transfer-request workflow"""
    kind = "forbidden"
    status_code = 403


class UpstreamError(LandRegistryError):
    """Raised when the record store or a required chain client is unavailable"""
    kind = "upstream_failure"
    status_code = 502
