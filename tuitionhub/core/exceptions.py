# tuitionhub/core/exceptions.py
# Domain error taxonomy
#
# Services raise these; handlers registered in main.py turn them into the
# standard error envelope: {"success": false, "message": ..., "error": ...}
#
#   ValidationFailed  -> 400  missing/malformed fields, enum violations
#   InvalidState      -> 400  transition attempted from the wrong state
#   PaymentFailed     -> 400  payment collaborator did not confirm the charge
#   Unauthenticated   -> 401  missing/invalid/expired credential
#   Forbidden         -> 403  role or ownership mismatch
#   NotFound          -> 404  dangling id
#   Conflict          -> 409  duplicate apply, edit of a processed application

from typing import Any, Dict, Optional


class AppError(Exception):
    """Base class for every business-rule violation."""

    status_code: int = 400
    error: str = "error"

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_dict(self) -> Dict[str, Any]:
        body = {"success": False, "message": self.message, "error": self.error}
        body.update(self.extra)
        return body


class ValidationFailed(AppError):
    status_code = 400
    error = "validation_error"


class InvalidState(AppError):
    status_code = 400
    error = "invalid_state"


class PaymentFailed(AppError):
    status_code = 400
    error = "payment_failed"


class Unauthenticated(AppError):
    status_code = 401
    error = "unauthenticated"


class Forbidden(AppError):
    status_code = 403
    error = "forbidden"


class NotFound(AppError):
    status_code = 404
    error = "not_found"


class Conflict(AppError):
    status_code = 409
    error = "conflict"
