"""Error taxonomy for delivery lifecycle decisions.

Every rejected intent raises exactly one of these. Each error names the rule
that was violated so callers can render a distinct message per failure.
Malformed input is reported with Protean's ``ValidationError``.
"""

from protean.exceptions import ValidationError

__all__ = [
    "Conflict",
    "Forbidden",
    "InvalidTransition",
    "LifecycleError",
    "NotFound",
    "PreconditionFailed",
    "Unavailable",
    "ValidationError",
]


class LifecycleError(Exception):
    """Base class for rejected lifecycle intents."""

    code = "lifecycle_error"

    def __init__(self, rule: str, message: str):
        super().__init__(message)
        self.rule = rule
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "rule": self.rule, "message": self.message}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(rule={self.rule!r}, message={self.message!r})"


class NotFound(LifecycleError):
    code = "not_found"


class Forbidden(LifecycleError):
    code = "forbidden"


class InvalidTransition(LifecycleError):
    code = "invalid_transition"


class PreconditionFailed(LifecycleError):
    code = "precondition_failed"


class Conflict(LifecycleError):
    code = "conflict"


class Unavailable(LifecycleError):
    code = "unavailable"
