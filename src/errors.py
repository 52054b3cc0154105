"""Typed failures raised by the workflow, payment and encoding layers.

Every error carries a stable machine-readable ``code`` and the HTTP status the
transport layer should answer with. The API registers one handler for
``WorkflowError`` so endpoints never branch on error shape.
"""

from __future__ import annotations


class WorkflowError(Exception):
    code: str = "INTERNAL_ERROR"
    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        payload: dict = {"detail": self.message, "code": self.code}
        if self.retryable:
            payload["retryable"] = True
        return payload


class NotFoundError(WorkflowError):
    code = "NOT_FOUND"
    status_code = 404


class UnauthorizedError(WorkflowError):
    code = "UNAUTHORIZED"
    status_code = 401


class ForbiddenError(WorkflowError):
    code = "FORBIDDEN"
    status_code = 403


class ValidationFailedError(WorkflowError):
    code = "VALIDATION_ERROR"
    status_code = 400


class InvalidStatusTransitionError(WorkflowError):
    code = "INVALID_STATUS_TRANSITION"
    status_code = 400

    def __init__(self, from_status: str, to_status: str, message: str | None = None) -> None:
        super().__init__(message or f"Cannot transition from {from_status} to {to_status}")
        self.from_status = from_status
        self.to_status = to_status


class ConflictError(WorkflowError):
    code = "CONFLICT"
    status_code = 400


class EncodingError(WorkflowError):
    code = "ENCODING_ERROR"
    status_code = 422

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class TransactionConflictError(WorkflowError):
    code = "TRANSACTION_CONFLICT"
    status_code = 409
    retryable = True


class DatabaseUnavailableError(WorkflowError):
    code = "DATABASE_UNAVAILABLE"
    status_code = 503
    retryable = True
