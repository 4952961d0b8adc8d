from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    code = "SERVER_ERROR"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class UnauthorizedError(AppError):
    code = "UNAUTHORIZED"


class NotFoundError(AppError):
    code = "NOT_FOUND"


class ForbiddenError(AppError):
    code = "FORBIDDEN"


class ConflictError(AppError):
    """Unique-key collision. Resolved inside the services, never sent to clients."""

    code = "CONFLICT"


class InvalidArgumentError(AppError):
    code = "INVALID_ARGUMENT"


class ServerError(AppError):
    code = "SERVER_ERROR"
