# util/errors.py
from fastapi import HTTPException, status
from util.enums import ErrorMessage


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status & message.
    def __init__(
        self, message: str, http_status: int = status.HTTP_400_BAD_REQUEST
    ) -> None:
        super().__init__(status_code=http_status, detail=message)

    @classmethod
    def of(cls, error: ErrorMessage, *args: object) -> "AppError":
        info = error.value
        return cls(info.message.format(*args), info.http_status)


class NotFoundError(AppError):
    pass


class AlreadyExistsError(AppError):
    pass


class UnauthorizedError(AppError):
    pass


class ForbiddenError(AppError):
    pass


class MalformedReferenceError(AppError):
    pass


class MissingBundleReferenceError(AppError):
    pass


class InvalidSymbolMapError(AppError):
    pass


class InvalidArchiveError(AppError):
    pass


class StorageError(AppError):
    pass
