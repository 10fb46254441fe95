from __future__ import annotations

from typing import ClassVar


# PUBLIC_INTERFACE
class TaskError(Exception):
    """
    Base class for task lifecycle failures.

    Each subclass carries a stable error code (used as the ``error`` field of
    API responses), a human readable message and the HTTP status the API
    layer maps it to.
    """

    code: ClassVar[str] = "TaskError"
    message: ClassVar[str] = "Task operation failed"
    status_code: ClassVar[int] = 400

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)
        self.detail = detail


class TitleEmpty(TaskError):
    code = "TitleEmpty"
    message = "Title is empty"


class TitleTooLong(TaskError):
    code = "TitleTooLong"
    message = "Title can't be more than 100 bytes"


class DescriptionEmpty(TaskError):
    code = "DescriptionEmpty"
    message = "Description is empty"


class DescriptionTooLong(TaskError):
    code = "DescriptionTooLong"
    message = "Description can't be more than 1000 bytes"


class AlreadyExists(TaskError):
    code = "AlreadyExists"
    message = "Task already exists"
    status_code = 409


class NotFound(TaskError):
    code = "NotFound"
    message = "Task not found"
    status_code = 404


class Unauthorized(TaskError):
    code = "Unauthorized"
    message = "Unauthorized"
    status_code = 403


class RecordDecodeError(ValueError):
    """Raised when a stored buffer does not hold a valid task record."""
