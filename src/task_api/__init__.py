"""
Task Backend package.

Owner-addressed task records: each task lives at an address derived from
(owner identity, title) and follows a create / update / complete / delete
lifecycle. The FastAPI application lives in ``src.task_api.main``.
"""

from .address import AddressDeriver, derive_address  # noqa: F401
from .errors import (  # noqa: F401
    AlreadyExists,
    DescriptionEmpty,
    DescriptionTooLong,
    NotFound,
    TaskError,
    TitleEmpty,
    TitleTooLong,
    Unauthorized,
)
from .lifecycle import TaskLifecycle  # noqa: F401
from .models import Address, Owner, Refund, TaskRecord, TaskRef  # noqa: F401
