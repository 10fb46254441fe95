from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from ..auth import get_current_owner
from ..lifecycle import TaskLifecycle, get_lifecycle
from ..models import Owner
from ..schemas import TaskCreate, TaskOut, TaskUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
)

_ERROR_RESPONSES = {
    400: {"description": "Malformed caller identity"},
    401: {"description": "Caller identity missing or invalid"},
    404: {"description": "Task not found"},
}


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a task owned by the caller at the address derived from (caller, title).",
    responses={
        201: {"description": "Task created successfully"},
        400: {"description": "Title or description rejected"},
        409: {"description": "A task with this title already exists for the caller"},
    },
)
def create_task(
    payload: TaskCreate,
    owner: Owner = Depends(get_current_owner),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
) -> TaskOut:
    """
    Create a new task for the calling owner.
    """
    ref = lifecycle.create(owner, payload.title, payload.description)
    return TaskOut.from_ref(ref)


# PUBLIC_INTERFACE
@router.post(
    "/{title:path}/complete",
    response_model=TaskOut,
    summary="Complete Task",
    description="Mark the caller's task as completed. Completing twice is not an error.",
    responses=_ERROR_RESPONSES,
)
def complete_task(
    title: str,
    owner: Owner = Depends(get_current_owner),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
) -> TaskOut:
    """
    Set the completion flag on the caller's task.
    """
    return TaskOut.from_ref(lifecycle.complete(owner, title))


# PUBLIC_INTERFACE
@router.get(
    "/{title:path}",
    response_model=TaskOut,
    summary="Get Task",
    description="Get the caller's task by title.",
    responses=_ERROR_RESPONSES,
)
def get_task(
    title: str,
    owner: Owner = Depends(get_current_owner),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
) -> TaskOut:
    """
    Retrieve the caller's task stored at the address derived from its title.
    """
    return TaskOut.from_ref(lifecycle.get(owner, title))


# PUBLIC_INTERFACE
@router.patch(
    "/{title:path}",
    response_model=TaskOut,
    summary="Update Task",
    description="Replace the description of the caller's task. Title, owner and timestamps never change.",
    responses={**_ERROR_RESPONSES, 400: {"description": "Description or caller identity rejected"}},
)
def update_task(
    title: str,
    payload: TaskUpdate,
    owner: Owner = Depends(get_current_owner),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
) -> TaskOut:
    """
    Update the description of the caller's task.
    """
    return TaskOut.from_ref(lifecycle.update(owner, title, payload.description))


# PUBLIC_INTERFACE
@router.delete(
    "/{title:path}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Task",
    description="Delete the caller's task and refund its storage deposit to the caller.",
    responses={
        **_ERROR_RESPONSES,
        204: {"description": "Task deleted"},
        403: {"description": "Caller does not own the task"},
    },
)
def delete_task(
    title: str,
    owner: Owner = Depends(get_current_owner),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
) -> None:
    """
    Delete a task. Returns 204 on success, 404 if not found.
    """
    refund = lifecycle.delete(owner, title)
    logger.debug("Refunded %s to %s", refund.amount, refund.beneficiary)
    return None
