from __future__ import annotations

import re

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..lifecycle import TaskLifecycle, get_lifecycle
from ..models import Address, Owner, TaskRef
from ..schemas import AddressOut, TaskOut

router = APIRouter(
    prefix="/api/v1/records",
    tags=["records"],
)

_ADDRESS_RE = re.compile(r"^[0-9a-f]{64}$")


# PUBLIC_INTERFACE
@router.get(
    "/derive",
    response_model=AddressOut,
    summary="Derive Address",
    description="Compute the address a task with the given owner and title is stored at. Pure computation.",
    responses={400: {"description": "Owner is not a 64 character hex string"}},
)
def derive_address(
    owner: str = Query(..., description="Owner identity as 64 hex characters"),
    title: str = Query(..., description="Task title, used verbatim"),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
) -> AddressOut:
    """
    Derive the storage address for (owner, title).
    """
    try:
        parsed = Owner.from_hex(owner)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="owner must be 64 hex characters") from e
    return AddressOut(address=lifecycle.address_of(parsed, title), owner=parsed.hex(), title=title)


# PUBLIC_INTERFACE
@router.get(
    "/{address}",
    response_model=TaskOut,
    summary="Get Record",
    description="Read the task stored at an address.",
    responses={
        400: {"description": "Malformed address"},
        404: {"description": "No task at this address"},
    },
)
def get_record(address: str, lifecycle: TaskLifecycle = Depends(get_lifecycle)) -> TaskOut:
    """
    Direct lookup of a task by its derived address.
    """
    normalized = address.strip().lower()
    if not _ADDRESS_RE.match(normalized):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="address must be 64 hex characters")
    record = lifecycle.read(Address(normalized))
    return TaskOut.from_ref(TaskRef(address=Address(normalized), record=record))
