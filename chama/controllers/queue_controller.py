# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: chair queue — submit, list, approve, discard."""
from typing import List, Optional

from fastapi import APIRouter, Depends

from chama.core.dependencies import current_principal, get_chair_queue, require
from chama.schemas import Principal, QueueApprove, QueueItemOut, QueueSubmit
from chama.services.queue_service import ChairQueue

router = APIRouter(tags=["Chair queue"])


@router.get("/chair-queue", response_model=List[QueueItemOut])
def list_queue(status: Optional[str] = None, type: Optional[str] = None,
               _: Principal = Depends(require("queue:read")),
               queue: ChairQueue = Depends(get_chair_queue)):
    return queue.list(status, type)


@router.post("/chair-queue", status_code=201, response_model=QueueItemOut)
def submit_to_queue(body: QueueSubmit,
                    principal: Principal = Depends(current_principal),
                    queue: ChairQueue = Depends(get_chair_queue)):
    """Secretaries queue Minutes; treasurers queue Loans and Reports."""
    return queue.submit(principal, body.type, body.data, body.author)


@router.patch("/chair-queue/{item_id}/approve", response_model=QueueItemOut)
def approve_item(item_id: str, body: Optional[QueueApprove] = None,
                 principal: Principal = Depends(require("queue:approve")),
                 queue: ChairQueue = Depends(get_chair_queue)):
    signature = body.signature if body else None
    return queue.approve(item_id, principal, signature)


@router.delete("/chair-queue/{item_id}", response_model=QueueItemOut)
def discard_item(item_id: str,
                 principal: Principal = Depends(require("queue:discard")),
                 queue: ChairQueue = Depends(get_chair_queue)):
    return queue.discard(item_id, principal)
