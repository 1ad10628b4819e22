# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: polls — create, list, vote, open/close."""
from typing import List

from fastapi import APIRouter, Depends

from chama.core.dependencies import get_poll_service, require
from chama.schemas import PollCreate, PollOut, PollStatusUpdate, Principal, VoteRequest
from chama.services.poll_service import PollService

router = APIRouter(tags=["Polls"])


@router.get("/polls", response_model=List[PollOut])
def list_polls(polls: PollService = Depends(get_poll_service)):
    return polls.list()


@router.get("/polls/{poll_id}", response_model=PollOut)
def get_poll(poll_id: str, polls: PollService = Depends(get_poll_service)):
    return polls.get(poll_id)


@router.post("/polls", status_code=201, response_model=PollOut)
def create_poll(body: PollCreate,
                principal: Principal = Depends(require("polls:create")),
                polls: PollService = Depends(get_poll_service)):
    return polls.create(body.question, body.options, principal.email)


@router.patch("/polls/{poll_id}", response_model=PollOut)
def vote(poll_id: str, body: VoteRequest,
         principal: Principal = Depends(require("polls:vote")),
         polls: PollService = Depends(get_poll_service)):
    """Cast the caller's single vote."""
    return polls.vote(poll_id, principal.email, body.option_index)


@router.patch("/polls/{poll_id}/status", response_model=PollOut)
def set_poll_status(poll_id: str, body: PollStatusUpdate,
                    principal: Principal = Depends(require("polls:manage")),
                    polls: PollService = Depends(get_poll_service)):
    return polls.set_active(poll_id, body.active, principal.email)
