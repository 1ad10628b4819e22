# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: member registration, directory and administration.
Thin HTTP layer — delegates ALL logic to IdentityService.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends

from chama.core.dependencies import current_principal, get_identity_service, require
from chama.core.policy import POLICY
from chama.schemas import MemberCreate, MemberOut, MemberUpdate, Principal, PromoteRequest
from chama.services.identity_service import IdentityService

router = APIRouter(tags=["Members"])


@router.post("/members", status_code=201, response_model=MemberOut)
def register_member(body: MemberCreate,
                    identity: IdentityService = Depends(get_identity_service)):
    """Public self-registration; new members get the ``member`` role."""
    return identity.register(body.name, body.email, body.pin)


@router.get("/members", response_model=List[MemberOut])
def list_members(role: Optional[str] = None,
                 _: Principal = Depends(require("members:list")),
                 identity: IdentityService = Depends(get_identity_service)):
    return identity.list_members(role)


@router.get("/members/{email}", response_model=MemberOut)
def get_member(email: str,
               principal: Principal = Depends(current_principal),
               identity: IdentityService = Depends(get_identity_service)):
    POLICY.check_self(principal, "members:list", email)
    return identity.get_member(email)


@router.put("/members/{email}", response_model=MemberOut)
def update_member(email: str, body: MemberUpdate,
                  principal: Principal = Depends(current_principal),
                  identity: IdentityService = Depends(get_identity_service)):
    """Members edit themselves; the chairperson may edit anyone."""
    return identity.update_member(principal, email, name=body.name, new_pin=body.new_pin)


@router.post("/members/{email}/promote", response_model=MemberOut)
def promote_member(email: str, body: PromoteRequest,
                   principal: Principal = Depends(current_principal),
                   identity: IdentityService = Depends(get_identity_service)):
    return identity.promote(principal.role, email, body.role)


@router.post("/members/{email}/reset-pin", response_model=MemberOut)
def reset_member_pin(email: str,
                     _: Principal = Depends(require("members:reset_pin")),
                     identity: IdentityService = Depends(get_identity_service)):
    return identity.reset_pin(email)


@router.delete("/members/{email}", response_model=MemberOut)
def remove_member(email: str,
                  _: Principal = Depends(require("members:remove")),
                  identity: IdentityService = Depends(get_identity_service)):
    return identity.remove(email)
