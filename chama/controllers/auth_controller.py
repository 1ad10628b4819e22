# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: PIN login."""
from fastapi import APIRouter, Depends

from chama.core.dependencies import get_identity_service
from chama.schemas import AuthResponse, LoginRequest
from chama.services.identity_service import IdentityService

router = APIRouter(tags=["Auth"])


@router.post("/auth", response_model=AuthResponse)
def login(body: LoginRequest, identity: IdentityService = Depends(get_identity_service)):
    """Exchange email + PIN for a one-hour bearer token."""
    return identity.authenticate(body.email, body.pin)
