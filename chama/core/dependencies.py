# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection — wire the store into services and expose them
to request handlers.

The store and services are built once per application by the lifespan hook
and kept on ``app.state``; handlers reach them only through these helpers.
"""

from typing import Optional

from fastapi import Depends, Header, Request

from chama.core.errors import MissingToken
from chama.core.policy import POLICY
from chama.repositories.base import CollectionStore
from chama.schemas import Principal
from chama.services.audit_service import AuditLog
from chama.services.export_service import ExportService
from chama.services.identity_service import IdentityService
from chama.services.ledger_service import LedgerService
from chama.services.loan_service import LoanWorkflow
from chama.services.notification_service import NotificationService
from chama.services.poll_service import PollService
from chama.services.publication_service import PublicationService
from chama.services.queue_service import ChairQueue


class Services:
    """Every service of one application instance, sharing one store."""

    def __init__(self, store: CollectionStore, settings) -> None:
        self.store = store
        self.audit = AuditLog(store)
        self.notifications = NotificationService(store)
        self.publications = PublicationService(store)
        self.identity = IdentityService(
            store,
            secret=settings.JWT_SECRET,
            token_ttl_seconds=settings.TOKEN_TTL_SECONDS,
            reset_pin=settings.RESET_PIN,
            algorithm=settings.JWT_ALGORITHM,
        )
        self.queue = ChairQueue(store, self.publications, self.notifications, self.audit)
        self.loans = LoanWorkflow(store, self.queue, self.notifications, self.audit)
        self.polls = PollService(store, self.audit)
        self.ledger = LedgerService(store)
        self.exports = ExportService(store)


# ── Service accessors ──

def get_services(request: Request) -> Services:
    return request.app.state.services


def get_store(request: Request) -> CollectionStore:
    return request.app.state.store


def get_settings(request: Request):
    return request.app.state.settings


def get_identity_service(request: Request) -> IdentityService:
    return get_services(request).identity


def get_loan_workflow(request: Request) -> LoanWorkflow:
    return get_services(request).loans


def get_chair_queue(request: Request) -> ChairQueue:
    return get_services(request).queue


def get_poll_service(request: Request) -> PollService:
    return get_services(request).polls


def get_publication_service(request: Request) -> PublicationService:
    return get_services(request).publications


def get_ledger_service(request: Request) -> LedgerService:
    return get_services(request).ledger


def get_notification_service(request: Request) -> NotificationService:
    return get_services(request).notifications


def get_audit_log(request: Request) -> AuditLog:
    return get_services(request).audit


def get_export_service(request: Request) -> ExportService:
    return get_services(request).exports


# ── Authentication / authorization ──

def bearer_token(authorization: Optional[str] = Header(default=None)) -> str:
    if not authorization:
        raise MissingToken()
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise MissingToken("Provide an 'Authorization: Bearer <token>' header")
    return token.strip()


def current_principal(
    token: str = Depends(bearer_token),
    identity: IdentityService = Depends(get_identity_service),
) -> Principal:
    return identity.authorize(token)


def require(action: str):
    """Dependency factory: the caller must hold a role granted ``action``."""
    roles = POLICY.roles_for(action)

    def _gate(
        token: str = Depends(bearer_token),
        identity: IdentityService = Depends(get_identity_service),
    ) -> Principal:
        return identity.authorize(token, roles)

    _gate.__name__ = f"require_{action.replace(':', '_')}"
    return _gate
