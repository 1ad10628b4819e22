# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: loan approval workflow.

    Pending ─► TreasurerApproved ─► SecretaryApproved ─► ChairApproved
       └───────────────┴──────────────────┴──► Rejected

Each forward step belongs to exactly one role. Rejection is open to the
role due to act next and to the chairperson. ChairApproved and Rejected are
terminal.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from chama.core.errors import InsufficientRole, InvalidInput, InvalidTransition, NotFound
from chama.core.logging import get_logger
from chama.core.policy import CHAIRPERSON, SECRETARY, TREASURER
from chama.metrics import LOAN_TRANSITIONS
from chama.repositories.base import CollectionStore
from chama.repositories.names import LOANS
from chama.schemas import (
    LOAN_CHAIR_APPROVED, LOAN_PENDING, LOAN_REJECTED, LOAN_SECRETARY_APPROVED,
    LOAN_TREASURER_APPROVED, Principal,
)
from chama.services.audit_service import AuditLog
from chama.services.notification_service import NotificationService
from chama.services.queue_service import ChairQueue

logger = get_logger(__name__)

ALLOWED_TRANSITIONS: Dict[str, set] = {
    LOAN_PENDING:            {LOAN_TREASURER_APPROVED, LOAN_REJECTED},
    LOAN_TREASURER_APPROVED: {LOAN_SECRETARY_APPROVED, LOAN_REJECTED},
    LOAN_SECRETARY_APPROVED: {LOAN_CHAIR_APPROVED, LOAN_REJECTED},
    LOAN_CHAIR_APPROVED:     set(),
    LOAN_REJECTED:           set(),
}

# Role whose sign-off moves the loan out of each non-terminal state
NEXT_APPROVER: Dict[str, str] = {
    LOAN_PENDING: TREASURER,
    LOAN_TREASURER_APPROVED: SECRETARY,
    LOAN_SECRETARY_APPROVED: CHAIRPERSON,
}

TERMINAL_STATES = frozenset({LOAN_CHAIR_APPROVED, LOAN_REJECTED})


class LoanWorkflow:
    def __init__(self, store: CollectionStore, queue: ChairQueue,
                 notifications: NotificationService, audit: AuditLog) -> None:
        self._store = store
        self._queue = queue
        self._notifications = notifications
        self._audit = audit

    # ── Commands ──

    def submit(self, amount: float, purpose: str, member: str) -> Dict[str, Any]:
        if amount is None or amount <= 0:
            raise InvalidInput("amount must be greater than zero")
        if not purpose or not purpose.strip():
            raise InvalidInput("purpose is required")
        loan = {
            "id": str(uuid.uuid4()),
            "amount": amount,
            "purpose": purpose.strip(),
            "member": member.strip().lower(),
            "status": LOAN_PENDING,
            "date": date.today().isoformat(),
            "notes": None,
            "history": [],
            "updated_at": None,
        }
        self._store.append(LOANS, loan)
        LOAN_TRANSITIONS.labels(status=LOAN_PENDING).inc()
        logger.info("Loan submitted id=%s member=%s amount=%s", loan["id"], loan["member"], amount)
        return loan

    def transition(self, loan_id: str, actor: Principal, status: str,
                   notes: Optional[str] = None) -> Dict[str, Any]:
        """Move a loan to ``status``. Raises NotFound / InvalidTransition / InsufficientRole."""
        loans, revision = self._store.snapshot(LOANS)
        loan = self._require(loans, loan_id)
        current = loan["status"]

        allowed = ALLOWED_TRANSITIONS.get(current, set())
        if status not in allowed:
            raise InvalidTransition(
                f"Cannot transition from '{current}' to '{status}'. "
                f"Allowed: {sorted(allowed) if allowed else 'none (terminal state)'}"
            )

        approver = NEXT_APPROVER[current]
        permitted = {approver, CHAIRPERSON} if status == LOAN_REJECTED else {approver}
        if actor.role not in permitted:
            raise InsufficientRole(f"Loan is waiting for the {approver}")

        now = datetime.now(timezone.utc).isoformat()
        loan["status"] = status
        loan["updated_at"] = now
        if notes is not None:
            loan["notes"] = notes
        loan.setdefault("history", []).append(
            {"from": current, "to": status, "by": actor.email, "at": now, "notes": notes}
        )
        self._store.save(LOANS, loans, expected_revision=revision)
        LOAN_TRANSITIONS.labels(status=status).inc()
        logger.info("Loan %s %s -> %s by %s", loan_id, current, status, actor.email)

        self._fan_out(loan, actor, status)
        self._audit.record("loan_status", actor.email, {"id": loan_id, "from": current, "to": status})
        return loan

    # ── Queries ──

    def get(self, loan_id: str) -> Dict[str, Any]:
        return self._require(self._store.load(LOANS), loan_id)

    def list(self, member: Optional[str] = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
        loans = self._store.load(LOANS)
        if member:
            loans = [l for l in loans if l.get("member") == member.lower()]
        if status:
            loans = [l for l in loans if l.get("status") == status]
        return loans

    # ── Private ──

    def _fan_out(self, loan: Dict[str, Any], actor: Principal, status: str) -> None:
        if status == LOAN_TREASURER_APPROVED:
            self._queue.enqueue(
                "Loan",
                {"loan_id": loan["id"], "amount": loan["amount"],
                 "purpose": loan["purpose"], "member": loan["member"]},
                author=actor.name,
            )
        if status in TERMINAL_STATES:
            outcome = "approved" if status == LOAN_CHAIR_APPROVED else "rejected"
            message = f"Your loan request of {loan['amount']} for {loan['purpose']} was {outcome}"
            if loan.get("notes"):
                message += f": {loan['notes']}"
            self._notifications.notify(loan["member"], message)

    @staticmethod
    def _require(loans: List[Dict[str, Any]], loan_id: str) -> Dict[str, Any]:
        loan = next((l for l in loans if l.get("id") == loan_id), None)
        if loan is None:
            raise NotFound("Loan not found")
        return loan
