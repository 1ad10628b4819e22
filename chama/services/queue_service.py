# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: chair queue — documents awaiting chairperson sign-off.

    Pending ─► Approved (terminal)

Approval publishes Minutes to the news feed and Reports to the approved
reports, keeps the queue entry for audit, and notifies every member.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from chama.core.errors import InvalidInput, InvalidTransition, NotFound
from chama.core.logging import get_logger
from chama.core.policy import POLICY
from chama.metrics import QUEUE_APPROVALS
from chama.repositories.base import CollectionStore
from chama.repositories.names import CHAIR_QUEUE
from chama.schemas import QUEUE_APPROVED, QUEUE_PENDING, QUEUE_TYPES, Principal
from chama.services.audit_service import AuditLog
from chama.services.notification_service import NotificationService
from chama.services.publication_service import PublicationService

logger = get_logger(__name__)


class ChairQueue:
    def __init__(self, store: CollectionStore, publications: PublicationService,
                 notifications: NotificationService, audit: AuditLog) -> None:
        self._store = store
        self._publications = publications
        self._notifications = notifications
        self._audit = audit

    # ── Commands ──

    def submit(self, actor: Principal, type_: str, data: Dict[str, Any],
               author: Optional[str] = None) -> Dict[str, Any]:
        """Queue an item; only the role responsible for ``type_`` may submit it."""
        if type_ not in QUEUE_TYPES:
            raise InvalidInput(f"type must be one of {QUEUE_TYPES}")
        POLICY.check(actor, f"queue:submit:{type_}")
        if type_ == "Minutes" and not str(data.get("text") or "").strip():
            raise InvalidInput("Minutes need a text")
        if type_ == "Report" and not (data.get("text") or data.get("file")):
            raise InvalidInput("A report needs text or a file reference")
        return self.enqueue(type_, data, author or actor.name)

    def enqueue(self, type_: str, data: Dict[str, Any], author: str) -> Dict[str, Any]:
        item = {
            "id": str(uuid.uuid4()),
            "type": type_,
            "data": data,
            "author": author,
            "status": QUEUE_PENDING,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "approved_by": None,
            "approved_at": None,
            "signature": None,
        }
        self._store.append(CHAIR_QUEUE, item)
        logger.info("Queued %s item id=%s author=%s", type_, item["id"], author)
        return item

    def approve(self, item_id: str, actor: Principal,
                signature: Optional[str] = None) -> Dict[str, Any]:
        POLICY.check(actor, "queue:approve")
        items, revision = self._store.snapshot(CHAIR_QUEUE)
        item = self._require(items, item_id)
        if item.get("status") != QUEUE_PENDING:
            raise InvalidTransition(f"Queue item is already {item.get('status')}")

        now = datetime.now(timezone.utc).isoformat()
        item.update(status=QUEUE_APPROVED, approved_by=actor.name, approved_at=now)
        if signature:
            item["signature"] = signature
        # Persist the flip first so a concurrent second approval fails on revision
        self._store.save(CHAIR_QUEUE, items, expected_revision=revision)

        data = item.get("data") or {}
        if item["type"] == "Minutes":
            self._publications.publish_news(data.get("text", ""), signed_by=actor.name, approved_at=now)
        elif item["type"] == "Report":
            self._publications.publish_report(
                data.get("text"), data.get("file"), signed_by=actor.name, approved_at=now,
            )

        QUEUE_APPROVALS.labels(type=item["type"]).inc()
        self._notifications.broadcast(f"{item['type']} from {item['author']} approved by {actor.name}")
        self._audit.record("queue_approved", actor.email, {"id": item_id, "type": item["type"]})
        logger.info("Queue item approved id=%s type=%s by=%s", item_id, item["type"], actor.email)
        return item

    def discard(self, item_id: str, actor: Principal) -> Dict[str, Any]:
        """Drop a pending item; approved items stay for the record."""
        POLICY.check(actor, "queue:discard")
        items, revision = self._store.snapshot(CHAIR_QUEUE)
        item = self._require(items, item_id)
        if item.get("status") != QUEUE_PENDING:
            raise InvalidTransition("Approved queue items cannot be discarded")
        items.remove(item)
        self._store.save(CHAIR_QUEUE, items, expected_revision=revision)
        self._audit.record("queue_discarded", actor.email, {"id": item_id, "type": item["type"]})
        return item

    # ── Queries ──

    def list(self, status: Optional[str] = None, type_: Optional[str] = None) -> List[Dict[str, Any]]:
        items = self._store.load(CHAIR_QUEUE)
        if status:
            items = [i for i in items if i.get("status") == status]
        if type_:
            items = [i for i in items if i.get("type") == type_]
        return items

    @staticmethod
    def _require(items: List[Dict[str, Any]], item_id: str) -> Dict[str, Any]:
        item = next((i for i in items if i.get("id") == item_id), None)
        if item is None:
            raise NotFound("Queue item not found")
        return item
