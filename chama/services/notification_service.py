# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Business logic for member notifications."""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from chama.core.errors import NotFound
from chama.core.logging import get_logger
from chama.core.policy import POLICY
from chama.repositories.base import CollectionStore
from chama.repositories.names import MEMBERS, NOTIFICATIONS

logger = get_logger(__name__)


def _entry(member: str, message: str, created_at: str) -> Dict[str, Any]:
    return {
        "id": str(uuid.uuid4()),
        "message": message,
        "member": member.lower(),
        "read": False,
        "created_at": created_at,
    }


class NotificationService:
    def __init__(self, store: CollectionStore):
        self._store = store

    def notify(self, member: str, message: str) -> Dict[str, Any]:
        entry = _entry(member, message, datetime.now(timezone.utc).isoformat())
        self._store.append(NOTIFICATIONS, entry)
        logger.info("Notification queued for %s", entry["member"])
        return entry

    def broadcast(self, message: str) -> int:
        """One notification per member currently registered; returns how many."""
        members = self._store.load(MEMBERS)
        now = datetime.now(timezone.utc).isoformat()
        fresh = [_entry(m["email"], message, now) for m in members if m.get("email")]
        self._store.extend(NOTIFICATIONS, fresh)
        logger.info("Broadcast notification to %d members", len(fresh))
        return len(fresh)

    def list(self, member: Optional[str] = None, unread_only: bool = False) -> List[Dict[str, Any]]:
        entries = self._store.load(NOTIFICATIONS)
        if member:
            entries = [n for n in entries if n.get("member") == member.lower()]
        if unread_only:
            entries = [n for n in entries if not n.get("read")]
        return entries

    def mark_read(self, notification_id: str, principal) -> Dict[str, Any]:
        entries, revision = self._store.snapshot(NOTIFICATIONS)
        entry = next((n for n in entries if n.get("id") == notification_id), None)
        if entry is None:
            raise NotFound("Notification not found")
        POLICY.check_self(principal, "notifications:manage", entry.get("member", ""))
        if not entry.get("read"):
            entry["read"] = True
            self._store.save(NOTIFICATIONS, entries, expected_revision=revision)
        return entry
