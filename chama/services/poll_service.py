# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Polls and one-vote-per-member voting."""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from chama.core.errors import AlreadyVoted, InvalidInput, InvalidOption, NotFound, PollInactive
from chama.core.logging import get_logger
from chama.metrics import VOTES_CAST
from chama.repositories.base import CollectionStore
from chama.repositories.names import POLLS
from chama.services.audit_service import AuditLog

logger = get_logger(__name__)


class PollService:
    def __init__(self, store: CollectionStore, audit: AuditLog):
        self._store = store
        self._audit = audit

    def create(self, question: str, options: List[str], created_by: str) -> Dict[str, Any]:
        if not question or not question.strip():
            raise InvalidInput("question is required")
        if len(options) < 2:
            raise InvalidInput("a poll needs at least two options")
        poll = {
            "id": str(uuid.uuid4()),
            "question": question.strip(),
            "options": list(options),
            "votes": [0] * len(options),
            "voters": [],
            "active": True,
            "created_by": created_by,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        polls, revision = self._store.snapshot(POLLS)
        polls.insert(0, poll)
        self._store.save(POLLS, polls, expected_revision=revision)
        self._audit.record("poll_created", created_by, {"id": poll["id"], "question": poll["question"]})
        return poll

    def vote(self, poll_id: str, voter_id: str, option_index: int) -> Dict[str, Any]:
        """Count one vote. A repeat voter leaves the poll untouched."""
        polls, revision = self._store.snapshot(POLLS)
        poll = self._require(polls, poll_id)
        voter_id = voter_id.lower()

        if voter_id in poll.get("voters", []):
            raise AlreadyVoted()
        if not 0 <= option_index < len(poll.get("options", [])):
            raise InvalidOption(f"option_index must be between 0 and {len(poll['options']) - 1}")
        if not poll.get("active", False):
            raise PollInactive()

        poll["votes"][option_index] += 1
        poll["voters"].append(voter_id)
        self._store.save(POLLS, polls, expected_revision=revision)
        VOTES_CAST.inc()
        logger.info("Vote recorded poll=%s option=%d", poll_id, option_index)
        return poll

    def set_active(self, poll_id: str, active: bool, actor: str) -> Dict[str, Any]:
        polls, revision = self._store.snapshot(POLLS)
        poll = self._require(polls, poll_id)
        if poll.get("active") != active:
            poll["active"] = active
            self._store.save(POLLS, polls, expected_revision=revision)
            self._audit.record("poll_opened" if active else "poll_closed", actor, {"id": poll_id})
        return poll

    def list(self) -> List[Dict[str, Any]]:
        return self._store.load(POLLS)

    def get(self, poll_id: str) -> Dict[str, Any]:
        return self._require(self._store.load(POLLS), poll_id)

    @staticmethod
    def _require(polls: List[Dict[str, Any]], poll_id: str) -> Dict[str, Any]:
        poll = next((p for p in polls if p.get("id") == poll_id), None)
        if poll is None:
            raise NotFound("Poll not found")
        return poll
