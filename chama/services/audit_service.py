# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Append-only audit trail kept in the ``logs`` collection."""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from chama.repositories.base import CollectionStore
from chama.repositories.names import LOGS


class AuditLog:
    def __init__(self, store: CollectionStore):
        self._store = store

    def record(self, action: str, by: str, details: Optional[Any] = None) -> Dict[str, Any]:
        entry = {
            "id": str(uuid.uuid4()),
            "action": action,
            "by": by,
            "details": details,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        return self._store.append(LOGS, entry)

    def list(self, action: Optional[str] = None) -> List[Dict[str, Any]]:
        entries = self._store.load(LOGS)
        if action:
            entries = [e for e in entries if e.get("action") == action]
        return entries
