# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Member transactions and welfare claims — append-only, scoped by member."""
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from chama.core.logging import get_logger
from chama.repositories.base import CollectionStore
from chama.repositories.names import TRANSACTIONS, WELFARE

logger = get_logger(__name__)

WELFARE_PENDING = "Pending"


def _for_member(rows: List[Dict[str, Any]], member: Optional[str]) -> List[Dict[str, Any]]:
    if not member:
        return rows
    member = member.lower()
    return [r for r in rows if r.get("member") == member]


class LedgerService:
    def __init__(self, store: CollectionStore):
        self._store = store

    def list_transactions(self, member: Optional[str] = None) -> List[Dict[str, Any]]:
        return _for_member(self._store.load(TRANSACTIONS), member)

    def record_transaction(self, title: str, amount: float, type_: str, member: str,
                           recorded_by: str, on: Optional[str] = None) -> Dict[str, Any]:
        entry = {
            "id": str(uuid.uuid4()),
            "title": title,
            "amount": amount,
            "type": type_,
            "member": member.lower(),
            "date": on or date.today().isoformat(),
            "recorded_by": recorded_by,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        self._store.append(TRANSACTIONS, entry)
        logger.info("Transaction recorded member=%s amount=%s type=%s", entry["member"], amount, type_)
        return entry

    def list_welfare(self, member: Optional[str] = None) -> List[Dict[str, Any]]:
        return _for_member(self._store.load(WELFARE), member)

    def submit_welfare(self, type_: str, amount: float, member: str) -> Dict[str, Any]:
        entry = {
            "id": str(uuid.uuid4()),
            "type": type_,
            "amount": amount,
            "member": member.lower(),
            "status": WELFARE_PENDING,
            "date": date.today().isoformat(),
        }
        self._store.append(WELFARE, entry)
        logger.info("Welfare claim submitted member=%s type=%s", entry["member"], type_)
        return entry
