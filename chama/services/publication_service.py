# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""News feed, approved reports and officer signatures."""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from chama.core.errors import InvalidInput, InvalidRole
from chama.core.policy import POLICY, ROLES
from chama.repositories.base import CollectionStore
from chama.repositories.names import APPROVED_REPORTS, NEWS, SIGNATURES


class PublicationService:
    def __init__(self, store: CollectionStore):
        self._store = store

    # ── News ──

    def list_news(self) -> List[Dict[str, Any]]:
        return self._store.load(NEWS)

    def publish_news(self, text: str, signed_by: str,
                     approved_at: Optional[str] = None) -> Dict[str, Any]:
        if not text or not text.strip():
            raise InvalidInput("News text cannot be empty")
        entry = {
            "id": str(uuid.uuid4()),
            "text": text.strip(),
            "signed_by": signed_by,
            "approved_at": approved_at,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        # Newest first, as the feed is read top-down
        self._store.extend(NEWS, [entry], front=True)
        return entry

    # ── Approved reports ──

    def list_reports(self) -> List[Dict[str, Any]]:
        return self._store.load(APPROVED_REPORTS)

    def publish_report(self, text: Optional[str], file: Optional[str], signed_by: str,
                       approved_at: Optional[str] = None) -> Dict[str, Any]:
        if not (text or file):
            raise InvalidInput("A report needs text or a file reference")
        entry = {
            "id": str(uuid.uuid4()),
            "text": text,
            "file": file,
            "signed_by": signed_by,
            "approved_at": approved_at or datetime.now(timezone.utc).isoformat(),
        }
        return self._store.append(APPROVED_REPORTS, entry)

    # ── Signatures ──

    def signatures(self) -> Dict[str, str]:
        return {row["role"]: row.get("signature") for row in self._store.load(SIGNATURES) if "role" in row}

    def set_signature(self, principal, role: str, signature: str) -> Dict[str, str]:
        """Upsert: at most one signature per role."""
        if role not in ROLES:
            raise InvalidRole(f"role must be one of {list(ROLES)}")
        if principal.role != role:
            POLICY.check(principal, "signatures:any")

        rows, revision = self._store.snapshot(SIGNATURES)
        now = datetime.now(timezone.utc).isoformat()
        existing = next((r for r in rows if r.get("role") == role), None)
        if existing is not None:
            existing.update(signature=signature, updated_by=principal.email, updated_at=now)
        else:
            rows.append({"role": role, "signature": signature,
                         "updated_by": principal.email, "updated_at": now})
        self._store.save(SIGNATURES, rows, expected_revision=revision)
        return {"role": role, "signature": signature}
