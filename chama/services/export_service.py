# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""CSV export of whole collections for the supervisory committee."""
import csv
import io
import json
from typing import Dict, List, Tuple

from chama.core.errors import NotFound
from chama.repositories.base import CollectionStore
from chama.repositories import names

# export type -> (collection, columns); members never expose their PIN digest
EXPORTS: Dict[str, Tuple[str, List[str]]] = {
    "members": (names.MEMBERS, ["id", "name", "email", "role", "created_at"]),
    "loans": (names.LOANS, ["id", "member", "amount", "purpose", "status", "date", "notes", "updated_at"]),
    "welfare": (names.WELFARE, ["id", "member", "type", "amount", "status", "date"]),
    "transactions": (names.TRANSACTIONS, ["id", "member", "title", "type", "amount", "date", "recorded_by"]),
    "polls": (names.POLLS, ["id", "question", "options", "votes", "active", "created_at"]),
    "logs": (names.LOGS, ["id", "timestamp", "action", "by", "details"]),
}


def _cell(value):
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return value


class ExportService:
    def __init__(self, store: CollectionStore):
        self._store = store

    def to_csv(self, export_type: str) -> str:
        try:
            collection, columns = EXPORTS[export_type]
        except KeyError:
            raise NotFound(f"Unknown export type '{export_type}'. Available: {sorted(EXPORTS)}")

        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(columns)
        for row in self._store.load(collection):
            writer.writerow([_cell(row.get(col)) for col in columns])
        return buf.getvalue()
