# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: in-memory collection store.
Keeps serialized documents so callers never share mutable records with it.
"""

from typing import Dict, Optional

from chama.repositories.base import DocumentStore


class MemoryStore(DocumentStore):
    backend = "memory"

    def __init__(self) -> None:
        super().__init__()
        self._documents: Dict[str, str] = {}

    def _read_raw(self, name: str) -> Optional[str]:
        return self._documents.get(name)

    def _write_raw(self, name: str, payload: str) -> None:
        self._documents[name] = payload

    def _names(self):
        return list(self._documents)

    def clear(self) -> None:
        self._documents.clear()

    @property
    def documents(self) -> Dict[str, str]:
        """Direct access for tests and seeding."""
        return self._documents
