# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Collection store contract.

A store holds named, ordered collections of JSON records and only ever
replaces a collection as a whole. Every collection carries an opaque
revision; ``save`` with an ``expected_revision`` that no longer matches
raises ``StaleWrite`` instead of overwriting a concurrent update.
"""

import hashlib
import json
import re
import threading
from typing import Any, Dict, List, Optional, Tuple

from chama.core.errors import ChamaError, CorruptCollection, InvalidInput, StaleWrite
from chama.core.logging import get_logger
from chama.metrics import STORE_OPERATIONS

logger = get_logger(__name__)

Record = Dict[str, Any]

EMPTY_REVISION = "0"

# Re-reads allowed when a concurrent writer beats an append
APPEND_ATTEMPTS = 5

_NAME_RE = re.compile(r"[a-z][a-z0-9_-]{0,63}")


def check_name(name: str) -> str:
    if not isinstance(name, str) or not _NAME_RE.fullmatch(name):
        raise InvalidInput(f"Invalid collection name '{name}'")
    return name


def dump_collection(records: List[Record]) -> str:
    return json.dumps(records, indent=2, ensure_ascii=False)


def decode_collection(name: str, raw: Optional[str]) -> List[Record]:
    """Parse a stored document. Raises CorruptCollection on malformed JSON."""
    if raw is None or not raw.strip():
        return []
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise CorruptCollection(f"Collection '{name}' is not valid JSON: {exc}")
    if not isinstance(data, list):
        raise CorruptCollection(f"Collection '{name}' is not a JSON array")
    return [r for r in data if isinstance(r, dict)]


def parse_collection(name: str, raw: Optional[str]) -> List[Record]:
    """Like decode_collection, but a corrupt document reads as empty."""
    try:
        return decode_collection(name, raw)
    except CorruptCollection as exc:
        logger.warning("%s, serving it as empty", exc.message)
        return []


def digest(raw: Optional[str]) -> str:
    if raw is None:
        return EMPTY_REVISION
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def row_revision(bodies: List[str]) -> str:
    """Revision of a collection stored one JSON body per row."""
    return digest("\n".join(bodies)) if bodies else EMPTY_REVISION


def parse_rows(name: str, bodies: List[str]) -> List[Record]:
    """Decode row bodies, skipping the ones that are not JSON objects."""
    records: List[Record] = []
    for position, body in enumerate(bodies):
        try:
            record = json.loads(body)
        except ValueError:
            logger.warning("Skipping malformed row %d in collection %s", position, name)
            continue
        if isinstance(record, dict):
            records.append(record)
    return records


class CollectionStore:
    """Base class: public methods validate names and count outcomes."""

    backend: str = "base"

    # ── Lifecycle ──

    def open(self) -> None:
        """Acquire backend resources. Called once at startup."""

    def close(self) -> None:
        """Release backend resources. Called once at shutdown."""

    def ping(self) -> None:
        """Raise StoreUnavailable when the backend cannot be reached."""

    # ── Read ──

    def names(self) -> List[str]:
        """Names of the collections that currently exist, sorted."""
        return sorted(n for n in self._names() if _NAME_RE.fullmatch(n))

    def load(self, name: str) -> List[Record]:
        return self.snapshot(name)[0]

    def snapshot(self, name: str) -> Tuple[List[Record], str]:
        """Return (records, revision) for a collection; missing reads as empty."""
        check_name(name)
        try:
            result = self._snapshot(name)
        except ChamaError:
            STORE_OPERATIONS.labels(backend=self.backend, operation="load", outcome="error").inc()
            raise
        STORE_OPERATIONS.labels(backend=self.backend, operation="load", outcome="ok").inc()
        return result

    # ── Write ──

    def save(self, name: str, records: List[Record],
             expected_revision: Optional[str] = None) -> str:
        """Replace a collection and return its new revision."""
        check_name(name)
        try:
            revision = self._save(name, list(records), expected_revision)
        except ChamaError:
            STORE_OPERATIONS.labels(backend=self.backend, operation="save", outcome="error").inc()
            raise
        STORE_OPERATIONS.labels(backend=self.backend, operation="save", outcome="ok").inc()
        return revision

    def append(self, name: str, record: Record) -> Record:
        self.extend(name, [record])
        return record

    def extend(self, name: str, new_records: List[Record], front: bool = False) -> None:
        """
        Add fresh records to a collection. Adding records commutes with any
        other write, so a stale revision is re-read and the add retried
        instead of failing the caller.
        """
        for attempt in range(1, APPEND_ATTEMPTS + 1):
            records, revision = self.snapshot(name)
            records = list(new_records) + records if front else records + list(new_records)
            try:
                self.save(name, records, expected_revision=revision)
                return
            except StaleWrite:
                if attempt == APPEND_ATTEMPTS:
                    raise
                logger.info("Collection %s changed during append, retrying (%d)", name, attempt)

    # ── Backend hooks ──

    def _names(self) -> List[str]:
        raise NotImplementedError

    def _snapshot(self, name: str) -> Tuple[List[Record], str]:
        raise NotImplementedError

    def _save(self, name: str, records: List[Record],
              expected_revision: Optional[str]) -> str:
        raise NotImplementedError


class DocumentStore(CollectionStore):
    """
    A store that keeps each collection as one JSON document.
    The revision is the SHA-256 of the stored document text.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def _read_raw(self, name: str) -> Optional[str]:
        raise NotImplementedError

    def _write_raw(self, name: str, payload: str) -> None:
        raise NotImplementedError

    def _snapshot(self, name: str) -> Tuple[List[Record], str]:
        raw = self._read_raw(name)
        return parse_collection(name, raw), digest(raw)

    def _save(self, name: str, records: List[Record],
              expected_revision: Optional[str]) -> str:
        payload = dump_collection(records)
        with self._lock:
            if expected_revision is not None:
                current = digest(self._read_raw(name))
                if current != expected_revision:
                    logger.warning("Stale write rejected for collection %s", name)
                    raise StaleWrite()
            self._write_raw(name, payload)
        return digest(payload)
