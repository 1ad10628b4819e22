# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: flat JSON files, one ``<name>.json`` array per collection.
"""

import os
from pathlib import Path
from typing import Optional

from chama.core.errors import StoreUnavailable
from chama.core.logging import get_logger
from chama.repositories.base import DocumentStore

logger = get_logger(__name__)


class FileStore(DocumentStore):
    backend = "file"

    def __init__(self, data_dir: str) -> None:
        super().__init__()
        self._dir = Path(data_dir)

    def open(self) -> None:
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreUnavailable(f"Cannot create data directory {self._dir}: {exc}")
        logger.info("File store ready at %s", self._dir.resolve())

    def ping(self) -> None:
        if not self._dir.is_dir() or not os.access(self._dir, os.W_OK):
            raise StoreUnavailable(f"Data directory {self._dir} is not writable")

    def _path(self, name: str) -> Path:
        return self._dir / f"{name}.json"

    def _names(self):
        if not self._dir.is_dir():
            return []
        return [p.stem for p in self._dir.glob("*.json")]

    def _read_raw(self, name: str) -> Optional[str]:
        try:
            return self._path(name).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.error("Read %s failed: %s", name, exc)
            raise StoreUnavailable(f"Cannot read collection '{name}'")

    def _write_raw(self, name: str, payload: str) -> None:
        path = self._path(name)
        tmp = path.with_name(f".{path.name}.tmp")
        try:
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as exc:
            logger.error("Write %s failed: %s", name, exc)
            raise StoreUnavailable(f"Cannot write collection '{name}'")
