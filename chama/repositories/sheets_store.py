# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: a Google Sheets spreadsheet as datastore.

One worksheet per collection. Column A holds a ``record`` header and then
one JSON record per row; a save clears the worksheet and writes it back
whole. The revision is the digest of the row bodies, checked under a
process lock before the sheet is replaced.
"""

import json
import threading
from typing import List, Optional, Tuple

import gspread
from google.oauth2.service_account import Credentials

from chama.core.errors import StaleWrite, StoreUnavailable
from chama.core.logging import get_logger
from chama.repositories.base import CollectionStore, Record, parse_rows, row_revision

logger = get_logger(__name__)

SCOPES = [
    "https://spreadsheets.google.com/feeds",
    "https://www.googleapis.com/auth/drive",
]
HEADER = "record"


class SheetsStore(CollectionStore):
    backend = "sheets"

    def __init__(self, spreadsheet_id: str, credentials_path: str = "", client=None):
        self._spreadsheet_id = spreadsheet_id
        self._credentials_path = credentials_path
        self._client = client
        self._spreadsheet = None
        self._lock = threading.Lock()

    # ── Lifecycle ──

    def open(self) -> None:
        if not self._spreadsheet_id:
            raise StoreUnavailable("GOOGLE_SHEETS_ID is not configured")
        try:
            if self._client is None:
                credentials = Credentials.from_service_account_file(
                    self._credentials_path, scopes=SCOPES,
                )
                self._client = gspread.authorize(credentials)
            self._spreadsheet = self._client.open_by_key(self._spreadsheet_id)
        except (OSError, ValueError) as exc:
            raise StoreUnavailable(f"Cannot load Google credentials: {exc}")
        except gspread.exceptions.GSpreadException as exc:
            raise StoreUnavailable(f"Spreadsheet unavailable: {exc}")
        logger.info("Sheets store ready spreadsheet=%s", self._spreadsheet_id)

    def close(self) -> None:
        self._spreadsheet = None

    def ping(self) -> None:
        self._titles()

    # ── Hooks ──

    def _names(self) -> List[str]:
        return self._titles()

    def _snapshot(self, name: str) -> Tuple[List[Record], str]:
        bodies = self._bodies(self._worksheet(name))
        return parse_rows(name, bodies), row_revision(bodies)

    def _save(self, name: str, records: List[Record],
              expected_revision: Optional[str]) -> str:
        bodies = [json.dumps(r, ensure_ascii=False) for r in records]
        values = [[HEADER]] + [[b] for b in bodies]
        with self._lock:
            worksheet = self._worksheet(name)
            if expected_revision is not None:
                if row_revision(self._bodies(worksheet)) != expected_revision:
                    logger.warning("Stale write rejected for collection %s", name)
                    raise StaleWrite()
            try:
                if worksheet is None:
                    worksheet = self._sheet().add_worksheet(title=name, rows=len(values), cols=1)
                worksheet.clear()
                worksheet.resize(rows=len(values), cols=1)
                worksheet.update(values=values, range_name="A1", value_input_option="RAW")
            except gspread.exceptions.GSpreadException as exc:
                logger.error("Save %s failed: %s", name, exc)
                raise StoreUnavailable(f"Cannot write collection '{name}'")
        return row_revision(bodies)

    # ── Private ──

    def _sheet(self):
        if self._spreadsheet is None:
            raise StoreUnavailable("Sheets store is not open")
        return self._spreadsheet

    def _titles(self) -> List[str]:
        try:
            return [ws.title for ws in self._sheet().worksheets()]
        except gspread.exceptions.GSpreadException as exc:
            raise StoreUnavailable(f"Spreadsheet unavailable: {exc}")

    def _worksheet(self, name: str):
        """The collection's worksheet, or None when it does not exist yet."""
        try:
            return self._sheet().worksheet(name)
        except gspread.exceptions.WorksheetNotFound:
            return None
        except gspread.exceptions.GSpreadException as exc:
            logger.error("Load %s failed: %s", name, exc)
            raise StoreUnavailable(f"Cannot read collection '{name}'")

    @staticmethod
    def _bodies(worksheet) -> List[str]:
        if worksheet is None:
            return []
        try:
            column = worksheet.col_values(1)
        except gspread.exceptions.GSpreadException as exc:
            logger.error("Load %s failed: %s", worksheet.title, exc)
            raise StoreUnavailable(f"Cannot read collection '{worksheet.title}'")
        if column and column[0] == HEADER:
            column = column[1:]
        return [body for body in column if body]
