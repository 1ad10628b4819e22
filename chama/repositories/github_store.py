# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: a GitHub repository as datastore.

Each collection is ``<data_path>/<name>.json`` on one branch, read and written
through the contents API. The blob sha is the collection revision, so GitHub
itself rejects a write based on a stale read. Reads are retried with
exponential backoff; writes are not.
"""

import base64
import time
from typing import List, Optional, Tuple

import httpx

from chama.core.errors import StaleWrite, StoreUnavailable
from chama.core.logging import get_logger
from chama.repositories.base import (
    EMPTY_REVISION, CollectionStore, Record, dump_collection, parse_collection,
)

logger = get_logger(__name__)

RETRYABLE_STATUSES = (500, 502, 503, 504)


class GitHubStore(CollectionStore):
    backend = "github"

    def __init__(self, repo: str, token: str, branch: str = "main",
                 data_path: str = "data", api_url: str = "https://api.github.com",
                 timeout: float = 10.0, retry_max_attempts: int = 2,
                 backoff_base: float = 0.3,
                 transport: Optional[httpx.BaseTransport] = None):
        self._repo = repo
        self._token = token
        self._branch = branch
        self._data_path = data_path.strip("/")
        self._api_url = api_url
        self._timeout = timeout
        self._max_attempts = 1 + max(retry_max_attempts, 0)
        self._backoff_base = backoff_base
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ── Lifecycle ──

    def open(self) -> None:
        if not self._repo:
            raise StoreUnavailable("GITHUB_REPO is not configured")
        headers = {"Accept": "application/vnd.github+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        self._client = httpx.Client(
            base_url=self._api_url, headers=headers,
            timeout=self._timeout, transport=self._transport,
        )
        logger.info("GitHub store ready repo=%s branch=%s", self._repo, self._branch)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def ping(self) -> None:
        resp = self._get(f"/repos/{self._repo}")
        if resp.status_code != 200:
            raise StoreUnavailable(f"GitHub repository unreachable (status {resp.status_code})")

    # ── Hooks ──

    def _snapshot(self, name: str) -> Tuple[List[Record], str]:
        raw, sha = self._fetch(name)
        return parse_collection(name, raw), sha or EMPTY_REVISION

    def _save(self, name: str, records: List[Record],
              expected_revision: Optional[str]) -> str:
        if expected_revision is None:
            _, sha = self._fetch(name)
        else:
            sha = None if expected_revision == EMPTY_REVISION else expected_revision

        payload = dump_collection(records)
        body = {
            "message": f"Update {name}",
            "content": base64.b64encode(payload.encode("utf-8")).decode("ascii"),
            "branch": self._branch,
        }
        if sha:
            body["sha"] = sha

        try:
            resp = self._http().put(self._content_path(name), json=body)
        except httpx.RequestError as exc:
            logger.error("Save %s failed: %s", name, exc)
            raise StoreUnavailable(f"Cannot write collection '{name}'")

        if resp.status_code in (409, 422):
            logger.warning("Stale write rejected by GitHub for collection %s", name)
            raise StaleWrite()
        if resp.status_code not in (200, 201):
            logger.error("Save %s returned status %s", name, resp.status_code)
            raise StoreUnavailable(f"Cannot write collection '{name}'")
        return resp.json()["content"]["sha"]

    def _names(self) -> List[str]:
        resp = self._get(f"/repos/{self._repo}/contents/{self._data_path}", params={"ref": self._branch})
        if resp.status_code == 404:
            return []
        if resp.status_code != 200:
            raise StoreUnavailable(f"Cannot list collections (status {resp.status_code})")
        return [
            entry["name"][: -len(".json")]
            for entry in resp.json()
            if entry.get("type") == "file" and entry.get("name", "").endswith(".json")
        ]

    # ── Private ──

    def _http(self) -> httpx.Client:
        if self._client is None:
            raise StoreUnavailable("GitHub store is not open")
        return self._client

    def _content_path(self, name: str) -> str:
        return f"/repos/{self._repo}/contents/{self._data_path}/{name}.json"

    def _fetch(self, name: str) -> Tuple[Optional[str], Optional[str]]:
        """Return (document text, blob sha); (None, None) when the file is absent."""
        resp = self._get(self._content_path(name), params={"ref": self._branch})
        if resp.status_code == 404:
            return None, None
        if resp.status_code != 200:
            logger.error("Load %s returned status %s", name, resp.status_code)
            raise StoreUnavailable(f"Cannot read collection '{name}'")
        data = resp.json()
        sha = data.get("sha")
        if data.get("encoding") == "none" or (not data.get("content") and data.get("size", 0) > 0):
            # Files over 1 MB come back without inline content
            return self._blob(name, sha), sha
        raw = base64.b64decode(data.get("content", "")).decode("utf-8")
        return raw, sha

    def _blob(self, name: str, sha: Optional[str]) -> str:
        if not sha:
            raise StoreUnavailable(f"Cannot read collection '{name}': no blob sha")
        resp = self._get(f"/repos/{self._repo}/git/blobs/{sha}")
        if resp.status_code != 200:
            logger.error("Blob read for %s returned status %s", name, resp.status_code)
            raise StoreUnavailable(f"Cannot read collection '{name}'")
        data = resp.json()
        if data.get("encoding", "base64") != "base64":
            return data.get("content", "")
        return base64.b64decode(data.get("content", "")).decode("utf-8")

    def _get(self, path: str, params: Optional[dict] = None) -> httpx.Response:
        client = self._http()
        last_exc: Exception | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                resp = client.get(path, params=params)
                if resp.status_code in RETRYABLE_STATUSES and attempt < self._max_attempts:
                    time.sleep(self._backoff_base * (2 ** (attempt - 1)))
                    continue
                return resp
            except httpx.RequestError as exc:
                last_exc = exc
                if attempt < self._max_attempts:
                    time.sleep(self._backoff_base * (2 ** (attempt - 1)))
                    continue
        logger.error("GitHub unreachable after %d attempts: %s", self._max_attempts, last_exc)
        raise StoreUnavailable(f"GitHub unreachable after {self._max_attempts} attempts")
