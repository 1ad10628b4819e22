"""
Collection store backends — the same contract checked against memory,
JSON files, SQLite, a fake GitHub contents API and a fake spreadsheet.
"""
import base64
import hashlib
import json
from types import SimpleNamespace

import gspread
import httpx
import pytest
from sqlalchemy import text

from chama.core.errors import InvalidInput, StaleWrite, StoreUnavailable
from chama.repositories import build_store, create_sql_engine
from chama.repositories.base import EMPTY_REVISION
from chama.repositories.file_store import FileStore
from chama.repositories.github_store import GitHubStore
from chama.repositories.memory_store import MemoryStore
from chama.repositories.sheets_store import SheetsStore
from chama.repositories.sql_store import SqlStore


class FakeGitHub:
    """Just enough of the contents API: blob shas, 404s and sha conflicts."""

    def __init__(self, fail_first=0, large=False):
        self.files = {}
        self.fail_first = fail_first
        self.gets = 0
        # Serve files the way GitHub does above 1 MB: no inline content
        self.large = large

    def put_raw(self, path, raw):
        self.files[path] = (raw, hashlib.sha1(raw.encode()).hexdigest())

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.method == "GET":
            self.gets += 1
            if self.gets <= self.fail_first:
                return httpx.Response(503)
            if path == "/repos/acme/books":
                return httpx.Response(200, json={"full_name": "acme/books"})
            if path == "/repos/acme/books/contents/data":
                listing = [
                    {"type": "file", "name": p.rsplit("/", 1)[1]}
                    for p in self.files if p.startswith(path + "/")
                ]
                return httpx.Response(200 if listing else 404, json=listing)
            if path.startswith("/repos/acme/books/git/blobs/"):
                sha = path.rsplit("/", 1)[1]
                raw = next((r for r, s in self.files.values() if s == sha), None)
                if raw is None:
                    return httpx.Response(404)
                return httpx.Response(200, json={
                    "sha": sha, "encoding": "base64",
                    "content": base64.b64encode(raw.encode()).decode(),
                })
            if path not in self.files:
                return httpx.Response(404, json={"message": "Not Found"})
            raw, sha = self.files[path]
            if self.large:
                return httpx.Response(200, json={
                    "sha": sha, "size": len(raw), "encoding": "none", "content": "",
                })
            return httpx.Response(200, json={
                "content": base64.b64encode(raw.encode()).decode(), "sha": sha,
            })
        if request.method == "PUT":
            body = json.loads(request.content)
            current = self.files.get(path)
            if current is not None and body.get("sha") != current[1]:
                return httpx.Response(409 if body.get("sha") else 422)
            if current is None and body.get("sha"):
                return httpx.Response(422)
            self.put_raw(path, base64.b64decode(body["content"]).decode())
            return httpx.Response(201, json={"content": {"sha": self.files[path][1]}})
        return httpx.Response(405)


class FakeWorksheet:
    def __init__(self, title):
        self.title = title
        self.values = []

    def col_values(self, col):
        return [row[col - 1] for row in self.values if len(row) >= col]

    def clear(self):
        self.values = []

    def resize(self, rows=None, cols=None):
        self.values = self.values[:rows]

    def update(self, values=None, range_name=None, value_input_option=None):
        assert range_name == "A1"
        self.values = [list(row) for row in values]


class FakeSpreadsheet:
    """Worksheets by title, raising the same not-found error as gspread."""

    def __init__(self):
        self.sheets = {"Sheet1": FakeWorksheet("Sheet1")}

    def open_by_key(self, key):
        return self

    def worksheets(self):
        return list(self.sheets.values())

    def worksheet(self, title):
        if title not in self.sheets:
            raise gspread.exceptions.WorksheetNotFound(title)
        return self.sheets[title]

    def add_worksheet(self, title, rows, cols):
        self.sheets[title] = FakeWorksheet(title)
        return self.sheets[title]


def _sheets(fake=None):
    store = SheetsStore("sheet-id", client=fake or FakeSpreadsheet())
    store.open()
    return store


def _github(fake, **kwargs):
    store = GitHubStore(
        repo="acme/books", token="t", data_path="data", backoff_base=0,
        transport=httpx.MockTransport(fake), **kwargs,
    )
    store.open()
    return store


@pytest.fixture(params=["memory", "file", "sql", "github", "sheets"])
def any_store(request, tmp_path):
    if request.param == "memory":
        store = MemoryStore()
    elif request.param == "file":
        store = FileStore(str(tmp_path / "data"))
    elif request.param == "sql":
        store = SqlStore(create_sql_engine("sqlite://"))
    elif request.param == "sheets":
        yield _sheets()
        return
    else:
        yield _github(FakeGitHub())
        return
    store.open()
    yield store
    store.close()


# ═══════════════════════════════════════════════════════════════════════════
# CONTRACT
# ═══════════════════════════════════════════════════════════════════════════
class TestContract:
    def test_missing_collection_is_empty(self, any_store):
        assert any_store.load("news") == []
        assert any_store.snapshot("news") == ([], EMPTY_REVISION)

    def test_save_then_load_keeps_order(self, any_store):
        records = [{"id": "b", "n": 2}, {"id": "a", "n": 1, "nested": {"x": [1, 2]}}]
        any_store.save("polls", records)
        assert any_store.load("polls") == records

    def test_save_replaces_whole_collection(self, any_store):
        any_store.save("polls", [{"id": 1}, {"id": 2}])
        any_store.save("polls", [{"id": 3}])
        assert any_store.load("polls") == [{"id": 3}]

    def test_collections_are_independent(self, any_store):
        any_store.save("news", [{"id": 1}])
        assert any_store.load("logs") == []

    def test_append(self, any_store):
        any_store.append("logs", {"id": 1})
        any_store.append("logs", {"id": 2})
        assert [r["id"] for r in any_store.load("logs")] == [1, 2]

    def test_revision_changes_on_write(self, any_store):
        _, before = any_store.snapshot("news")
        after = any_store.save("news", [{"id": 1}], expected_revision=before)
        assert after != before
        assert any_store.snapshot("news")[1] == after

    def test_stale_revision_rejected(self, any_store):
        _, revision = any_store.snapshot("polls")
        any_store.save("polls", [{"id": "first"}], expected_revision=revision)
        with pytest.raises(StaleWrite):
            any_store.save("polls", [{"id": "second"}], expected_revision=revision)
        assert any_store.load("polls") == [{"id": "first"}]

    def test_names_lists_existing_collections(self, any_store):
        assert any_store.names() == []
        any_store.save("polls", [{"id": 1}])
        any_store.append("logs", {"id": 2})
        assert any_store.names() == ["logs", "polls"]

    def test_mutating_loaded_records_does_not_touch_store(self, any_store):
        any_store.save("news", [{"id": 1}])
        any_store.load("news")[0]["id"] = 99
        assert any_store.load("news") == [{"id": 1}]

    @pytest.mark.parametrize("name", ["", "News", "../etc", "a b", "x" * 65, "news\n"])
    def test_invalid_name_rejected(self, any_store, name):
        with pytest.raises(InvalidInput):
            any_store.load(name)


# ═══════════════════════════════════════════════════════════════════════════
# BACKEND SPECIFICS
# ═══════════════════════════════════════════════════════════════════════════
class TestMemoryStore:
    def test_corrupt_document_reads_empty(self):
        store = MemoryStore()
        store.documents["news"] = "{not json"
        assert store.load("news") == []

    def test_non_array_document_reads_empty(self):
        store = MemoryStore()
        store.documents["news"] = '{"id": 1}'
        assert store.load("news") == []


class TestFileStore:
    def test_persists_across_instances(self, tmp_path):
        FileStore(str(tmp_path)).save("members", [{"email": "a@x.com"}])
        assert FileStore(str(tmp_path)).load("members") == [{"email": "a@x.com"}]

    def test_one_json_file_per_collection(self, tmp_path):
        store = FileStore(str(tmp_path))
        store.save("loans", [{"id": 1}])
        assert json.loads((tmp_path / "loans.json").read_text()) == [{"id": 1}]
        assert [p.name for p in tmp_path.iterdir()] == ["loans.json"]

    def test_corrupt_file_reads_empty(self, tmp_path):
        (tmp_path / "news.json").write_text("[{broken")
        assert FileStore(str(tmp_path)).load("news") == []

    def test_open_creates_directory(self, tmp_path):
        target = tmp_path / "nested" / "data"
        store = FileStore(str(target))
        store.open()
        assert target.is_dir()
        store.ping()

    def test_ping_fails_without_directory(self, tmp_path):
        with pytest.raises(StoreUnavailable):
            FileStore(str(tmp_path / "absent")).ping()


class TestSqlStore:
    def test_malformed_row_is_skipped(self):
        engine = create_sql_engine("sqlite://")
        store = SqlStore(engine)
        store.open()
        store.save("news", [{"id": 1}])
        with engine.begin() as conn:
            conn.execute(text(
                "INSERT INTO chama_records (collection, position, body) VALUES ('news', 1, '{oops')"
            ))
        assert store.load("news") == [{"id": 1}]

    def test_ping(self):
        store = SqlStore(create_sql_engine("sqlite://"))
        store.open()
        store.ping()

    def test_file_database_survives_reopen(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'chama.db'}"
        first = SqlStore(create_sql_engine(url))
        first.open()
        first.save("members", [{"email": "a@x.com"}])
        first.close()

        second = SqlStore(create_sql_engine(url))
        second.open()
        assert second.load("members") == [{"email": "a@x.com"}]

    def test_second_instance_sees_stale_write(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'chama.db'}"
        first, second = SqlStore(create_sql_engine(url)), SqlStore(create_sql_engine(url))
        first.open()
        second.open()
        first.save("loans", [{"id": 1}])
        _, revision = second.snapshot("loans")
        first.save("loans", [{"id": 1}, {"id": 2}])
        with pytest.raises(StaleWrite):
            second.save("loans", [{"id": 3}], expected_revision=revision)
        assert first.load("loans") == [{"id": 1}, {"id": 2}]

    def test_save_claims_collection_lock_row(self):
        engine = create_sql_engine("sqlite://")
        store = SqlStore(engine)
        store.open()
        store.save("loans", [])
        store.save("loans", [{"id": 1}])
        with engine.connect() as conn:
            rows = conn.execute(text("SELECT collection FROM chama_collections")).fetchall()
        assert [r[0] for r in rows] == ["loans"]


class TestGitHubStore:
    def test_writes_under_data_path(self):
        fake = FakeGitHub()
        _github(fake).save("loans", [{"id": 1}])
        raw, _ = fake.files["/repos/acme/books/contents/data/loans.json"]
        assert json.loads(raw) == [{"id": 1}]

    def test_revision_is_blob_sha(self):
        fake = FakeGitHub()
        store = _github(fake)
        sha = store.save("loans", [{"id": 1}])
        assert sha == fake.files["/repos/acme/books/contents/data/loans.json"][1]
        assert store.snapshot("loans")[1] == sha

    def test_corrupt_content_reads_empty(self):
        fake = FakeGitHub()
        fake.put_raw("/repos/acme/books/contents/data/news.json", "not json at all")
        assert _github(fake).load("news") == []

    def test_read_retried_on_server_error(self):
        fake = FakeGitHub(fail_first=2)
        store = _github(fake, retry_max_attempts=2)
        assert store.load("news") == []
        assert fake.gets == 3

    def test_gives_up_after_retries(self):
        fake = FakeGitHub(fail_first=10)
        store = _github(fake, retry_max_attempts=1)
        with pytest.raises(StoreUnavailable):
            store.load("news")
        assert fake.gets == 2

    def test_network_error_is_unavailable(self):
        def boom(request):
            raise httpx.ConnectError("down", request=request)

        store = GitHubStore(repo="acme/books", token="t", backoff_base=0,
                            retry_max_attempts=0, transport=httpx.MockTransport(boom))
        store.open()
        with pytest.raises(StoreUnavailable):
            store.load("news")

    def test_ping(self):
        _github(FakeGitHub()).ping()

    def test_open_requires_repo(self):
        with pytest.raises(StoreUnavailable):
            GitHubStore(repo="", token="t").open()

    def test_closed_store_refuses_calls(self):
        store = _github(FakeGitHub())
        store.close()
        with pytest.raises(StoreUnavailable):
            store.load("news")

    def test_large_file_read_through_blob_api(self):
        fake = FakeGitHub(large=True)
        records = [{"id": i, "note": "x" * 50} for i in range(200)]
        fake.put_raw("/repos/acme/books/contents/data/notifications.json", json.dumps(records))
        store = _github(fake)
        assert store.load("notifications") == records

    def test_append_to_large_file_keeps_existing_records(self):
        fake = FakeGitHub(large=True)
        fake.put_raw("/repos/acme/books/contents/data/news.json", json.dumps([{"id": "old"}]))
        store = _github(fake)
        store.append("news", {"id": "new"})
        raw, _ = fake.files["/repos/acme/books/contents/data/news.json"]
        assert json.loads(raw) == [{"id": "old"}, {"id": "new"}]


class TestSheetsStore:
    def test_one_worksheet_per_collection_with_header(self):
        fake = FakeSpreadsheet()
        _sheets(fake).save("loans", [{"id": 1}, {"id": 2}])
        assert fake.sheets["loans"].values == [["record"], ['{"id": 1}'], ['{"id": 2}']]

    def test_malformed_row_is_skipped(self):
        fake = FakeSpreadsheet()
        store = _sheets(fake)
        store.save("news", [{"id": 1}])
        fake.sheets["news"].values.append(["{oops"])
        assert store.load("news") == [{"id": 1}]

    def test_shrinking_collection_drops_old_rows(self):
        fake = FakeSpreadsheet()
        store = _sheets(fake)
        store.save("news", [{"id": 1}, {"id": 2}, {"id": 3}])
        store.save("news", [{"id": 9}])
        assert store.load("news") == [{"id": 9}]
        assert len(fake.sheets["news"].values) == 2

    def test_default_worksheet_is_not_a_collection(self):
        assert _sheets().names() == []

    def test_open_requires_spreadsheet_id(self):
        with pytest.raises(StoreUnavailable):
            SheetsStore("", client=FakeSpreadsheet()).open()

    def test_missing_credentials_file_is_unavailable(self, tmp_path):
        with pytest.raises(StoreUnavailable):
            SheetsStore("sheet-id", credentials_path=str(tmp_path / "absent.json")).open()

    def test_closed_store_refuses_calls(self):
        store = _sheets()
        store.close()
        with pytest.raises(StoreUnavailable):
            store.load("news")


class TestBuildStore:
    def _settings(self, **overrides):
        base = dict(
            STORE_BACKEND="memory", DATA_DIR="./data", DATABASE_URL="sqlite://",
            POOL_RECYCLE=300, GITHUB_REPO="acme/books", GITHUB_TOKEN="", GITHUB_BRANCH="main",
            GITHUB_DATA_PATH="data", GITHUB_API_URL="https://api.github.com",
            STORE_TIMEOUT=1.0, STORE_RETRY_MAX_ATTEMPTS=0, STORE_RETRY_BACKOFF_BASE=0,
            GOOGLE_SHEETS_ID="sheet-id", GOOGLE_CREDENTIALS_PATH="creds.json",
        )
        base.update(overrides)
        return SimpleNamespace(**base)

    @pytest.mark.parametrize("backend,cls", [
        ("memory", MemoryStore), ("file", FileStore), ("sql", SqlStore), ("github", GitHubStore),
        ("sheets", SheetsStore),
    ])
    def test_selects_backend(self, backend, cls):
        assert isinstance(build_store(self._settings(STORE_BACKEND=backend)), cls)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            build_store(self._settings(STORE_BACKEND="cassandra"))
