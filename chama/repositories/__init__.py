# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Collection store backends and the factory that picks one from settings."""
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from chama.repositories.base import CollectionStore
from chama.repositories.file_store import FileStore
from chama.repositories.github_store import GitHubStore
from chama.repositories.memory_store import MemoryStore
from chama.repositories.sheets_store import SheetsStore
from chama.repositories.sql_store import SqlStore

BACKENDS = ("memory", "file", "sql", "github", "sheets")


def create_sql_engine(url: str, pool_recycle: int = 300):
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True, pool_recycle=pool_recycle)


def build_store(settings) -> CollectionStore:
    backend = settings.STORE_BACKEND
    if backend == "memory":
        return MemoryStore()
    if backend == "file":
        return FileStore(settings.DATA_DIR)
    if backend == "sql":
        return SqlStore(create_sql_engine(settings.DATABASE_URL, settings.POOL_RECYCLE))
    if backend == "github":
        return GitHubStore(
            repo=settings.GITHUB_REPO,
            token=settings.GITHUB_TOKEN,
            branch=settings.GITHUB_BRANCH,
            data_path=settings.GITHUB_DATA_PATH,
            api_url=settings.GITHUB_API_URL,
            timeout=settings.STORE_TIMEOUT,
            retry_max_attempts=settings.STORE_RETRY_MAX_ATTEMPTS,
            backoff_base=settings.STORE_RETRY_BACKOFF_BASE,
        )
    if backend == "sheets":
        return SheetsStore(settings.GOOGLE_SHEETS_ID, settings.GOOGLE_CREDENTIALS_PATH)
    raise ValueError(f"STORE_BACKEND must be one of {BACKENDS}, got '{backend}'")


__all__ = [
    "BACKENDS", "CollectionStore", "FileStore", "GitHubStore", "MemoryStore",
    "SheetsStore", "SqlStore", "build_store", "create_sql_engine",
]
