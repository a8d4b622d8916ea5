"""Scan report stores."""

import asyncio
import contextlib
import logging
import uuid
from abc import ABC, abstractmethod

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from config import Settings
from db.models import Base
from db.repositories import ScanRepository
from db.session import create_engine, create_session_factory, session_scope, shares_connection
from errors import NotFoundError, StoreError
from scanning.report import ScanReport

logger = logging.getLogger(__name__)

MAX_ID_ATTEMPTS = 5


def _new_id() -> str:
    return uuid.uuid4().hex


class ScanStore(ABC):
    """
    Persists scan reports.

    Callers always get independent copies; the store keeps its own.
    Ids are unique and never reused, even after deletion.
    """

    async def open(self) -> None:
        """Acquire resources. Called once at service start."""

    async def close(self) -> None:
        """Release resources. Called once at shutdown."""

    @abstractmethod
    async def save(self, report: ScanReport) -> str:
        """Persist a report under a fresh id and return the id."""

    @abstractmethod
    async def get(self, scan_id: str) -> ScanReport:
        """Raises NotFoundError if no live report has this id."""

    @abstractmethod
    async def list(self) -> list[ScanReport]:
        """All live reports, most recent first."""

    @abstractmethod
    async def delete(self, scan_id: str) -> None:
        """Raises NotFoundError if no live report has this id."""


class InMemoryScanStore(ScanStore):
    """Process-local store guarded by an asyncio lock."""

    def __init__(self):
        self._reports: dict[str, ScanReport] = {}  # insertion ordered
        self._issued: set[str] = set()
        self._lock = asyncio.Lock()

    async def save(self, report: ScanReport) -> str:
        async with self._lock:
            scan_id = _new_id()
            while scan_id in self._issued:
                scan_id = _new_id()
            self._issued.add(scan_id)
            self._reports[scan_id] = report.model_copy(update={"id": scan_id}, deep=True)
        return scan_id

    async def get(self, scan_id: str) -> ScanReport:
        async with self._lock:
            report = self._reports.get(scan_id)
            if report is None:
                raise NotFoundError(f"Scan {scan_id} not found")
            return report.model_copy(deep=True)

    async def list(self) -> list[ScanReport]:
        async with self._lock:
            return [report.model_copy(deep=True) for report in reversed(self._reports.values())]

    async def delete(self, scan_id: str) -> None:
        async with self._lock:
            if self._reports.pop(scan_id, None) is None:
                raise NotFoundError(f"Scan {scan_id} not found")


class DatabaseScanStore(ScanStore):
    """
    SQLAlchemy-backed store.

    Each operation runs in its own transaction, so a report is visible to
    `list` only once fully committed. Writes are serialized through an
    asyncio lock; on in-memory SQLite, where every session shares one
    connection, reads take the lock too.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.echo = echo
        self.engine = None
        self.session_factory = None
        self._write_lock = asyncio.Lock()
        self._read_lock = self._write_lock if shares_connection(database_url) else contextlib.nullcontext()

    async def open(self) -> None:
        self.engine = create_engine(self.database_url, echo=self.echo)
        self.session_factory = create_session_factory(self.engine)
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise StoreError(f"Could not initialize scan store: {e}") from e
        logger.info("Database scan store ready")

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None

    def _factory(self):
        if self.session_factory is None:
            raise StoreError("Scan store is not open")
        return self.session_factory

    async def save(self, report: ScanReport) -> str:
        async with self._write_lock:
            for _ in range(MAX_ID_ATTEMPTS):
                scan_id = _new_id()
                stored = report.model_copy(update={"id": scan_id})
                try:
                    async with session_scope(self._factory()) as session:
                        repo = ScanRepository(session)
                        if await repo.id_taken(scan_id):
                            continue
                        await repo.create(
                            scan_id=scan_id,
                            url=stored.url,
                            report=stored.model_dump(mode="json", by_alias=True),
                            overall_score=stored.scores.overall,
                        )
                    return scan_id
                except IntegrityError:
                    logger.warning(f"Scan id collision on {scan_id}, retrying")
                except SQLAlchemyError as e:
                    raise StoreError(f"Failed to save scan report: {e}") from e

        raise StoreError("Could not allocate a unique scan id")

    async def get(self, scan_id: str) -> ScanReport:
        try:
            async with self._read_lock, session_scope(self._factory()) as session:
                record = await ScanRepository(session).get_by_id(scan_id)
                if record is None or record.report is None:
                    raise NotFoundError(f"Scan {scan_id} not found")
                return ScanReport.model_validate(record.report)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load scan {scan_id}: {e}") from e

    async def list(self) -> list[ScanReport]:
        try:
            async with self._read_lock, session_scope(self._factory()) as session:
                records = await ScanRepository(session).list_recent()
                return [ScanReport.model_validate(r.report) for r in records if r.report is not None]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list scans: {e}") from e

    async def delete(self, scan_id: str) -> None:
        try:
            async with self._write_lock, session_scope(self._factory()) as session:
                if not await ScanRepository(session).tombstone(scan_id):
                    raise NotFoundError(f"Scan {scan_id} not found")
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to delete scan {scan_id}: {e}") from e


def build_store(settings: Settings) -> ScanStore:
    """Pick the store backend from settings."""
    if settings.store_backend == "memory":
        return InMemoryScanStore()
    if settings.store_backend == "database":
        return DatabaseScanStore(settings.database_url, echo=settings.debug)
    raise ValueError(f"Unknown store backend: {settings.store_backend}")
