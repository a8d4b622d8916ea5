"""Repository pattern for database operations."""

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import ScanRecord


class ScanRepository:
    """Handles all ScanRecord database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        scan_id: str,
        url: str,
        report: dict,
        overall_score: float | None = None,
    ) -> ScanRecord:
        """Insert a scan report row."""
        record = ScanRecord(
            id=scan_id,
            url=url,
            report=report,
            overall_score=overall_score,
        )
        self.session.add(record)
        await self.session.flush()  # Assigns seq, surfaces id conflicts
        return record

    async def id_taken(self, scan_id: str) -> bool:
        """True if the id was ever used, deleted rows included."""
        result = await self.session.execute(
            select(ScanRecord.seq).where(ScanRecord.id == scan_id)
        )
        return result.scalar_one_or_none() is not None

    async def get_by_id(self, scan_id: str) -> ScanRecord | None:
        """Retrieve a live (not deleted) report row."""
        result = await self.session.execute(
            select(ScanRecord).where(
                ScanRecord.id == scan_id,
                ScanRecord.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def list_recent(self, limit: int | None = None) -> list[ScanRecord]:
        """Live reports, newest first."""
        query = (
            select(ScanRecord)
            .where(ScanRecord.deleted_at.is_(None))
            .order_by(ScanRecord.seq.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def tombstone(self, scan_id: str) -> bool:
        """
        Drop the report payload and mark the row deleted.

        A single conditional UPDATE, so of two concurrent deletes only
        one matches the live row.

        Returns:
            True if a live row was tombstoned
        """
        result = await self.session.execute(
            update(ScanRecord)
            .where(
                ScanRecord.id == scan_id,
                ScanRecord.deleted_at.is_(None),
            )
            .values(report=None, deleted_at=datetime.now(timezone.utc))
        )
        return result.rowcount == 1
