"""SQLAlchemy database models for VisiAI."""

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Float, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScanRecord(Base):
    """
    One persisted scan report.

    Rows are never physically removed: deleting a report clears its payload
    and stamps `deleted_at`, so its id stays taken forever.
    """

    __tablename__ = "scan_reports"

    # Insertion sequence, used for most-recent-first ordering
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Public report id (uuid4 hex)
    id: Mapped[str] = mapped_column(String(32), unique=True, nullable=False, index=True)

    url: Mapped[str] = mapped_column(String(2048), nullable=False, index=True)

    # Denormalized for quick history queries; the report JSON is authoritative
    overall_score: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Full ScanReport as camelCase JSON; NULL once deleted
    report: Mapped[dict | None] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )
