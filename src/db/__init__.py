"""VisiAI persistence package."""

from db.store import DatabaseScanStore, InMemoryScanStore, ScanStore, build_store

__all__ = [
    "DatabaseScanStore",
    "InMemoryScanStore",
    "ScanStore",
    "build_store",
]
