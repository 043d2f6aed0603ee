from placement.domain.archive.port.archive_store import ArchiveStore
from placement.domain.archive.port.record_store import RecordStore

__all__ = ["ArchiveStore", "RecordStore"]
