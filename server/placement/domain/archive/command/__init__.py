from placement.domain.archive.command.archive_record import (
    ArchiveRecord,
    ArchiveRecordHandler,
    RecordArchivedResult,
)
from placement.domain.archive.command.archive_records import (
    ArchiveRecords,
    ArchiveRecordsHandler,
    RecordsArchived,
)
from placement.domain.archive.command.restore_record import (
    RecordRestoredResult,
    RestoreRecord,
    RestoreRecordHandler,
)

__all__ = [
    "ArchiveRecord",
    "ArchiveRecordHandler",
    "ArchiveRecords",
    "ArchiveRecordsHandler",
    "RecordArchivedResult",
    "RecordRestoredResult",
    "RecordsArchived",
    "RestoreRecord",
    "RestoreRecordHandler",
]
