from placement.domain.archive.query.get_archived import (
    ArchivedDetail,
    GetArchived,
    GetArchivedHandler,
)
from placement.domain.archive.query.list_archived import (
    ArchivedList,
    ListArchived,
    ListArchivedHandler,
)

__all__ = [
    "ArchivedDetail",
    "ArchivedList",
    "GetArchived",
    "GetArchivedHandler",
    "ListArchived",
    "ListArchivedHandler",
]
