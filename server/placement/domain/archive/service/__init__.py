from placement.domain.archive.service.archive import ArchiveManager
from placement.domain.archive.service.restore import RestoreCoordinator

__all__ = ["ArchiveManager", "RestoreCoordinator"]
