from placement.domain.archive.util.di.provider import ArchiveProvider

__all__ = ["ArchiveProvider"]
