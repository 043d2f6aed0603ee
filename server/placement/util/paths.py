"""Filesystem locations for local (SQLite) deployments.

Directory layout:
    $PLACEMENT_DATA_DIR or ~/.local/share/placement/
        placement.db        # SQLite database
"""

import os
from pathlib import Path


class PlacementPaths:
    """Resolves the data directory, following the XDG layout."""

    def __init__(self, *, data_dir: Path | None = None) -> None:
        env_data_dir = os.environ.get("PLACEMENT_DATA_DIR")
        if data_dir is None:
            data_dir = (
                Path(env_data_dir).expanduser()
                if env_data_dir
                else Path.home() / ".local" / "share" / "placement"
            )
        self._data_dir = data_dir

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def database_file(self) -> Path:
        return self._data_dir / "placement.db"
