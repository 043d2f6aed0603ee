import logging
import os
import sys
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource
from typing_extensions import Self

from placement.util.paths import PlacementPaths


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from the YAML file named by PLACEMENT_CONFIG_FILE."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        yaml_data = self._load_yaml_config()
        return yaml_data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        config_file = os.environ.get("PLACEMENT_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    name: str = "Placement Records"
    version: str = "0.1.0"
    description: str = "Company MOA lifecycle, mirror sync and archive service"


class DatabaseConfig(BaseModel):
    """Database configuration.

    An empty url means "derive a SQLite file under PLACEMENT_DATA_DIR";
    Config's validator fills it in.
    """

    url: str = ""
    echo: bool = False
    auto_migrate: bool = True  # apply pending migrations on startup


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Log file path from PLACEMENT_LOG_FILE, if set."""
        return os.environ.get("PLACEMENT_LOG_FILE")


class WorkerConfig(BaseModel):
    """Outbox worker pool settings."""

    enabled: bool = True
    poll_interval: float = 0.5  # seconds between outbox polls when idle
    stale_claim_interval: float = 60.0  # seconds between stale-claim sweeps


class LifecycleConfig(BaseModel):
    """MOA evaluation and reconciliation settings."""

    window_days: int = Field(default=30, ge=0)  # expiring-soon window
    timezone: str = "UTC"  # zone whose calendar date is "today"
    reconcile_cron: str = "5 0 * * *"  # daily, shortly after local midnight
    reconcile_on_startup: bool = True
    write_concurrency: int = Field(default=8, ge=1)


class MirrorConfig(BaseModel):
    """Mirror store settings.

    backend "database" keeps projections in the primary database (local/dev);
    "http" writes them to a Firebase-RTDB-compatible REST tree at ``url``.
    """

    backend: Literal["database", "http"] = "database"
    url: str = ""
    path: str = "companies"
    auth_token: str = ""
    timeout: float = 10.0
    max_retries: int = Field(default=5, ge=1)


class Config(BaseSettings):
    server: Server = Server()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    worker: WorkerConfig = WorkerConfig()
    lifecycle: LifecycleConfig = LifecycleConfig()
    mirror: MirrorConfig = MirrorConfig()

    model_config = {
        "env_prefix": "PLACEMENT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # PLACEMENT_DATABASE__URL
    }

    @model_validator(mode="after")
    def derive_database_url(self) -> Self:
        """Derive the SQLite database location when no url is given."""
        if not self.database.url:
            paths = PlacementPaths()
            self.database = DatabaseConfig(
                url=f"sqlite+aiosqlite:///{paths.database_file}",
                echo=self.database.echo,
                auto_migrate=self.database.auto_migrate,
            )
        return self

    @model_validator(mode="after")
    def serialize_sqlite_writes(self) -> Self:
        """SQLite takes one writer at a time; run reconciliation writes one by one."""
        if self.database.url.startswith("sqlite"):
            self.lifecycle = self.lifecycle.model_copy(update={"write_concurrency": 1})
        return self

    @model_validator(mode="after")
    def check_mirror(self) -> Self:
        if self.mirror.backend == "http" and not self.mirror.url:
            raise ValueError("mirror.url is required when mirror.backend is 'http'")
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: init args, env vars, .env, YAML file, secrets."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure the root logger. Call once, early in startup."""
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    handler: logging.Handler
    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(config.level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    for name in ("httpx", "httpcore", "asyncio", "aiosqlite", "apscheduler"):
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
