"""State shared by the commands of one CLI invocation."""

from dataclasses import dataclass, field
from pathlib import Path

from assistant_migration.catalog.catalog import WorkspaceCatalog
from assistant_migration.catalog.database import engine_from_config
from assistant_migration.client.assistant_client import AssistantClient
from assistant_migration.config import MigrationConfig, load_config
from assistant_migration.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

SIDES = ("source", "target")


@dataclass
class MigrationContext:
    """Configuration, service clients and catalogs of one invocation, created on first use.

    ``log_level`` and ``log_file`` come from the command line and win over the
    logging section of the configuration.
    """

    config_path: Path | None = None
    log_level: str | None = None
    log_file: Path | None = None

    _config: MigrationConfig | None = field(default=None, init=False, repr=False)
    _clients: dict[str, AssistantClient] = field(default_factory=dict, init=False, repr=False)
    _catalogs: dict[str, WorkspaceCatalog] = field(default_factory=dict, init=False, repr=False)

    @property
    def config(self) -> MigrationConfig:
        """Get or load migration configuration.

        Raises:
            ConfigurationError: If the configuration is missing or invalid
        """
        if self._config is None:
            logger.debug("loading_configuration", config_path=str(self.config_path))
            self._config = load_config(self.config_path)

            logging_config = self._config.logging
            configure_logging(
                level=self.log_level or logging_config.level,
                log_format=logging_config.format,
                log_file=str(self.log_file) if self.log_file else logging_config.file,
                file_level=logging_config.file_level,
            )
            logger.debug("configuration_loaded")

        return self._config

    def use_config(self, config: MigrationConfig) -> None:
        """Replace the loaded configuration (command-line overrides)."""
        self._config = config

    def client(self, side: str) -> AssistantClient:
        """Get or create the assistant client of ``side``."""
        if side not in SIDES:
            raise ValueError(f"Unknown side: {side}")

        if side not in self._clients:
            config = self.config
            logger.debug("creating_client", side=side)
            self._clients[side] = AssistantClient(
                config=getattr(config, side).service_api,
                side=side,
                log_payloads=config.logging.log_payloads,
                max_payload_size=config.logging.max_payload_size,
                max_connections=config.performance.http_max_connections,
                max_keepalive_connections=config.performance.http_max_keepalive_connections,
            )

        return self._clients[side]

    def catalog(self, side: str) -> WorkspaceCatalog:
        """Get or create the workspace catalog of ``side``."""
        if side not in SIDES:
            raise ValueError(f"Unknown side: {side}")

        if side not in self._catalogs:
            db_config = getattr(self.config, side).db
            logger.debug("creating_catalog", side=side, table=db_config.table_name)
            self._catalogs[side] = WorkspaceCatalog(
                engine_from_config(db_config),
                table_name=db_config.table_name,
                side=side,
            )

        return self._catalogs[side]

    @property
    def source_client(self) -> AssistantClient:
        return self.client("source")

    @property
    def target_client(self) -> AssistantClient:
        return self.client("target")

    @property
    def source_catalog(self) -> WorkspaceCatalog:
        return self.catalog("source")

    @property
    def target_catalog(self) -> WorkspaceCatalog:
        return self.catalog("target")

    async def close_clients(self) -> None:
        """Close the HTTP clients; must run on the loop that used them."""
        while self._clients:
            side, client = self._clients.popitem()
            logger.debug("closing_client", side=side)
            await client.close()

    def cleanup(self) -> None:
        """Dispose the catalog engines."""
        while self._catalogs:
            side, catalog = self._catalogs.popitem()
            logger.debug("closing_catalog", side=side)
            catalog.close()

