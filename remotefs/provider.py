"""remotefs provider.

Thin wiring layer: opens the SSH connection, builds the channel pool and
filesystem client on top of it, and hands both reconcilers to the caller.
All reconciliation logic lives in resources/ and services/.
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from types import TracebackType

import asyncssh

from remotefs.config import Settings
from remotefs.resources import FileResource, FolderResource
from remotefs.services import ChannelPool, RemoteClient, connect
from remotefs.utils.console import ColorfulFormatter


def _configure_logging() -> None:
    """Configure colorful logging for the remotefs package.

    Called at module load time so loggers are configured before first use.
    """
    log_level = os.getenv("REMOTEFS_LOG_LEVEL", "INFO").upper()
    use_colors = os.getenv("REMOTEFS_LOG_COLORS", "true").lower() != "false"

    # Disable colors if not a TTY
    if not sys.stderr.isatty():
        use_colors = False

    remotefs_logger = logging.getLogger("remotefs")
    remotefs_logger.setLevel(getattr(logging, log_level, logging.INFO))

    # Only add handler if not already configured
    if not remotefs_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorfulFormatter(use_colors=use_colors))
        remotefs_logger.addHandler(handler)
        remotefs_logger.propagate = False

    logging.getLogger("asyncssh").setLevel(logging.WARNING)


_configure_logging()

logger = logging.getLogger(__name__)

RESOURCE_TYPES = {
    "remote_file": FileResource,
    "remote_folder": FolderResource,
}


@dataclass
class RemoteProvider:
    """Connection, pool, client and reconcilers for one remote host.

    Example:
        async with await RemoteProvider.connect() as provider:
            state = await provider.file.create(DesiredFile(path="/tmp/x", ...))
    """

    settings: Settings
    connection: asyncssh.SSHClientConnection
    pool: ChannelPool
    client: RemoteClient
    file: FileResource = field(init=False)
    folder: FolderResource = field(init=False)
    _closed: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self.file = FileResource(self.client)
        self.folder = FolderResource(self.client)

    @classmethod
    def from_connection(
        cls,
        connection: asyncssh.SSHClientConnection,
        settings: Settings | None = None,
    ) -> "RemoteProvider":
        """Build a provider around an already authenticated connection."""
        settings = settings or Settings.from_env()
        pool = ChannelPool(connection, max_sessions=settings.max_sessions)
        client = RemoteClient(pool, sudo=settings.sudo)
        return cls(settings=settings, connection=connection, pool=pool, client=client)

    @classmethod
    async def connect(cls, settings: Settings | None = None) -> "RemoteProvider":
        """Connect to the host described by `settings` (or the environment).

        Raises:
            ConnectionError: If the SSH connection cannot be established
        """
        settings = settings or Settings.from_env()
        connection = await connect(settings)
        provider = cls.from_connection(connection, settings)
        logger.info(
            "Provider ready (host=%s, sudo=%s, max_sessions=%d)",
            settings.host,
            settings.sudo,
            settings.max_sessions,
        )
        return provider

    def resource(self, type_name: str) -> FileResource | FolderResource:
        """Return the reconciler registered under `type_name`.

        Raises:
            KeyError: If no such resource type exists
        """
        if type_name not in RESOURCE_TYPES:
            raise KeyError(f"Unknown resource type: {type_name}")
        return self.file if RESOURCE_TYPES[type_name] is FileResource else self.folder

    async def close(self) -> None:
        """Close the pool, then the connection. Later calls do nothing."""
        if self._closed:
            return
        self._closed = True

        logger.info("Shutting down provider (outstanding=%d)", self.pool.outstanding)
        await self.pool.close()
        self.connection.close()
        await self.connection.wait_closed()

    async def __aenter__(self) -> "RemoteProvider":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
