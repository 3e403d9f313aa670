"""Open the single SSH connection every channel is multiplexed over."""

import logging
from typing import TYPE_CHECKING, Any

import asyncssh

from remotefs.errors import TransportError

if TYPE_CHECKING:
    from remotefs.config import Settings

logger = logging.getLogger(__name__)


class ConnectionError(TransportError):
    """Failed to establish the SSH connection."""

    def __init__(self, target: str, original_error: Exception):
        """Initialize connection error.

        Args:
            target: user@host:port that was dialled
            original_error: Original exception that caused the failure
        """
        self.target = target
        self.original_error = original_error
        super().__init__(
            f"couldn't establish a connection to the remote server {target}: {original_error}"
        )


async def connect(settings: "Settings") -> asyncssh.SSHClientConnection:
    """Connect and authenticate to the host described by `settings`.

    Credentials are forwarded to asyncssh as given; asyncssh picks the
    authentication method.

    Returns:
        Authenticated connection

    Raises:
        ConnectionError: If the connection or authentication fails
    """
    target = f"{settings.username}@{settings.host}:{settings.port}"
    options: dict[str, Any] = {
        "port": settings.port,
        "username": settings.username,
        "known_hosts": settings.known_hosts,
    }
    if settings.password is not None:
        options["password"] = settings.password
    if settings.private_key_path:
        options["client_keys"] = [settings.private_key_path]

    if settings.known_hosts is None:
        logger.warning(
            "SSH host key verification DISABLED for %s. "
            "Set REMOTEFS_KNOWN_HOSTS to a valid known_hosts file path.",
            target,
        )

    logger.info("Opening SSH connection to %s", target)
    try:
        conn = await asyncssh.connect(settings.host, **options)
    except (asyncssh.Error, OSError) as e:
        logger.error("Connection to %s failed: %s", target, e)
        raise ConnectionError(target, e) from e

    logger.info("SSH connection established to %s", target)
    return conn
