"""Services for remotefs."""

from remotefs.services.client import RemoteClient
from remotefs.services.connection import ConnectionError, connect
from remotefs.services.pool import DEFAULT_MAX_SESSIONS, Channel, ChannelPool
from remotefs.services.runner import CommandError, run

__all__ = [
    "Channel",
    "ChannelPool",
    "CommandError",
    "ConnectionError",
    "DEFAULT_MAX_SESSIONS",
    "RemoteClient",
    "connect",
    "run",
]
