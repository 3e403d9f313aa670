"""Reconcile remote files and folders over a single SSH connection."""

from remotefs.config import Settings
from remotefs.errors import (
    ChannelClosedError,
    PoolClosedError,
    RemoteFSError,
    TransportError,
)
from remotefs.models import (
    Attr,
    DesiredFile,
    DesiredFolder,
    ObservedFile,
    ObservedFolder,
    Presence,
)
from remotefs.provider import RemoteProvider
from remotefs.resources import (
    FileResource,
    FolderResource,
    ReplacementRequiredError,
    ResourceError,
)
from remotefs.services import ChannelPool, CommandError, RemoteClient

__version__ = "0.1.0"

__all__ = [
    "Attr",
    "ChannelClosedError",
    "ChannelPool",
    "CommandError",
    "DesiredFile",
    "DesiredFolder",
    "FileResource",
    "FolderResource",
    "ObservedFile",
    "ObservedFolder",
    "PoolClosedError",
    "Presence",
    "RemoteClient",
    "RemoteFSError",
    "RemoteProvider",
    "ReplacementRequiredError",
    "ResourceError",
    "Settings",
    "TransportError",
]
