"""Data models for remotefs."""

from remotefs.models.attributes import (
    Attr,
    DesiredFile,
    DesiredFolder,
    ObservedFile,
    ObservedFolder,
    Ownership,
    Presence,
    normalize_permissions,
)
from remotefs.models.command import CommandResult

__all__ = [
    "Attr",
    "CommandResult",
    "DesiredFile",
    "DesiredFolder",
    "ObservedFile",
    "ObservedFolder",
    "Ownership",
    "Presence",
    "normalize_permissions",
]
