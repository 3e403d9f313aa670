"""Desired and observed attribute records for remote files and folders.

Optional desired attributes are tri-state:
- UNSET: the user did not declare the attribute
- UNKNOWN: declared as computed, the remote host decides
- KNOWN: a concrete value to converge to

Only KNOWN values ever produce a remote command.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Presence(Enum):
    """State tag of an optional attribute."""

    UNSET = "unset"
    UNKNOWN = "unknown"
    KNOWN = "known"


@dataclass(frozen=True)
class Attr(Generic[T]):
    """Tagged optional attribute value."""

    presence: Presence = Presence.UNSET
    value: T | None = None

    @classmethod
    def unset(cls) -> "Attr[Any]":
        return cls(Presence.UNSET)

    @classmethod
    def unknown(cls) -> "Attr[Any]":
        return cls(Presence.UNKNOWN)

    @classmethod
    def known(cls, value: T) -> "Attr[T]":
        if value is None:
            raise ValueError("A known attribute needs a value")
        return cls(Presence.KNOWN, value)

    @property
    def is_known(self) -> bool:
        return self.presence is Presence.KNOWN

    def differs_from(self, observed: object) -> bool:
        """True when this is a known value not equal to the observed one."""
        return self.is_known and self.value != observed

    def get(self, default: T | None = None) -> T | None:
        return self.value if self.is_known else default


def _unset() -> Attr[Any]:
    return Attr.unset()


def normalize_permissions(mode: str) -> str:
    """Return an octal mode string padded to four characters.

    ``stat -c %a`` prints ``644``; declared modes may be ``644`` or ``0644``.
    """
    mode = mode.replace("\n", "").strip()
    if 0 < len(mode) < 4:
        return mode.rjust(4, "0")
    return mode


@dataclass(frozen=True)
class DesiredFolder:
    """Requested state of a remote directory."""

    path: str
    owner: Attr[int] = field(default_factory=_unset)
    owner_name: Attr[str] = field(default_factory=_unset)
    group: Attr[int] = field(default_factory=_unset)
    group_name: Attr[str] = field(default_factory=_unset)
    permissions: Attr[str] = field(default_factory=_unset)


@dataclass(frozen=True)
class DesiredFile(DesiredFolder):
    """Requested state of a remote regular file."""

    content: Attr[str] = field(default_factory=_unset)
    ensure_dir: Attr[bool] = field(default_factory=_unset)


@dataclass
class Ownership:
    """Ownership and mode of a remote path as reported by ``stat``."""

    owner: int
    group: int
    owner_name: str
    group_name: str
    permissions: str


@dataclass
class ObservedFolder:
    """Measured state of a remote directory."""

    path: str
    owner: int
    group: int
    owner_name: str
    group_name: str
    permissions: str
    exists: bool = True
    last_updated: str | None = None

    @property
    def id(self) -> str:
        """Resource identity, which is the path."""
        return self.path

    def to_dict(self) -> dict[str, Any]:
        """Flatten into an attribute record."""
        record = asdict(self)
        record["id"] = self.id
        return record


@dataclass
class ObservedFile(ObservedFolder):
    """Measured state of a remote regular file."""

    content: str = ""
    ensure_dir: bool | None = None
