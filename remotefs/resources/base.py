"""Shared reconciliation steps for file and folder resources.

Ownership tie-break: a known numeric id wins over a known name; when
neither is known no command is issued.
"""

import logging
from collections.abc import Awaitable
from datetime import datetime
from typing import TYPE_CHECKING

from remotefs.errors import RemoteFSError
from remotefs.models import DesiredFolder, ObservedFolder, Ownership, normalize_permissions
from remotefs.utils.validation import PathValidationError, validate_path

if TYPE_CHECKING:
    from remotefs.services.client import RemoteClient

logger = logging.getLogger(__name__)

# RFC 850 date layout
TIMESTAMP_FORMAT = "%A, %d-%b-%y %H:%M:%S %Z"


class ResourceError(RemoteFSError):
    """A reconciliation step failed.

    The message carries the resource-level summary followed by the
    underlying command failure.
    """

    def __init__(self, summary: str, detail: str, cause: Exception | None = None):
        self.summary = summary
        self.detail = detail
        self.cause = cause
        message = f"{summary}: {detail}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ReplacementRequiredError(ResourceError):
    """The path changed; the resource must be deleted and created again."""

    def __init__(self, old_path: str, new_path: str):
        self.old_path = old_path
        self.new_path = new_path
        super().__init__(
            "Path cannot be updated in place",
            f"{old_path} -> {new_path} requires replacement",
        )


def timestamp() -> str:
    return datetime.now().astimezone().strftime(TIMESTAMP_FORMAT)


class BaseResource:
    """Steps common to every remote path resource."""

    kind = "path"

    def __init__(self, client: "RemoteClient") -> None:
        self.client = client

    def _check_identity(self, desired: DesiredFolder, state: ObservedFolder) -> None:
        if desired.path != state.path:
            raise ReplacementRequiredError(state.path, desired.path)

    def _check_path(self, path: str) -> None:
        try:
            validate_path(path)
        except PathValidationError as e:
            raise ResourceError(f"Invalid remote {self.kind} path", path, e) from e

    async def _apply_ownership(self, desired: DesiredFolder) -> None:
        """Apply every known owner, group and mode of a freshly created path."""
        path = desired.path

        owner = desired.owner.get() if desired.owner.is_known else desired.owner_name.get()
        if owner is not None:
            await self._step(
                f"Error updating {self.kind} user ownership",
                self.client.chown(path, owner),
            )

        group = desired.group.get() if desired.group.is_known else desired.group_name.get()
        if group is not None:
            await self._step(
                f"Error updating {self.kind} group ownership",
                self.client.chgrp(path, group),
            )

        if desired.permissions.is_known:
            await self._step(
                f"Error updating {self.kind} permissions",
                self.client.chmod(path, desired.permissions.value),
            )

    async def _apply_ownership_diff(
        self, desired: DesiredFolder, state: ObservedFolder
    ) -> int:
        """Change only the owner, group and mode that differ from `state`.

        Returns:
            Number of mutation commands issued
        """
        path = state.path
        issued = 0

        owner: int | str | None = None
        if desired.owner.differs_from(state.owner):
            owner = desired.owner.value
        elif desired.owner_name.differs_from(state.owner_name):
            owner = desired.owner_name.value
        if owner is not None:
            await self._step(
                f"Error updating {self.kind} user ownership",
                self.client.chown(path, owner),
            )
            issued += 1

        group: int | str | None = None
        if desired.group.differs_from(state.group):
            group = desired.group.value
        elif desired.group_name.differs_from(state.group_name):
            group = desired.group_name.value
        if group is not None:
            await self._step(
                f"Error updating {self.kind} group ownership",
                self.client.chgrp(path, group),
            )
            issued += 1

        if desired.permissions.is_known and normalize_permissions(
            desired.permissions.value
        ) != normalize_permissions(state.permissions):
            await self._step(
                f"Error updating {self.kind} permissions",
                self.client.chmod(path, desired.permissions.value),
            )
            issued += 1

        return issued

    async def _read_ownership(self, path: str) -> Ownership:
        """Read back owner, group and mode; any failure is fatal."""
        try:
            return await self.client.read_attributes(path)
        except (RemoteFSError, ValueError) as e:
            logger.error("Couldn't load %s attributes of %s: %s", self.kind, path, e)
            raise ResourceError(
                f"Error reading remote {self.kind}",
                f"couldn't load attributes of {path}",
                e,
            ) from e

    async def _step(self, summary: str, operation: Awaitable[None]) -> None:
        """Await one mutation, wrapping its failure with resource context."""
        try:
            await operation
        except RemoteFSError as e:
            logger.error("%s: %s", summary, e)
            raise ResourceError(summary, "Could not update, unexpected error", e) from e
