"""Remote regular file resource."""

import logging

from remotefs.errors import RemoteFSError
from remotefs.models import DesiredFile, ObservedFile
from remotefs.resources.base import BaseResource, ResourceError, timestamp
from remotefs.services.runner import CommandError

logger = logging.getLogger(__name__)


class FileResource(BaseResource):
    """Create, read, update and delete a file on the remote host."""

    kind = "file"

    async def create(self, desired: DesiredFile) -> ObservedFile:
        """Write the file, apply ownership and mode, then read it back.

        Raises:
            ResourceError: On the first failing step. The file may be left
                written but with ownership unapplied.
        """
        path = desired.path
        self._check_path(path)
        logger.info("Creating file %s", path)

        await self._step(
            "Error creating file",
            self.client.write_file(
                desired.content.get(""),
                path,
                ensure_dir=bool(desired.ensure_dir.get(False)),
            ),
        )
        await self._apply_ownership(desired)

        return await self._observe(path, ensure_dir=desired.ensure_dir.get())

    async def read(self, state: ObservedFile) -> ObservedFile | None:
        """Refresh `state` from the remote host.

        Returns:
            Fresh observation, or None when the file no longer exists
        """
        path = state.path
        try:
            content, exists = await self.client.read_file(path)
        except RemoteFSError as e:
            raise ResourceError(
                "Error Reading remote file",
                f"Could not read remote file ID {state.id}",
                e,
            ) from e

        if not exists:
            logger.info("File %s is gone, dropping it", path)
            return None

        ownership = await self._read_ownership(path)
        return ObservedFile(
            path=path,
            content=content,
            ensure_dir=state.ensure_dir,
            last_updated=state.last_updated,
            **vars(ownership),
        )

    async def update(self, desired: DesiredFile, state: ObservedFile) -> ObservedFile:
        """Converge only the attributes that differ from `state`.

        Raises:
            ReplacementRequiredError: If the path changed
            ResourceError: On the first failing step
        """
        self._check_identity(desired, state)
        self._check_path(state.path)
        path = state.path
        issued = 0

        if desired.content.differs_from(state.content):
            # The parent already exists, no need to ensure it again
            await self._step(
                "Error updating file content",
                self.client.write_file(desired.content.value, path, ensure_dir=False),
            )
            issued += 1

        issued += await self._apply_ownership_diff(desired, state)

        if issued:
            logger.info("Updated file %s (%d change(s))", path, issued)
            last_updated = timestamp()
        else:
            logger.debug("File %s already up to date", path)
            last_updated = state.last_updated

        ensure_dir = desired.ensure_dir.get() if desired.ensure_dir.is_known else state.ensure_dir
        observed = await self._observe(path, ensure_dir=ensure_dir)
        observed.last_updated = last_updated
        return observed

    async def delete(self, state: ObservedFile) -> None:
        """Remove the file. An already missing file counts as deleted."""
        path = state.path
        logger.info("Deleting file %s", path)
        try:
            await self.client.delete_file(path)
        except CommandError as e:
            if e.not_found:
                logger.warning("File %s was already deleted", path)
                return
            raise ResourceError("Error deleting file", f"Could not delete {path}", e) from e
        except RemoteFSError as e:
            raise ResourceError("Error deleting file", f"Could not delete {path}", e) from e

    async def _observe(self, path: str, ensure_dir: bool | None) -> ObservedFile:
        try:
            content, exists = await self.client.read_file(path)
        except RemoteFSError as e:
            raise ResourceError("Error reading remote file", f"couldn't read {path}", e) from e
        if not exists:
            raise ResourceError("Error reading remote file", f"{path} vanished after write")

        ownership = await self._read_ownership(path)
        return ObservedFile(
            path=path,
            content=content,
            ensure_dir=ensure_dir,
            last_updated=timestamp(),
            **vars(ownership),
        )
