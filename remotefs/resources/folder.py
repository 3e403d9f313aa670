"""Remote directory resource."""

import logging

from remotefs.errors import RemoteFSError
from remotefs.models import DesiredFolder, ObservedFolder
from remotefs.resources.base import BaseResource, ResourceError, timestamp

logger = logging.getLogger(__name__)


class FolderResource(BaseResource):
    """Create, read, update and delete a directory tree on the remote host."""

    kind = "folder"

    async def create(self, desired: DesiredFolder) -> ObservedFolder:
        path = desired.path
        self._check_path(path)
        logger.info("Creating folder %s", path)

        await self._step("Error creating folder", self.client.create_dir(path))
        await self._apply_ownership(desired)

        ownership = await self._read_ownership(path)
        return ObservedFolder(path=path, last_updated=timestamp(), **vars(ownership))

    async def read(self, state: ObservedFolder) -> ObservedFolder | None:
        """Refresh `state`; None when the directory no longer exists."""
        path = state.path
        try:
            exists = await self.client.dir_exists(path)
        except RemoteFSError as e:
            raise ResourceError(
                "Error Reading remote folder",
                f"Could not read remote folder ID {state.id}",
                e,
            ) from e

        if not exists:
            logger.info("Folder %s is gone, dropping it", path)
            return None

        ownership = await self._read_ownership(path)
        return ObservedFolder(path=path, last_updated=state.last_updated, **vars(ownership))

    async def update(self, desired: DesiredFolder, state: ObservedFolder) -> ObservedFolder:
        self._check_identity(desired, state)
        self._check_path(state.path)
        path = state.path

        issued = await self._apply_ownership_diff(desired, state)
        if issued:
            logger.info("Updated folder %s (%d change(s))", path, issued)

        ownership = await self._read_ownership(path)
        return ObservedFolder(
            path=path,
            last_updated=timestamp() if issued else state.last_updated,
            **vars(ownership),
        )

    async def delete(self, state: ObservedFolder) -> None:
        """Recursively remove the directory and everything below it."""
        path = state.path
        logger.info("Deleting folder %s", path)
        try:
            await self.client.delete_folder(path)
        except RemoteFSError as e:
            raise ResourceError("Error deleting folder", f"Could not delete {path}", e) from e
