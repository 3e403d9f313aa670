"""Remote filesystem operations over leased SSH channels.

Every operation leases one channel from the pool, runs one shell command,
and releases the channel before returning. Sudo prefixing follows the
client's own `sudo` flag only.
"""

import logging
import posixpath

from remotefs.errors import TransportError
from remotefs.models import Ownership, normalize_permissions
from remotefs.services.pool import ChannelPool
from remotefs.services.runner import CommandError, run
from remotefs.utils.shell import quote_arg, quote_path, with_sudo
from remotefs.utils.validation import validate_path

logger = logging.getLogger(__name__)

# stat -c selectors for the ownership reads
STAT_OWNER = "u"
STAT_GROUP = "g"
STAT_OWNER_NAME = "U"
STAT_GROUP_NAME = "G"
STAT_FORMATS = (STAT_OWNER, STAT_GROUP, STAT_OWNER_NAME, STAT_GROUP_NAME)


class RemoteClient:
    """Catalog of filesystem commands against one remote host."""

    def __init__(self, pool: ChannelPool, sudo: bool = False) -> None:
        self.pool = pool
        self.sudo = sudo

    def _cmd(self, command: str) -> str:
        return with_sudo(command, self.sudo)

    async def _run(self, command: str, input: bytes | None = None) -> str:
        async with self.pool.lease() as channel:
            result = await run(channel, command, input=input)
        return result.output

    async def write_file(self, content: str, path: str, ensure_dir: bool = False) -> None:
        """Write `content` to `path` by streaming it through tee.

        Content is sent UTF-8 encoded.

        Args:
            content: Full file content
            path: Remote file path
            ensure_dir: Create the parent directory first

        Raises:
            CommandError: If tee (or mkdir) fails
        """
        validate_path(path)
        command = f"cat /dev/stdin | {self._cmd(f'tee {quote_path(path)}')}"
        if ensure_dir:
            parent = posixpath.dirname(path)
            command = f"mkdir -p {quote_path(parent)} && {command}"
        await self._run(command, input=content.encode("utf-8"))

    async def create_dir(self, path: str) -> None:
        """Create `path` and any missing parents."""
        validate_path(path)
        await self._run(self._cmd(f"mkdir -p {quote_path(path)}"))

    async def read_file(self, path: str) -> tuple[str, bool]:
        """Read file contents.

        Output is decoded as UTF-8 with invalid bytes replaced by U+FFFD,
        so only text files round-trip exactly.

        Returns:
            Tuple of (content, exists). A missing file gives ("", False).

        Raises:
            CommandError: If cat fails for any reason other than absence
        """
        validate_path(path)
        try:
            content = await self._run(self._cmd(f"cat {quote_path(path)}"))
        except CommandError as e:
            if e.not_found:
                logger.debug("File %s does not exist", path)
                return ("", False)
            raise
        return (content, True)

    async def dir_exists(self, path: str) -> bool:
        """Check if `path` is a directory.

        A failed probe or an unopenable channel reads as "not a directory".

        Raises:
            PoolClosedError: If the pool is closed
        """
        validate_path(path)
        try:
            await self._run(f"[ -d {quote_path(path)} ] && exit 0 || exit 1")
        except (CommandError, TransportError) as e:
            logger.debug("Directory probe for %s failed: %s", path, e)
            return False
        return True

    async def file_exists(self, path: str) -> bool:
        """Check if `path` is a regular file.

        A failed `test -f` is confirmed with `test ! -f` on a second
        channel so that errors are not mistaken for absence.

        Raises:
            CommandError: If neither probe gives a definite answer
        """
        validate_path(path)
        try:
            await self._run(self._cmd(f"test -f {quote_path(path)}"))
        except CommandError:
            await self._run(self._cmd(f"test ! -f {quote_path(path)}"))
            return False
        return True

    async def read_permissions(self, path: str) -> str:
        """Return the octal mode of `path`, padded to four characters."""
        validate_path(path)
        output = await self._run(self._cmd(f"stat -c %a {quote_path(path)}"))
        return normalize_permissions(output)

    async def stat_file(self, path: str, fmt: str) -> str:
        """Return one `stat -c %<fmt>` field of `path`.

        Args:
            path: Remote path
            fmt: One of u, g, U, G

        Raises:
            ValueError: If fmt is not an ownership selector
        """
        if fmt not in STAT_FORMATS:
            raise ValueError(f"Unsupported stat format: {fmt!r}")
        validate_path(path)
        output = await self._run(self._cmd(f"stat -c %{fmt} {quote_path(path)}"))
        return output.replace("\n", "")

    async def read_owner(self, path: str) -> str:
        return await self.stat_file(path, STAT_OWNER)

    async def read_group(self, path: str) -> str:
        return await self.stat_file(path, STAT_GROUP)

    async def read_owner_name(self, path: str) -> str:
        return await self.stat_file(path, STAT_OWNER_NAME)

    async def read_group_name(self, path: str) -> str:
        return await self.stat_file(path, STAT_GROUP_NAME)

    async def read_attributes(self, path: str) -> Ownership:
        """Read ownership ids, names and mode of `path`.

        Raises:
            CommandError: If any stat call fails
            ValueError: If an id is not numeric
        """
        group = await self.read_group(path)
        owner = await self.read_owner(path)
        group_name = await self.read_group_name(path)
        owner_name = await self.read_owner_name(path)
        permissions = await self.read_permissions(path)
        return Ownership(
            owner=int(owner),
            group=int(group),
            owner_name=owner_name,
            group_name=group_name,
            permissions=permissions,
        )

    async def chown(self, path: str, owner: str | int) -> None:
        validate_path(path)
        await self._run(self._cmd(f"chown {quote_arg(str(owner))} {quote_path(path)}"))

    async def chgrp(self, path: str, group: str | int) -> None:
        validate_path(path)
        await self._run(self._cmd(f"chgrp {quote_arg(str(group))} {quote_path(path)}"))

    async def chmod(self, path: str, permissions: str) -> None:
        validate_path(path)
        await self._run(self._cmd(f"chmod {quote_arg(permissions)} {quote_path(path)}"))

    async def delete_file(self, path: str) -> None:
        validate_path(path)
        await self._run(self._cmd(f"rm {quote_path(path)}"))

    async def delete_folder(self, path: str) -> None:
        """Recursively remove `path`. Irreversible."""
        validate_path(path)
        await self._run(self._cmd(f"rm -rf {quote_path(path)}"))
