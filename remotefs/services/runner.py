"""Run one shell command on one leased channel."""

import logging
from typing import TYPE_CHECKING

import asyncssh

from remotefs.errors import RemoteFSError, TransportError
from remotefs.models import CommandResult

if TYPE_CHECKING:
    from remotefs.services.pool import Channel

logger = logging.getLogger(__name__)

NOT_FOUND_MARKER = b"No such file or directory"


class CommandError(RemoteFSError):
    """A remote command exited with a non-zero status.

    Carries the exact command text and the raw bytes written to stderr so
    callers can match on the remote output.
    """

    def __init__(
        self,
        command: str,
        exit_status: int | None,
        stderr: bytes,
        stdout: bytes = b"",
    ) -> None:
        self.command = command
        self.exit_status = exit_status
        self.stderr = stderr
        self.stdout = stdout
        super().__init__(self._format())

    @property
    def reason(self) -> str:
        """Transport-level description of the failure."""
        if self.exit_status is None:
            return "Process exited without an exit status"
        return f"Process exited with status {self.exit_status}"

    @property
    def not_found(self) -> bool:
        """True when the command failed because the target path is absent."""
        return NOT_FOUND_MARKER in self.stderr

    def _format(self) -> str:
        stderr = self.stderr.decode("utf-8", errors="replace").rstrip("\n")
        return f"`{self.command}`\n  {self.reason}\n  {stderr}"


async def run(
    channel: "Channel",
    command: str,
    input: bytes | None = None,
) -> CommandResult:
    """Execute `command` on `channel` and collect its output.

    Args:
        channel: Unused channel leased from a ChannelPool
        command: Shell command line to run
        input: Bytes streamed to the command's stdin before EOF

    Returns:
        CommandResult with separate stdout and stderr bytes

    Raises:
        TransportError: If the session channel cannot be opened
        CommandError: If the command exits with a non-zero status
    """
    logger.debug("Running: %s", command)
    try:
        process = await channel.open(command)
        if input:
            process.stdin.write(input)
        process.stdin.write_eof()
        completed = await process.wait(check=False)
    except (asyncssh.Error, OSError) as e:
        raise TransportError(f"cannot run `{command}`: {e}", command=command) from e

    stdout = _as_bytes(completed.stdout)
    stderr = _as_bytes(completed.stderr)
    exit_status = completed.returncode

    if exit_status != 0:
        logger.debug("Command failed (status=%s): %s", exit_status, command)
        raise CommandError(command, exit_status, stderr, stdout)

    return CommandResult(
        command=command,
        exit_status=exit_status,
        stdout=stdout,
        stderr=stderr,
    )


def _as_bytes(data: bytes | str | None) -> bytes:
    if data is None:
        return b""
    if isinstance(data, str):
        return data.encode("utf-8")
    return data
