"""Command execution data models."""

from dataclasses import dataclass


@dataclass
class CommandResult:
    """Result of a remote command execution."""

    command: str
    exit_status: int | None
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def output(self) -> str:
        """Standard output decoded as UTF-8.

        Invalid byte sequences become U+FFFD; use `stdout` for raw bytes.
        """
        return self.stdout.decode("utf-8", errors="replace")
