"""Bounded pool of SSH command channels over one connection.

Locking Strategy:
- `_cond`: Guards the closed flag and the outstanding lease counter only
- Commands run outside the condition, so one slow command never blocks
  bookkeeping for other leases

Lease lifecycle:
- `acquire()` waits until outstanding < max_sessions or the pool closes
- Each Channel runs exactly one command and is closed on release
- `close()` refuses new leases but never interrupts leases already granted
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from remotefs.errors import ChannelClosedError, PoolClosedError

if TYPE_CHECKING:
    import asyncssh

logger = logging.getLogger(__name__)

# Stays below OpenSSH's default MaxSessions of 10 per connection
DEFAULT_MAX_SESSIONS = 10


class Channel:
    """Single-use command channel leased from a ChannelPool.

    The underlying SSH session is opened when the command starts and is
    closed when the lease is released.
    """

    def __init__(self, connection: "asyncssh.SSHClientConnection") -> None:
        self._connection = connection
        self._process: Any = None
        self._used = False
        self._closed = False
        self._released = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def open(self, command: str) -> Any:
        """Start `command` on a fresh session channel.

        Raises:
            ChannelClosedError: If the channel already ran a command or was closed
        """
        if self._closed or self._used:
            raise ChannelClosedError(
                f"channel already used, cannot run {command!r}"
            )
        self._used = True
        self._process = await self._connection.create_process(command, encoding=None)
        return self._process

    def close(self) -> None:
        """Close the session channel if one was opened."""
        if self._closed:
            return
        self._closed = True
        if self._process is not None:
            self._process.close()


class ChannelPool:
    """Bounded set of command channels multiplexed over one SSH connection."""

    def __init__(
        self,
        connection: "asyncssh.SSHClientConnection",
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ) -> None:
        """Initialize pool over an authenticated connection.

        Args:
            connection: Open asyncssh connection shared by every channel
            max_sessions: Maximum number of concurrently leased channels (must be > 0)

        Raises:
            ValueError: If max_sessions is not positive
        """
        if max_sessions <= 0:
            raise ValueError(f"max_sessions must be > 0, got {max_sessions}")

        self.max_sessions = max_sessions
        self._connection = connection
        self._outstanding = 0
        self._closed = False
        self._cond = asyncio.Condition()

        logger.info("ChannelPool initialized (max_sessions=%d)", max_sessions)

    async def acquire(self) -> Channel:
        """Lease a channel, waiting for a free slot.

        Returns:
            A fresh, unused Channel

        Raises:
            PoolClosedError: If the pool is or becomes closed while waiting
        """
        async with self._cond:
            if self._closed:
                raise PoolClosedError()
            if self._outstanding >= self.max_sessions:
                logger.debug(
                    "Pool at capacity (%d/%d), waiting for a release",
                    self._outstanding,
                    self.max_sessions,
                )
            await self._cond.wait_for(
                lambda: self._closed or self._outstanding < self.max_sessions
            )
            if self._closed:
                raise PoolClosedError()
            self._outstanding += 1
            logger.debug(
                "Leased channel (outstanding=%d/%d)",
                self._outstanding,
                self.max_sessions,
            )
        return Channel(self._connection)

    async def release(self, channel: Channel | None) -> None:
        """Close `channel` and free its slot.

        Releasing None or an already released channel does nothing.
        """
        if channel is None or channel._released:
            return
        channel._released = True

        try:
            channel.close()
        except Exception as e:
            logger.warning("Error closing channel: %s", e)

        async with self._cond:
            self._outstanding -= 1
            self._cond.notify_all()
            logger.debug(
                "Released channel (outstanding=%d/%d)",
                self._outstanding,
                self.max_sessions,
            )

    @asynccontextmanager
    async def lease(self) -> AsyncIterator[Channel]:
        """Lease a channel for the duration of a `async with` block."""
        channel = await self.acquire()
        try:
            yield channel
        finally:
            await self.release(channel)

    async def close(self) -> None:
        """Refuse new leases and wake every waiter with PoolClosedError."""
        async with self._cond:
            if self._closed:
                return
            self._closed = True
            self._cond.notify_all()
        logger.info(
            "Closing channel pool (outstanding=%d)",
            self._outstanding,
        )

    @property
    def outstanding(self) -> int:
        """Return the number of channels currently leased."""
        return self._outstanding

    @property
    def is_closed(self) -> bool:
        return self._closed
