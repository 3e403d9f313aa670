"""Exception hierarchy shared across remotefs."""


class RemoteFSError(Exception):
    """Base class for all remotefs errors."""


class TransportError(RemoteFSError):
    """The SSH transport failed to connect or to open a channel."""

    def __init__(self, message: str, command: str | None = None):
        self.command = command
        super().__init__(message)


class PoolClosedError(RemoteFSError):
    """A channel was requested from a closed pool."""

    def __init__(self) -> None:
        super().__init__("channel pool is closed")


class ChannelClosedError(RemoteFSError):
    """A single-use channel was used after running its command."""
