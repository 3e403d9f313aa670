"""Shared fixtures: an in-memory remote host speaking the remotefs shell dialect."""

import asyncio
import posixpath
import shlex
from dataclasses import dataclass, field
from types import SimpleNamespace

import pytest

from remotefs.services import ChannelPool, RemoteClient

USERS = {0: "root", 1000: "alice", 1001: "bob"}
GROUPS = {0: "root", 1000: "alice", 1001: "bob", 50: "staff"}


@dataclass
class Node:
    """A file or directory on the fake host."""

    is_dir: bool
    content: str = ""
    owner: int = 0
    group: int = 0
    mode: str = "644"


@dataclass
class FakeHost:
    """Minimal Linux filesystem that executes the commands remotefs sends."""

    nodes: dict[str, Node] = field(default_factory=dict)
    commands: list[str] = field(default_factory=list)
    failures: dict[str, tuple[int, bytes]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for path in ("/", "/tmp", "/etc", "/home"):
            self.nodes[path] = Node(is_dir=True, mode="755")

    def fail_on(self, fragment: str, stderr: bytes, status: int = 1) -> None:
        """Make every command containing `fragment` fail."""
        self.failures[fragment] = (status, stderr)

    def add_file(self, path: str, content: str = "", **attrs) -> Node:
        node = Node(is_dir=False, content=content, **attrs)
        self.nodes[path] = node
        return node

    def add_dir(self, path: str, **attrs) -> Node:
        attrs.setdefault("mode", "755")
        node = Node(is_dir=True, **attrs)
        self.nodes[path] = node
        return node

    @property
    def mutations(self) -> list[str]:
        """Commands that change remote state."""
        verbs = ("tee", "chown", "chgrp", "chmod", "rm", "mkdir")
        return [c for c in self.commands if any(f"{v} " in c for v in verbs)]

    def execute(self, command: str, stdin: bytes) -> tuple[int, bytes, bytes]:
        self.commands.append(command)
        for fragment, (status, stderr) in self.failures.items():
            if fragment in command:
                return status, b"", stderr

        tokens = [t for t in shlex.split(command) if t != "sudo"]

        if tokens[0] == "[":
            node = self.nodes.get(tokens[2])
            return (0 if node and node.is_dir else 1), b"", b""

        stdout = b""
        while tokens:
            if "&&" in tokens:
                idx = tokens.index("&&")
                step, tokens = tokens[:idx], tokens[idx + 1:]
            else:
                step, tokens = tokens, []
            status, stdout, stderr = self._step(step, stdin)
            if status != 0:
                return status, stdout, stderr
        return 0, stdout, b""

    def _missing(self, tool: str, path: str) -> tuple[int, bytes, bytes]:
        return 1, b"", f"{tool}: {path}: No such file or directory\n".encode()

    def _step(self, argv: list[str], stdin: bytes) -> tuple[int, bytes, bytes]:
        if argv[:3] == ["cat", "/dev/stdin", "|"]:
            path = argv[4]
            if posixpath.dirname(path) not in self.nodes:
                return self._missing("tee", path)
            node = self.nodes.get(path) or self.add_file(path)
            node.content = stdin.decode()
            return 0, stdin, b""

        cmd, args = argv[0], argv[1:]
        path = args[-1]
        node = self.nodes.get(path)

        if cmd == "mkdir":
            parts = path.strip("/").split("/")
            for i in range(1, len(parts) + 1):
                sub = "/" + "/".join(parts[:i])
                self.nodes.setdefault(sub, Node(is_dir=True, mode="755"))
            return 0, b"", b""
        if cmd == "cat":
            if node is None:
                return self._missing("cat", path)
            return 0, node.content.encode(), b""
        if cmd == "test":
            is_file = node is not None and not node.is_dir
            wanted = args[0] == "-f"
            return (0 if is_file == wanted else 1), b"", b""
        if cmd == "rm":
            if node is None:
                if "-rf" in args:
                    return 0, b"", b""
                return 1, b"", f"rm: cannot remove '{path}': No such file or directory\n".encode()
            for key in [k for k in self.nodes if k == path or k.startswith(path + "/")]:
                del self.nodes[key]
            return 0, b"", b""

        if node is None:
            return 1, b"", f"{cmd}: cannot access '{path}': No such file or directory\n".encode()

        if cmd == "stat":
            selector = args[1][1:]
            value = {
                "a": node.mode,
                "u": str(node.owner),
                "g": str(node.group),
                "U": USERS.get(node.owner, str(node.owner)),
                "G": GROUPS.get(node.group, str(node.group)),
            }[selector]
            return 0, f"{value}\n".encode(), b""
        if cmd == "chown":
            uid = self._resolve(args[0], USERS)
            if uid is None:
                return 1, b"", f"chown: invalid user: '{args[0]}'\n".encode()
            node.owner = uid
            return 0, b"", b""
        if cmd == "chgrp":
            gid = self._resolve(args[0], GROUPS)
            if gid is None:
                return 1, b"", f"chgrp: invalid group: '{args[0]}'\n".encode()
            node.group = gid
            return 0, b"", b""
        if cmd == "chmod":
            node.mode = args[0].lstrip("0") or "0"
            return 0, b"", b""

        return 127, b"", f"sh: {cmd}: not found\n".encode()

    @staticmethod
    def _resolve(value: str, table: dict[int, str]) -> int | None:
        if value.isdigit():
            return int(value)
        for ident, name in table.items():
            if name == value:
                return ident
        return None


class FakeStdin:
    def __init__(self) -> None:
        self.data = b""
        self.eof = False

    def write(self, data: bytes) -> None:
        self.data += data

    def write_eof(self) -> None:
        self.eof = True


class FakeProcess:
    def __init__(self, host: FakeHost, command: str) -> None:
        self.host = host
        self.command = command
        self.stdin = FakeStdin()
        self.closed = False

    async def wait(self, check: bool = False) -> SimpleNamespace:
        await asyncio.sleep(0)
        status, stdout, stderr = self.host.execute(self.command, self.stdin.data)
        return SimpleNamespace(
            returncode=status,
            exit_status=status,
            stdout=stdout,
            stderr=stderr,
        )

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    """Stands in for asyncssh.SSHClientConnection."""

    def __init__(self, host: FakeHost) -> None:
        self.host = host
        self.processes: list[FakeProcess] = []
        self.closed = False

    async def create_process(self, command: str, encoding=None) -> FakeProcess:
        process = FakeProcess(self.host, command)
        self.processes.append(process)
        return process

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        return None


@pytest.fixture
def fake_host() -> FakeHost:
    """Empty fake remote host."""
    return FakeHost()


@pytest.fixture
def fake_connection(fake_host: FakeHost) -> FakeConnection:
    return FakeConnection(fake_host)


@pytest.fixture
def pool(fake_connection: FakeConnection) -> ChannelPool:
    return ChannelPool(fake_connection, max_sessions=4)


@pytest.fixture
def client(pool: ChannelPool) -> RemoteClient:
    return RemoteClient(pool)
