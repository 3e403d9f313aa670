"""Tests for the folder reconciler."""

import pytest

from remotefs.models import Attr, DesiredFolder
from remotefs.resources import FolderResource, ReplacementRequiredError, ResourceError
from remotefs.services import ChannelPool, RemoteClient

from tests.conftest import FakeHost


@pytest.fixture
def resource(client: RemoteClient) -> FolderResource:
    return FolderResource(client)


@pytest.mark.asyncio
async def test_create_builds_tree_and_reads_back(
    resource: FolderResource, fake_host: FakeHost
) -> None:
    state = await resource.create(DesiredFolder(path="/tmp/a/b/c"))

    assert fake_host.mutations == ["mkdir -p /tmp/a/b/c"]
    assert fake_host.nodes["/tmp/a/b"].is_dir
    assert state.path == "/tmp/a/b/c"
    assert state.permissions == "0755"
    assert (state.owner, state.owner_name) == (0, "root")


@pytest.mark.asyncio
async def test_create_applies_group_name_and_owner_id(
    resource: FolderResource, fake_host: FakeHost
) -> None:
    state = await resource.create(
        DesiredFolder(
            path="/tmp/data",
            owner=Attr.known(1001),
            group=Attr.unknown(),
            group_name=Attr.known("staff"),
        )
    )

    assert fake_host.mutations == [
        "mkdir -p /tmp/data",
        "chown 1001 /tmp/data",
        "chgrp staff /tmp/data",
    ]
    assert state.owner_name == "bob"
    assert state.group == 50


@pytest.mark.asyncio
async def test_create_failure_surfaces_error(
    resource: FolderResource, fake_host: FakeHost
) -> None:
    fake_host.fail_on("mkdir", b"mkdir: cannot create directory '/root/x': Permission denied\n")

    with pytest.raises(ResourceError, match="Error creating folder"):
        await resource.create(DesiredFolder(path="/root/x"))


@pytest.mark.asyncio
async def test_read_absent_folder_returns_none(
    resource: FolderResource, fake_host: FakeHost
) -> None:
    state = await resource.create(DesiredFolder(path="/tmp/data"))
    del fake_host.nodes["/tmp/data"]

    assert await resource.read(state) is None
    assert fake_host.commands[-1] == "[ -d /tmp/data ] && exit 0 || exit 1"


@pytest.mark.asyncio
async def test_read_regular_file_counts_as_absent(
    resource: FolderResource, fake_host: FakeHost
) -> None:
    state = await resource.create(DesiredFolder(path="/tmp/data"))
    fake_host.add_file("/tmp/data")

    assert await resource.read(state) is None


@pytest.mark.asyncio
async def test_read_refreshes_ownership(resource: FolderResource, fake_host: FakeHost) -> None:
    state = await resource.create(DesiredFolder(path="/tmp/data"))
    fake_host.nodes["/tmp/data"].group = 1000
    fake_host.nodes["/tmp/data"].mode = "700"

    refreshed = await resource.read(state)

    assert refreshed is not None
    assert refreshed.group_name == "alice"
    assert refreshed.permissions == "0700"


@pytest.mark.asyncio
async def test_read_after_pool_close_is_fatal(
    resource: FolderResource, pool: ChannelPool, fake_host: FakeHost
) -> None:
    state = await resource.create(DesiredFolder(path="/srv/data"))
    await pool.close()

    with pytest.raises(ResourceError, match="Could not read remote folder ID /srv/data"):
        await resource.read(state)
    assert fake_host.nodes["/srv/data"].is_dir


@pytest.mark.asyncio
async def test_create_rejects_relative_path(
    resource: FolderResource, fake_host: FakeHost
) -> None:
    with pytest.raises(ResourceError, match="Invalid remote folder path"):
        await resource.create(DesiredFolder(path="srv/data"))

    assert fake_host.commands == []


@pytest.mark.asyncio
async def test_update_is_idempotent(resource: FolderResource, fake_host: FakeHost) -> None:
    wanted = DesiredFolder(path="/tmp/data", owner_name=Attr.known("alice"))
    state = await resource.create(wanted)
    before = len(fake_host.mutations)

    await resource.update(wanted, state)

    assert len(fake_host.mutations) == before


@pytest.mark.asyncio
async def test_update_changes_only_group(resource: FolderResource, fake_host: FakeHost) -> None:
    state = await resource.create(DesiredFolder(path="/tmp/data", owner=Attr.known(1000)))
    before = len(fake_host.mutations)

    updated = await resource.update(
        DesiredFolder(path="/tmp/data", owner=Attr.known(1000), group=Attr.known(1001)),
        state,
    )

    assert fake_host.mutations[before:] == ["chgrp 1001 /tmp/data"]
    assert updated.group_name == "bob"
    assert updated.last_updated


@pytest.mark.asyncio
async def test_update_rejects_path_change(resource: FolderResource) -> None:
    state = await resource.create(DesiredFolder(path="/tmp/data"))

    with pytest.raises(ReplacementRequiredError, match="requires replacement"):
        await resource.update(DesiredFolder(path="/tmp/elsewhere"), state)


@pytest.mark.asyncio
async def test_delete_is_recursive(resource: FolderResource, fake_host: FakeHost) -> None:
    state = await resource.create(DesiredFolder(path="/tmp/data"))
    fake_host.add_file("/tmp/data/inner.txt", "x")

    await resource.delete(state)

    assert fake_host.commands[-1] == "rm -rf /tmp/data"
    assert "/tmp/data" not in fake_host.nodes
    assert "/tmp/data/inner.txt" not in fake_host.nodes


@pytest.mark.asyncio
async def test_delete_absent_folder_is_noop(resource: FolderResource, fake_host: FakeHost) -> None:
    state = await resource.create(DesiredFolder(path="/tmp/data"))
    del fake_host.nodes["/tmp/data"]

    await resource.delete(state)


@pytest.mark.asyncio
async def test_delete_failure_raises(resource: FolderResource, fake_host: FakeHost) -> None:
    state = await resource.create(DesiredFolder(path="/tmp/data"))
    fake_host.fail_on("rm -rf", b"rm: cannot remove '/tmp/data': Operation not permitted\n")

    with pytest.raises(ResourceError, match="Error deleting folder"):
        await resource.delete(state)
