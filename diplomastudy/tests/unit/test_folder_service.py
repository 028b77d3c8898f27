import re

import pytest

from diplomastudy.models.files import FileItem
from diplomastudy.models.folders import FOLDER_COLORS
from diplomastudy.services.folder_service import FolderCycleError, FolderService


@pytest.mark.asyncio
async def test_create_folder_assigns_id_color_and_parent(folder_service):
    folder = await folder_service.create("  Chemistry  ")

    assert re.fullmatch(r"folder_\d+_[a-z0-9]{9}", folder.id)
    assert folder.name == "Chemistry"
    assert folder.parent_id is None
    assert folder.color in FOLDER_COLORS
    assert folder.type == "folder"


@pytest.mark.asyncio
async def test_list_filters_by_exact_parent(folder_service):
    parent = await folder_service.create("Parent")
    child = await folder_service.create("Child", parent.id)
    other = await folder_service.create("Other")

    assert await folder_service.list(parent.id) == [child]
    assert set(await folder_service.list(None)) == {parent, other}
    assert len(await folder_service.list_all()) == 3


@pytest.mark.asyncio
async def test_root_listing_excludes_empty_string_parents(folder_service, metadata):
    async with metadata.editing_folders() as records:
        records.append({"id": "legacy", "name": "Legacy", "createdAt": "", "parentId": "", "color": "#3B82F6"})

    assert await folder_service.list(None) == []
    assert [folder.id for folder in await folder_service.list("")] == ["legacy"]


@pytest.mark.asyncio
async def test_rename_and_missing_folder(folder_service):
    folder = await folder_service.create("Old")

    assert await folder_service.rename(folder.id, "New")
    assert (await folder_service.get(folder.id)).name == "New"
    assert not await folder_service.rename("folder_missing", "Anything")


@pytest.mark.asyncio
async def test_move_to_root_and_into_other_folder(folder_service):
    a = await folder_service.create("A")
    b = await folder_service.create("B", a.id)

    assert await folder_service.move(b.id, None)
    assert (await folder_service.get(b.id)).parent_id is None

    assert await folder_service.move(a.id, b.id)
    assert (await folder_service.get(a.id)).parent_id == b.id


@pytest.mark.asyncio
async def test_move_into_descendant_is_rejected(folder_service):
    a = await folder_service.create("A")
    b = await folder_service.create("B", a.id)
    c = await folder_service.create("C", b.id)

    with pytest.raises(FolderCycleError):
        await folder_service.move(a.id, c.id)
    with pytest.raises(FolderCycleError):
        await folder_service.move(a.id, a.id)

    assert (await folder_service.get(a.id)).parent_id is None


@pytest.mark.asyncio
async def test_delete_removes_folder_and_direct_children_only(folder_service):
    a = await folder_service.create("A")
    b = await folder_service.create("B", a.id)
    c = await folder_service.create("C", b.id)
    d = await folder_service.create("D")

    assert await folder_service.delete(a.id)

    remaining = {folder.id for folder in await folder_service.list_all()}
    assert remaining == {c.id, d.id}


@pytest.mark.asyncio
async def test_breadcrumbs_run_from_root(folder_service):
    a = await folder_service.create("A")
    b = await folder_service.create("B", a.id)

    crumbs = await folder_service.breadcrumbs(b.id)

    assert [(crumb.id, crumb.name) for crumb in crumbs] == [(None, "Home"), (a.id, "A"), (b.id, "B")]


@pytest.mark.asyncio
async def test_breadcrumbs_stop_on_cyclic_data(folder_service, metadata):
    async with metadata.editing_folders() as records:
        records.append({"id": "x", "name": "X", "createdAt": "", "parentId": "y", "color": "#3B82F6"})
        records.append({"id": "y", "name": "Y", "createdAt": "", "parentId": "x", "color": "#3B82F6"})

    crumbs = await folder_service.breadcrumbs("x")

    assert [crumb.name for crumb in crumbs] == ["Home", "Y", "X"]


def test_stats_counts_files_in_folder():
    files = [
        FileItem(id="k1", name="a.pdf", original_name="a.pdf", size=10, uploaded_at="t", url="/u", folder_id="f1"),
        FileItem(id="k2", name="b.pdf", original_name="b.pdf", size=5, uploaded_at="t", url="/u", folder_id="f1"),
        FileItem(id="k3", name="c.pdf", original_name="c.pdf", size=7, uploaded_at="t", url="/u"),
    ]

    stats = FolderService.stats("f1", files)

    assert stats.file_count == 2
    assert stats.total_size == 15
    assert FolderService.stats(None, files).file_count == 1
