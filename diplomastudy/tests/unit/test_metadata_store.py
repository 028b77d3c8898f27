import asyncio
import json

import pytest

from diplomastudy.services.metadata_store import MetadataDocumentError


@pytest.mark.asyncio
async def test_missing_documents_read_as_empty(metadata):
    assert await metadata.load_folders() == []
    assert await metadata.get_all_associations() == {}
    assert await metadata.get_association("diploma-study/a.pdf") is None


@pytest.mark.asyncio
async def test_update_association_upserts_by_file_id(metadata, storage):
    assert await metadata.update_association("diploma-study/a.pdf", "folder_1")
    assert await metadata.update_association("diploma-study/a.pdf", "folder_2")

    records = json.loads(await storage.get("diploma-study/metadata/file-metadata.json"))
    assert len(records) == 1
    assert records[0]["fileId"] == "diploma-study/a.pdf"
    assert records[0]["folderId"] == "folder_2"
    assert "updatedAt" in records[0]


@pytest.mark.asyncio
async def test_root_association_is_stored_as_null(metadata):
    await metadata.update_association("diploma-study/a.pdf", None)

    assert await metadata.get_all_associations() == {"diploma-study/a.pdf": None}


@pytest.mark.asyncio
async def test_concurrent_updates_keep_every_association(metadata):
    file_ids = [f"diploma-study/{i}.pdf" for i in range(10)]

    results = await asyncio.gather(*(metadata.update_association(file_id, "folder_x") for file_id in file_ids))

    assert all(results)
    assert set((await metadata.get_all_associations()).keys()) == set(file_ids)


@pytest.mark.asyncio
async def test_rename_association_carries_folder(metadata):
    await metadata.update_association("diploma-study/old.pdf", "folder_1")

    assert await metadata.rename_association("diploma-study/old.pdf", "diploma-study/new.pdf")

    assert await metadata.get_all_associations() == {"diploma-study/new.pdf": "folder_1"}


@pytest.mark.asyncio
async def test_rename_association_without_record_leaves_file_unfiled(metadata):
    assert await metadata.rename_association("diploma-study/old.pdf", "diploma-study/new.pdf")
    assert await metadata.get_association("diploma-study/new.pdf") is None


@pytest.mark.asyncio
async def test_remove_and_cleanup(metadata):
    await metadata.update_association("diploma-study/a.pdf", "f1")
    await metadata.update_association("diploma-study/b.pdf", "f2")
    await metadata.update_association("diploma-study/c.pdf", "f3")

    await metadata.remove_association("diploma-study/a.pdf")
    await metadata.cleanup(["diploma-study/b.pdf"])

    assert await metadata.get_all_associations() == {"diploma-study/b.pdf": "f2"}


@pytest.mark.asyncio
async def test_editing_writes_nothing_when_body_raises(metadata, storage):
    with pytest.raises(RuntimeError):
        async with metadata.editing_folders() as records:
            records.append({"id": "folder_1"})
            raise RuntimeError("boom")

    assert not await storage.exists("diploma-study/metadata/folders.json")


@pytest.mark.asyncio
async def test_non_array_document_is_rejected(metadata, storage):
    await storage.put("diploma-study/metadata/folders.json", b'{"id": "x"}')

    with pytest.raises(MetadataDocumentError):
        await metadata.load_folders()
