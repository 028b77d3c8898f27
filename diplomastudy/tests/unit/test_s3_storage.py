import io
from datetime import UTC, datetime

import pytest
from botocore.exceptions import ClientError

from diplomastudy.storage.s3_storage import S3Storage


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class _FakePaginator:
    def __init__(self, objects):
        self._objects = objects

    def paginate(self, Bucket, Prefix):
        contents = [
            {"Key": key, "Size": len(body), "LastModified": datetime(2025, 1, 1, tzinfo=UTC)}
            for key, body in sorted(self._objects.items())
            if key.startswith(Prefix)
        ]
        # Two pages to exercise pagination
        yield {"Contents": contents[:1]}
        yield {"Contents": contents[1:]}


class _FakeS3Client:
    def __init__(self):
        self.objects = {}
        self.content_types = {}
        self.fail_delete = False

    def put_object(self, Bucket, Key, Body, ContentType=None):
        self.objects[Key] = Body
        self.content_types[Key] = ContentType

    def get_object(self, Bucket, Key):
        if Key not in self.objects:
            raise _client_error("NoSuchKey", "GetObject")
        return {"Body": io.BytesIO(self.objects[Key])}

    def get_paginator(self, name):
        assert name == "list_objects_v2"
        return _FakePaginator(self.objects)

    def delete_object(self, Bucket, Key):
        if self.fail_delete:
            raise _client_error("AccessDenied", "DeleteObject")
        self.objects.pop(Key, None)

    def copy_object(self, Bucket, Key, CopySource):
        if CopySource["Key"] not in self.objects:
            raise _client_error("NoSuchKey", "CopyObject")
        self.objects[Key] = self.objects[CopySource["Key"]]

    def head_object(self, Bucket, Key):
        if Key not in self.objects:
            raise _client_error("404", "HeadObject")
        return {}

    def generate_presigned_url(self, operation, Params, ExpiresIn):
        return f"https://{Params['Bucket']}.s3.example.com/{Params['Key']}?expires={ExpiresIn}"


@pytest.fixture
def s3_client():
    return _FakeS3Client()


@pytest.fixture
def s3_storage(s3_client):
    return S3Storage(default_bucket="test-bucket", s3_client=s3_client)


@pytest.mark.asyncio
async def test_put_and_get_round_trip(s3_storage, s3_client):
    stored = await s3_storage.put("diploma-study/a.pdf", b"pdf", content_type="application/pdf")

    assert stored.size == 3
    assert s3_client.content_types["diploma-study/a.pdf"] == "application/pdf"
    assert await s3_storage.get("diploma-study/a.pdf") == b"pdf"


@pytest.mark.asyncio
async def test_get_missing_object_raises_file_not_found(s3_storage):
    with pytest.raises(FileNotFoundError):
        await s3_storage.get("diploma-study/missing.pdf")


@pytest.mark.asyncio
async def test_list_follows_pages_and_prefix(s3_storage):
    await s3_storage.put("diploma-study/a.pdf", b"1")
    await s3_storage.put("diploma-study/b.pdf", b"22")
    await s3_storage.put("elsewhere/c.pdf", b"333")

    objects = await s3_storage.list("diploma-study/")

    assert [obj.key for obj in objects] == ["diploma-study/a.pdf", "diploma-study/b.pdf"]
    assert [obj.size for obj in objects] == [1, 2]


@pytest.mark.asyncio
async def test_move_copies_then_deletes(s3_storage, s3_client):
    await s3_storage.put("diploma-study/old.pdf", b"data")

    await s3_storage.move("diploma-study/old.pdf", "diploma-study/new.pdf")

    assert "diploma-study/old.pdf" not in s3_client.objects
    assert s3_client.objects["diploma-study/new.pdf"] == b"data"


@pytest.mark.asyncio
async def test_move_leaves_both_copies_when_delete_fails(s3_storage, s3_client):
    await s3_storage.put("diploma-study/old.pdf", b"data")
    s3_client.fail_delete = True

    with pytest.raises(OSError):
        await s3_storage.move("diploma-study/old.pdf", "diploma-study/new.pdf")

    assert set(s3_client.objects) == {"diploma-study/old.pdf", "diploma-study/new.pdf"}


@pytest.mark.asyncio
async def test_exists_and_presigned_url(s3_storage):
    await s3_storage.put("diploma-study/a.pdf", b"x")

    assert await s3_storage.exists("diploma-study/a.pdf")
    assert not await s3_storage.exists("diploma-study/b.pdf")

    url = await s3_storage.get_download_url("diploma-study/a.pdf", expires_in=60)
    assert url == "https://test-bucket.s3.example.com/diploma-study/a.pdf?expires=60"
