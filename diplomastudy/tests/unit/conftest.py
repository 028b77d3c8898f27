import random

import pytest
from fastapi.testclient import TestClient

from diplomastudy.app_factory import create_app
from diplomastudy.config import Settings
from diplomastudy.services.file_service import FileService
from diplomastudy.services.folder_service import FolderService
from diplomastudy.services.metadata_store import MetadataStore
from diplomastudy.services.quiz_service import QuizService
from diplomastudy.storage.local_storage import LocalStorage


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(storage_path=str(tmp_path / "storage"))


@pytest.fixture
def metadata(storage) -> MetadataStore:
    return MetadataStore(storage, "diploma-study/metadata")


@pytest.fixture
def folder_service(metadata) -> FolderService:
    return FolderService(metadata)


@pytest.fixture
def file_service(storage, metadata) -> FileService:
    return FileService(storage, metadata, prefix="diploma-study")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        STORAGE_PROVIDER="local",
        STORAGE_PATH=str(tmp_path / "storage"),
        LOG_DIR=None,
        DEFAULT_QUESTION_COUNT=15,
    )


@pytest.fixture
def client(settings, storage):
    """TestClient over an app backed by the same LocalStorage as the service fixtures."""
    app = create_app(settings=settings, storage=storage, quiz_service=QuizService(rng=random.Random(7)))
    with TestClient(app) as test_client:
        yield test_client
