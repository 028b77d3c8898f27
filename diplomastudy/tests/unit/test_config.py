import pytest

from diplomastudy.config import load_settings
from diplomastudy.storage import LocalStorage, S3Storage, storage_factory

CONFIG = """
[api]
host = "127.0.0.1"
port = 9000
log_level = "debug"

[service]
environment = "test"
version = "1.2.3"

[storage]
provider = "{provider}"
storage_path = "{storage_path}"
prefix = "study/"
bucket_name = "study-bucket"
region = "eu-west-1"

[quiz]
default_question_count = 30
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ["AWS_ACCESS_KEY", "AWS_SECRET_ACCESS_KEY", "S3_BUCKET", "LOG_LEVEL", "SENTRY_DSN"]:
        monkeypatch.delenv(key, raising=False)


def _write_config(tmp_path, provider):
    path = tmp_path / "diplomastudy.toml"
    path.write_text(CONFIG.format(provider=provider, storage_path=(tmp_path / "files").as_posix()))
    return path


def test_missing_config_file_uses_defaults(tmp_path):
    settings = load_settings(tmp_path / "absent.toml")

    assert settings.STORAGE_PROVIDER == "local"
    assert settings.STORAGE_PREFIX == "diploma-study"
    assert settings.METADATA_PREFIX == "diploma-study/metadata"
    assert settings.DEFAULT_QUESTION_COUNT == 15


def test_sections_are_read(tmp_path):
    settings = load_settings(_write_config(tmp_path, "local"))

    assert settings.HOST == "127.0.0.1"
    assert settings.PORT == 9000
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.ENVIRONMENT == "test"
    assert settings.VERSION == "1.2.3"
    assert settings.STORAGE_PREFIX == "study"
    assert settings.METADATA_PREFIX == "study/metadata"
    assert settings.DEFAULT_QUESTION_COUNT == 30
    assert isinstance(storage_factory(settings), LocalStorage)


def test_auto_provider_without_credentials_is_local(tmp_path):
    settings = load_settings(_write_config(tmp_path, "auto"))

    assert settings.STORAGE_PROVIDER == "local"
    assert not settings.uses_object_storage


def test_auto_provider_with_credentials_selects_s3(tmp_path, monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY", "key")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "secret")

    settings = load_settings(_write_config(tmp_path, "auto"))

    assert settings.STORAGE_PROVIDER == "aws-s3"
    assert settings.S3_BUCKET == "study-bucket"
    assert settings.AWS_REGION == "eu-west-1"
    assert isinstance(storage_factory(settings), S3Storage)


def test_s3_provider_without_credentials_raises(tmp_path):
    with pytest.raises(ValueError):
        load_settings(_write_config(tmp_path, "aws-s3"))


def test_unknown_provider_raises(tmp_path):
    with pytest.raises(ValueError):
        load_settings(_write_config(tmp_path, "gcs"))
