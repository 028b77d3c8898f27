import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import tomli
from pydantic_settings import BaseSettings

from diplomastudy.utils.env_loader import CONFIG_FILE, load_local_env

# Default to loading from .env unless a secret manager is injecting variables.
load_local_env(override=True)


class Settings(BaseSettings):
    """DiplomaStudy configuration settings."""

    # API configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RELOAD: bool = False
    SENTRY_DSN: Optional[str] = None
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = "logs"

    # Service configuration
    ENVIRONMENT: str = "development"
    VERSION: str = "unknown"
    SECRET_MANAGER: str = "env"

    # Storage configuration
    STORAGE_PROVIDER: Literal["local", "aws-s3"] = "local"
    STORAGE_PATH: str = "./storage"
    STORAGE_PREFIX: str = "diploma-study"
    METADATA_PREFIX: str = "diploma-study/metadata"
    AWS_ACCESS_KEY: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_REGION: str = "us-east-2"
    S3_BUCKET: str = "diplomastudy-files"
    S3_ENDPOINT_URL: Optional[str] = None
    PRESIGNED_URL_EXPIRY: int = 3600

    # Quiz configuration
    DEFAULT_QUESTION_COUNT: int = 15

    @property
    def uses_object_storage(self) -> bool:
        return self.STORAGE_PROVIDER == "aws-s3"


def _read_config(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        return {}
    with config_path.open("rb") as f:
        return tomli.load(f)


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Build settings from diplomastudy.toml and the process environment."""
    config = _read_config(config_path or Path(CONFIG_FILE))

    em = "'{missing_value}' needed if '{field}' is set to '{value}'"
    settings_dict: Dict[str, Any] = {}

    # Load API config
    api_cfg = config.get("api", {})
    settings_dict.update(
        {
            "HOST": api_cfg.get("host", "0.0.0.0"),
            "PORT": int(api_cfg.get("port", 8000)),
            "RELOAD": bool(api_cfg.get("reload", False)),
            "SENTRY_DSN": os.getenv("SENTRY_DSN", None),
            "LOG_LEVEL": os.getenv("LOG_LEVEL", api_cfg.get("log_level", "INFO")).upper(),
            "LOG_DIR": api_cfg.get("log_dir", "logs") or None,
        }
    )

    # Load service config
    if "service" in config:
        service_cfg = config["service"]
        settings_dict.update(
            {
                "ENVIRONMENT": service_cfg.get("environment", "development"),
                "VERSION": service_cfg.get("version", "unknown"),
                "SECRET_MANAGER": service_cfg.get("secret_manager", "env"),
            }
        )

    # Load storage config
    storage_cfg = config.get("storage", {})
    prefix = str(storage_cfg.get("prefix", "diploma-study")).strip("/")
    settings_dict.update(
        {
            "STORAGE_PATH": storage_cfg.get("storage_path", "./storage"),
            "STORAGE_PREFIX": prefix,
            "METADATA_PREFIX": str(storage_cfg.get("metadata_prefix", f"{prefix}/metadata")).strip("/"),
            "PRESIGNED_URL_EXPIRY": int(storage_cfg.get("presigned_url_expiry", 3600)),
        }
    )

    has_aws_credentials = all(os.environ.get(key) for key in ["AWS_ACCESS_KEY", "AWS_SECRET_ACCESS_KEY"])
    provider = storage_cfg.get("provider", "auto")
    if provider == "auto":
        provider = "aws-s3" if has_aws_credentials else "local"

    match provider:
        case "local":
            settings_dict["STORAGE_PROVIDER"] = "local"
        case "aws-s3" if has_aws_credentials:
            settings_dict.update(
                {
                    "STORAGE_PROVIDER": "aws-s3",
                    "AWS_REGION": storage_cfg.get("region", "us-east-2"),
                    "S3_BUCKET": os.environ.get("S3_BUCKET", storage_cfg.get("bucket_name", "diplomastudy-files")),
                    "S3_ENDPOINT_URL": storage_cfg.get("endpoint_url") or None,
                    "AWS_ACCESS_KEY": os.environ["AWS_ACCESS_KEY"],
                    "AWS_SECRET_ACCESS_KEY": os.environ["AWS_SECRET_ACCESS_KEY"],
                }
            )
        case "aws-s3":
            raise ValueError(em.format(missing_value="AWS credentials", field="storage.provider", value="aws-s3"))
        case _:
            raise ValueError(f"Unknown storage provider selected: '{provider}'")

    # Load quiz config
    if "quiz" in config:
        settings_dict["DEFAULT_QUESTION_COUNT"] = int(config["quiz"].get("default_question_count", 15))

    return Settings(**settings_dict)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    load_local_env(override=True)
    return load_settings()
