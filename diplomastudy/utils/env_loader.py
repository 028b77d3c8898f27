from pathlib import Path
from typing import Any, Optional

import tomli
from dotenv import load_dotenv

CONFIG_FILE = "diplomastudy.toml"


def _secret_manager_from_toml(toml_path: Optional[Path] = None) -> Optional[str]:
    """Peek at diplomastudy.toml for the secret_manager setting."""
    toml_path = toml_path or Path(CONFIG_FILE)
    if not toml_path.exists():
        return None
    try:
        with toml_path.open("rb") as f:
            data = tomli.load(f)
        return data.get("service", {}).get("secret_manager")
    except (OSError, tomli.TOMLDecodeError):
        return None


def should_use_dotenv(toml_path: Optional[Path] = None) -> bool:
    """Return True when local .env files should be loaded."""
    toml_value = _secret_manager_from_toml(toml_path)
    if toml_value:
        return toml_value.lower() == "env"

    return True


def load_local_env(*args: Any, **kwargs: Any) -> None:
    """
    Load a local .env file if the secret manager is set to 'env'.
    Accepts the same arguments as python-dotenv's load_dotenv.
    """
    if should_use_dotenv():
        load_dotenv(*args, **kwargs)
