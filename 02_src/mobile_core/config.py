"""Project-level configuration and path helpers."""

import os
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

EDGE_INTERACT_URL = "https://edge.adobedc.net/ee/v1/interact"
REMOTE_CONFIG_URL_TEMPLATE = "https://assets.adobedtm.com/{app_id}.json"

DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_READ_TIMEOUT = 5.0


PathLike = Union[str, Path]


def resolve_config_path(value: PathLike | None, default: Path) -> Path:
    """Resolve a configuration file path relative to PROJECT_ROOT."""
    if not value:
        return default

    candidate = Path(value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def env_float(name: str, default: float) -> float:
    """Read a float setting from the environment."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
