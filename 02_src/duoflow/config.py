"""Project-level configuration and path helpers."""

import os
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_DB_PATH = ":memory:"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DEFAULT_ANALYSIS_MODEL = "claude-3-5-haiku-20241022"
DEFAULT_REFACTOR_MODEL = "claude-3-5-sonnet-20241022"
DEFAULT_LLM_TIMEOUT_SECONDS = 60.0
DEFAULT_MAX_TRIGGERS_PER_RUN = 64


PathLike = Union[str, Path]


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path (in-memory when unset)."""
    if not env_value:
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    resolved = candidate if candidate.is_absolute() else PROJECT_ROOT / candidate
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return resolved


def env_float(name: str, default: float) -> float:
    """Read a float from the environment, falling back on missing/invalid values."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def resolve_max_triggers(env_value: str | None = None) -> int | None:
    """Resolve MAX_TRIGGERS_PER_RUN; 0 or negative means unbounded."""
    if env_value is None:
        env_value = os.getenv("MAX_TRIGGERS_PER_RUN")
    if not env_value:
        return DEFAULT_MAX_TRIGGERS_PER_RUN
    try:
        value = int(env_value)
    except ValueError:
        return DEFAULT_MAX_TRIGGERS_PER_RUN
    return value if value > 0 else None
