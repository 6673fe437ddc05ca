"""Runtime configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
import os
import tempfile


@dataclass(frozen=True)
class AppSettings:
    """Environment-backed settings for the capture pipeline and web app."""

    stream_url: str | None
    database_url: str
    storage_backend: str
    public_base_url: str | None
    firebase_credentials_path: str | None
    firebase_project_id: str | None
    firebase_storage_bucket: str | None
    ffmpeg_bin: str
    temp_dir: str
    default_capture_seconds: int
    capture_timeout_grace_seconds: float
    thumbnail_timeout_seconds: float
    store_timeout_seconds: float
    storage_preflight: bool
    default_page_size: int


DEFAULT_DATABASE_URL = "postgresql+psycopg://doorcam:doorcam@pg:5432/doorcam"
STORAGE_BACKENDS = ("sql", "firebase")


def _env_str(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise RuntimeError(f"Invalid integer for {name}: {value}") from exc


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise RuntimeError(f"Invalid float for {name}: {value}") from exc


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off", ""}:
        return False
    raise RuntimeError(f"Invalid boolean for {name}: {value}")


def load_settings() -> AppSettings:
    """Load all app settings from the environment."""
    backend = (os.getenv("STORAGE_BACKEND") or "sql").strip().lower()
    if backend not in STORAGE_BACKENDS:
        raise RuntimeError(
            f"Invalid STORAGE_BACKEND: {backend} (expected one of: {', '.join(STORAGE_BACKENDS)})"
        )
    return AppSettings(
        stream_url=_env_str("MJPEG_STREAM_URL"),
        database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
        storage_backend=backend,
        public_base_url=_env_str("PUBLIC_BASE_URL"),
        firebase_credentials_path=_env_str("FIREBASE_CREDENTIALS_PATH"),
        firebase_project_id=_env_str("FIREBASE_PROJECT_ID"),
        firebase_storage_bucket=_env_str("FIREBASE_STORAGE_BUCKET"),
        ffmpeg_bin=os.getenv("FFMPEG_BIN", "ffmpeg"),
        temp_dir=_env_str("CAPTURE_TEMP_DIR") or tempfile.gettempdir(),
        default_capture_seconds=_env_int("DEFAULT_CAPTURE_SECONDS", 15),
        capture_timeout_grace_seconds=_env_float("CAPTURE_TIMEOUT_GRACE_SECONDS", 30.0),
        thumbnail_timeout_seconds=_env_float("THUMBNAIL_TIMEOUT_SECONDS", 30.0),
        store_timeout_seconds=_env_float("STORE_TIMEOUT_SECONDS", 30.0),
        storage_preflight=_env_bool("STORAGE_PREFLIGHT", False),
        default_page_size=_env_int("DEFAULT_PAGE_SIZE", 50),
    )
