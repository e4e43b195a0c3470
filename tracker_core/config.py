# =============================================================================
# tracker_core/config.py
# Application Settings (secrets.toml with environment fallback)
# =============================================================================
"""
Settings loader for the time tracker.

Credentials are read from a TOML secrets file first:

    [supabase]
    url = "https://your-project.supabase.co"
    key = "your-anon-key"

    [app]
    admin_email = "admin@example.com"
    log_level = "INFO"
    log_to_file = false

and fall back to environment variables (SUPABASE_URL, SUPABASE_KEY,
ADMIN_EMAIL, TIME_TRACKER_DATA_DIR, TIME_TRACKER_LOG_LEVEL).
"""

from __future__ import annotations
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from tracker_core.errors import ConfigurationError
from tracker_core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SECRETS_PATH = Path("secrets.toml")
DEFAULT_DATA_DIR = Path(__file__).parent.parent / "local_data"


@dataclass
class Settings:
    """Runtime configuration for the tracker."""
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    admin_email: Optional[str] = None
    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)
    log_level: str = "INFO"
    log_to_file: bool = False
    monitor_connection: bool = False

    @property
    def supabase_configured(self) -> bool:
        """Both URL and key are present."""
        return bool(self.supabase_url and self.supabase_key)

    @property
    def cache_db_path(self) -> Path:
        """SQLite file backing the local cache."""
        return Path(self.data_dir) / "time-tracker.db"

    @property
    def log_dir(self) -> Optional[Path]:
        """Directory for log files, or None when file logging is off."""
        return Path(self.data_dir) / "logs" if self.log_to_file else None


def load_secrets_toml(secrets_path: Path) -> Dict[str, Any]:
    """
    Load a secrets.toml file.

    Returns:
        Parsed TOML document, or an empty dict when the file does not exist
    """
    if not secrets_path.exists():
        return {}

    try:
        with open(secrets_path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(
            f"Could not read secrets file: {e}",
            source=str(secrets_path),
        ) from e


def load_settings(secrets_path: Optional[Path] = None) -> Settings:
    """
    Build Settings from secrets.toml and the environment.

    Args:
        secrets_path: Path to the TOML secrets file (default: ./secrets.toml,
            or $TIME_TRACKER_SECRETS when set)

    Returns:
        Settings instance
    """
    if secrets_path is None:
        secrets_path = Path(os.getenv("TIME_TRACKER_SECRETS", DEFAULT_SECRETS_PATH))

    secrets = load_secrets_toml(Path(secrets_path))
    supabase = secrets.get("supabase", {})
    app = secrets.get("app", {})

    url = supabase.get("url") or os.getenv("SUPABASE_URL")
    key = supabase.get("key") or os.getenv("SUPABASE_KEY")

    if url and not key:
        raise ConfigurationError(
            "Supabase URL is set but the API key is missing",
            config_key="supabase.key",
        )
    if key and not url:
        raise ConfigurationError(
            "Supabase API key is set but the URL is missing",
            config_key="supabase.url",
        )

    data_dir = app.get("data_dir") or os.getenv("TIME_TRACKER_DATA_DIR")

    settings = Settings(
        supabase_url=url,
        supabase_key=key,
        admin_email=app.get("admin_email") or os.getenv("ADMIN_EMAIL"),
        data_dir=Path(data_dir) if data_dir else DEFAULT_DATA_DIR,
        log_level=app.get("log_level") or os.getenv("TIME_TRACKER_LOG_LEVEL", "INFO"),
        log_to_file=bool(app.get("log_to_file", False)),
        monitor_connection=bool(app.get("monitor_connection", False)),
    )

    if not settings.supabase_configured:
        logger.info("Supabase credentials not configured; running in local-only mode")

    return settings
