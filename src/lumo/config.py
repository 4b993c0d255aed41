"""
Lumo Configuration.

Centralized configuration management using Pydantic Settings.
Loads configuration from environment variables.
"""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from lumo.exceptions import ConfigurationError

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_LOG_FORMATS = ("standard", "json")


def get_default_db_path() -> str:
    """
    Get the default database location.

    Returns:
        str: ``~/.lumo/lumo.db``, or ``.lumo/lumo.db`` if HOME is not set
    """
    home = os.getenv("HOME")
    if home:
        return str(Path(home) / ".lumo" / "lumo.db")

    # Fallback for development/testing environments without HOME
    return str(Path(".lumo") / "lumo.db")


def get_xdg_state_dir() -> str:
    """
    Get XDG-compliant state directory for Lumo logs.

    Follows XDG Base Directory Specification:
    - Uses $XDG_STATE_HOME/lumo if XDG_STATE_HOME is set
    - Falls back to $HOME/.local/state/lumo if not set
    - Returns relative path ./logs if HOME not available (dev/testing)

    Returns:
        str: Path to state/logs directory
    """
    xdg_state_home = os.getenv("XDG_STATE_HOME")
    if xdg_state_home:
        return str(Path(xdg_state_home) / "lumo" / "logs")

    home = os.getenv("HOME")
    if home:
        return str(Path(home) / ".local" / "state" / "lumo" / "logs")

    return "./logs"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_path: str = ""  # Defaults to ~/.lumo/lumo.db if empty
    database_echo: bool = False

    @property
    def database_file(self) -> Path:
        """Get the SQLite database file path."""
        if self.database_path:
            return Path(self.database_path).expanduser()
        return Path(get_default_db_path())

    @property
    def database_url(self) -> str:
        """Construct database URL from the database path."""
        return f"sqlite:///{self.database_file}"

    # Server (4318 is the standard OTLP/HTTP port)
    server_host: str = "127.0.0.1"
    server_port: int = 4318

    @property
    def server_address(self) -> str:
        return f"{self.server_host}:{self.server_port}"

    # OTLP ingestion
    otel_ingest_max_payload_bytes: int = 10_485_760  # 10MB per request

    # Application
    environment: str = "development"

    # Logging
    log_level: str = "INFO"
    log_dir: str = ""  # XDG-compliant log directory (defaults to XDG state dir if empty)
    log_format: str = "standard"  # standard or json
    log_console_enabled: bool = True
    log_file_enabled: bool = True
    log_max_bytes: int = 10_485_760  # 10MB per log file
    log_backup_count: int = 5

    @property
    def log_directory(self) -> Path:
        """Get the log directory path, using XDG default if not specified."""
        if self.log_dir:
            return Path(self.log_dir).expanduser()
        return Path(get_xdg_state_dir())

    def validate_settings(self) -> None:
        """
        Check settings that pydantic cannot validate on its own.

        Raises:
            ConfigurationError: If a setting is out of range or unknown
        """
        if not 0 < self.server_port < 65536:
            raise ConfigurationError(
                f"server_port must be between 1 and 65535, got {self.server_port}"
            )
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level: {self.log_level}")
        if self.log_format not in VALID_LOG_FORMATS:
            raise ConfigurationError(f"Unknown log format: {self.log_format}")


# Global settings instance
settings = Settings()
