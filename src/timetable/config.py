"""Composer configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class ComposerConfig(BaseSettings):
    """Timetable composer configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Backend REST API (all endpoints live under /api/v1)
    backend_api_url: str = Field(
        default="http://localhost:5000",
        description="Backend base URL, without the /api/v1 suffix",
    )
    access_token: str = Field(
        default="",
        description="Bearer token sent with every API request",
    )

    # HTTP behaviour
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Per-request timeout for the backend API",
    )
    max_retries: int = Field(
        default=3,
        description="Attempts for transient API failures (timeouts, 5xx, 429)",
    )
    retry_wait_seconds: float = Field(
        default=2.0,
        description="Fixed wait between retry attempts",
    )

    # Timetable naming
    school_name: str = Field(
        default="",
        description="School name used as prefix of generated timetable names",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def api_base(self) -> str:
        """Versioned API root, e.g. http://localhost:5000/api/v1."""
        return f"{self.backend_api_url.rstrip('/')}/api/v1"


# Singleton pattern
_config: ComposerConfig | None = None


def get_config() -> ComposerConfig:
    """Get the composer configuration singleton.

    Returns:
        ComposerConfig: Composer configuration instance
    """
    global _config
    if _config is None:
        _config = ComposerConfig()
    return _config
