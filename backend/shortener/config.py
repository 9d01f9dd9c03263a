"""
Shortener Edge — Application Configuration
============================================

What:  Environment-driven settings loaded with Pydantic Settings.
How:   Values come from environment variables (or a .env file), are validated
       once at import time and exposed through the `settings` singleton.
       `create_app()` also accepts an explicit Settings instance for tests.

Environment variables:
    SERVER_ADDRESS  host:port the ASGI server binds       (localhost:8080)
    BASE_URL        prefix of every produced short URL    (http://localhost:8080)
    LOG_LEVEL       DEBUG, INFO, WARNING, ERROR, CRITICAL (INFO)
    DATABASE_DSN    connection string probed by GET /ping (empty)
"""

from typing import Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The compression threshold and content-type allow-list are constants of
    the compression middleware, not settings.
    """

    # ── Server ────────────────────────────────────────────────────────────
    server_address: str = Field(default="localhost:8080")

    # Short URLs are built as f"{base_url}/{code}"
    base_url: str = Field(default="http://localhost:8080")

    # ── Logging ───────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO")

    # ── Database ──────────────────────────────────────────────────────────
    # Used verbatim (after driver normalisation) by the health probe only.
    # Accepts postgres://, postgresql:// or any SQLAlchemy async URL.
    database_dsn: str = Field(
        default="",
        description="Connection string probed by the health check",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("base_url")
    @classmethod
    def strip_base_url(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def server_host(self) -> str:
        return self._split_address()[0]

    @property
    def server_port(self) -> int:
        return self._split_address()[1]

    def _split_address(self) -> Tuple[str, int]:
        """Splits SERVER_ADDRESS; an empty host (":8080") binds every interface."""
        host, _, port = self.server_address.rpartition(":")
        if not port.isdigit():
            raise ValueError(f"Invalid server_address '{self.server_address}': missing port")
        return host or "0.0.0.0", int(port)


settings = Settings()
