"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the TagValidator engine, REST API and MCP server.

    Values are read from environment variables and from a ``.env`` file
    in the working directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Shared
    log_level: str = "INFO"

    # Engine
    max_errors: int = 500
    validation_timeout_seconds: float = 10.0
    progress_fraction: float = 0.05  # progress callback every ~5% of tokens
    max_document_chars: int = 5_000_000

    # REST API
    api_server_host: str = "localhost"
    api_server_port: int = 8000
    port: int | None = None  # Cloud Run injects PORT; takes precedence over api_server_port

    @property
    def effective_port(self) -> int:
        """Return the port to listen on (Cloud Run PORT takes precedence)."""
        return self.port if self.port is not None else self.api_server_port

    # Background jobs
    job_ttl_seconds: int = 900  # 15 min inactivity
    job_cleanup_interval: int = 60  # seconds between cleanup sweeps
    job_workers: int = 4
    disable_job_list: bool = False  # hide GET /jobs endpoint

    # MCP
    mcp_transport: str = "stdio"
    mcp_server_host: str = "localhost"
    mcp_server_port: int = 9000
