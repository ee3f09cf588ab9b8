"""Client Configuration — where the client layer finds the server.

Design Decisions:
    - Same pydantic-settings mechanism as the server, with a SOCIALHUB_ prefix so
      client and server settings can share one .env without colliding
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Client settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="SOCIALHUB_", case_sensitive=False, extra="ignore",
    )

    base_url: str = "http://localhost:8000"
    ws_url: str = "ws://localhost:8000/ws"
    reconnect_interval_seconds: float = 5.0
    request_timeout_seconds: float = 10.0
