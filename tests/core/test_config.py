"""Configuration — server and client settings from the environment."""

from socialhub.client.config import ClientSettings
from socialhub.config import Settings


def test_postgres_url_converted_for_asyncpg():
    settings = Settings(database_url="postgresql://u:p@host:5432/db")
    assert settings.database_url == "postgresql+asyncpg://u:p@host:5432/db"


def test_sqlite_url_untouched():
    assert Settings(database_url="sqlite+aiosqlite:///x.db").database_url == "sqlite+aiosqlite:///x.db"


def test_client_settings_use_prefix(monkeypatch):
    monkeypatch.setenv("SOCIALHUB_WS_URL", "wss://chat.example/ws")
    monkeypatch.setenv("SOCIALHUB_RECONNECT_INTERVAL_SECONDS", "2.5")

    settings = ClientSettings()

    assert settings.ws_url == "wss://chat.example/ws"
    assert settings.reconnect_interval_seconds == 2.5
    assert settings.base_url == "http://localhost:8000"
