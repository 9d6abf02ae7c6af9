"""Application configuration."""

import json
import os
import ssl
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

CLI_CONFIG_FILE = "config.json"


class Settings(BaseSettings):
    """CLI settings loaded from environment variables."""

    api_url: str = "https://api.ionicjs.com"
    token: str | None = None
    config_directory: Path = Path.home() / ".ionic"
    http_proxy: str | None = None
    ssl_cafile: str | None = None
    ssl_verify: bool = True
    http_timeout: float | None = None
    sourcemap_directory: str = ".sourcemaps"
    build_command: str = "npm run ionic:build -- --prod"
    max_concurrency: int = 8
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="IONIC_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def http_config(self) -> dict[str, object]:
        """Return keyword arguments shared by every httpx client."""
        verify: ssl.SSLContext | bool = self.ssl_verify
        if self.ssl_verify and self.ssl_cafile:
            verify = ssl.create_default_context(cafile=self.ssl_cafile)
        return {
            "proxy": self.http_proxy,
            "verify": verify,
            "timeout": self.http_timeout,
        }

    def resolve_token(self) -> str | None:
        """Return the session token from settings or the CLI user config."""
        if self.token:
            return self.token
        return load_user_token(self.config_directory)


def load_user_token(config_directory: Path) -> str | None:
    """Read the logged-in user token from the CLI config file."""
    config_file = config_directory / CLI_CONFIG_FILE
    if not config_file.is_file():
        return None
    try:
        payload = json.loads(config_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return None
    tokens = payload.get("tokens") if isinstance(payload, dict) else None
    if not isinstance(tokens, dict):
        return None
    token = tokens.get("user")
    return token or None
