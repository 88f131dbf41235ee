"""Configuration for the Mailgun MCP server."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_OPENAPI_PATH = Path(__file__).with_name("openapi.yaml")

_REGION_BASE_URLS = {
    "us": "https://api.mailgun.net",
    "eu": "https://api.eu.mailgun.net",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    mcp_server_name: str = Field(default="mailgun")
    mcp_transport: str = Field(default="stdio")
    mcp_host: str = Field(default="127.0.0.1")
    mcp_port: int = Field(default=8000)

    mailgun_api_key: Optional[str] = Field(default=None)
    mailgun_api_region: str = Field(default="us")
    mailgun_openapi_path: str = Field(default=str(DEFAULT_OPENAPI_PATH))
    mailgun_api_timeout_seconds: float = Field(default=30)
    mailgun_max_retries: int = Field(default=1)

    log_level: str = Field(default="INFO")

    def api_base_url(self) -> str:
        region = (self.mailgun_api_region or "us").strip().lower()
        return _REGION_BASE_URLS.get(region, _REGION_BASE_URLS["us"])


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
