"""Configuration management using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal


class Settings(BaseSettings):
    """Client settings."""

    model_config = SettingsConfigDict(
        env_prefix="QBITTORRENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # WebUI connection
    url: str = "http://localhost:8080"
    username: str = "admin"
    password: str = ""

    # Transport
    timeout: float = 30.0
    connect_timeout: float = 10.0
    verify_ssl: bool = True
    user_agent: str = "qbitclient/1.0.0"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


settings = Settings()
