"""Configuration management with Pydantic Settings + optional YAML."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from receipt_relay.utils.platform import get_config_dir


class ServerConfig(BaseModel):
    bind: str = "0.0.0.0"
    port: int = 3000
    client_max_size: int = 10 * 1024 * 1024


class DeliveryConfig(BaseModel):
    timeout_ms: int = 8000
    # Bound on the close handshake after a successful send
    close_timeout_ms: int = 1000
    origin_client: str = "web"


class RendererConfig(BaseModel):
    backend: Literal["browser", "svg"] = "browser"
    image_type: Literal["png", "jpeg"] = "png"
    jpeg_quality: int = 90
    browser: str = "chromium"
    headless: bool = True
    default_timeout: int = 30000  # ms
    # Receipt fields are interpolated verbatim unless this is set
    escape_html: bool = False


class UploadConfig(BaseModel):
    enabled: bool = False
    url: str = ""
    token: str = ""
    timeout: float = 30.0


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RELAY_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)
    renderer: RendererConfig = Field(default_factory=RendererConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    log_level: str = "INFO"
    log_json: bool = False


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from env vars, optionally overlaying a YAML config."""
    yaml_data: dict[str, Any] = {}

    # Determine config file path
    if config_path is None:
        config_path = os.environ.get("RELAY_CONFIG")
    if config_path is None:
        default = get_config_dir() / "config.yaml"
        if default.exists():
            config_path = default

    # Load YAML if found
    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                yaml_data = yaml.safe_load(f) or {}

    # Init kwargs outrank env vars, so keys set in YAML win over RELAY_* for
    # the same section
    return Settings(**yaml_data)
