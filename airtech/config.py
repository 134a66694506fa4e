"""Application configuration loaded from config.yaml + environment variables."""

from __future__ import annotations

import os

import yaml
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml() -> dict:
    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH) as f:
            return yaml.safe_load(f) or {}
    return {}


_yaml = _load_yaml()


class StorageConfig(BaseSettings):
    data_file: str = "data/database.json"
    # Empty -> JSON file backend. Otherwise a SQLAlchemy async URL.
    database_url: str = ""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")


class UploadConfig(BaseSettings):
    base_dir: str = "data/uploads"
    thumbnail_size: tuple[int, int] = (320, 240)

    model_config = SettingsConfigDict(env_prefix="UPLOADS_")


class AuthConfig(BaseSettings):
    session_max_age_days: int = 7
    admin_username: str = "admin"
    admin_password_hash: str = ""  # bcrypt; empty disables admin login
    admin_display_name: str = "Administrator"

    model_config = SettingsConfigDict(env_prefix="AUTH_")


class TripletexConfig(BaseSettings):
    base_url: str = ""
    consumer_token: str = ""
    employee_token: str = ""
    timeout: float = 15.0

    model_config = SettingsConfigDict(env_prefix="TRIPLETEX_")


class Settings(BaseSettings):
    log_level: str = "INFO"
    storage: StorageConfig = Field(default_factory=StorageConfig)
    uploads: UploadConfig = Field(default_factory=UploadConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    tripletex: TripletexConfig = Field(default_factory=TripletexConfig)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def _yaml_section(cls: type[BaseSettings], data: dict | None) -> dict:
    """YAML values for one section, minus keys an environment variable already sets."""
    prefix = cls.model_config.get("env_prefix", "")
    env_names = {name.upper() for name in os.environ}
    return {
        key: value for key, value in (data or {}).items()
        if f"{prefix}{key}".upper() not in env_names
    }


def get_settings() -> Settings:
    """Build Settings from YAML defaults; environment variables win over YAML."""
    y = _yaml
    storage = StorageConfig(**_yaml_section(StorageConfig, y.get("storage")))
    uploads = UploadConfig(**_yaml_section(UploadConfig, y.get("uploads")))
    auth = AuthConfig(**_yaml_section(AuthConfig, y.get("auth")))
    tripletex = TripletexConfig(**_yaml_section(TripletexConfig, y.get("tripletex")))
    extra = _yaml_section(Settings, {"log_level": y["log_level"]} if "log_level" in y else {})
    return Settings(
        **extra,
        storage=storage,
        uploads=uploads,
        auth=auth,
        tripletex=tripletex,
    )
