"""Configuration management for the talent back-office.

Loads from YAML config file with environment variable overrides.
Pattern: CONFIG__{SECTION}__{KEY} overrides nested YAML keys.
Example: CONFIG__SYNC__STATUS_UPDATE_RETRIES=0
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


# --- Sections ---


class DatabaseConfig(BaseModel):
    url: str = "sqlite:///data/talent.db"
    echo: bool = False


class AuthConfig(BaseModel):
    jwt_secret: str = "your-secret-key-change-in-production"  # from env: JWT_SECRET_KEY
    algorithm: str = "HS256"
    token_expire_minutes: int = 1440  # 24 hours
    # may run staff mutations: talent sync, migration and review
    sync_roles: list[str] = ["admin", "editor"]


class SyncConfig(BaseModel):
    status_update_retries: int = Field(
        default=2, ge=0, le=10, description="Extra attempts for the synced status write"
    )
    audit_enabled: bool = True
    run_log_enabled: bool = True


class CorsConfig(BaseModel):
    allowed_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]


class ServiceConfig(BaseModel):
    database: DatabaseConfig = DatabaseConfig()
    auth: AuthConfig = AuthConfig()
    sync: SyncConfig = SyncConfig()
    cors: CorsConfig = CorsConfig()


def _apply_env_overrides(config_dict: dict, prefix: str = "CONFIG") -> dict:
    """Apply environment variable overrides to config dict.

    Pattern: CONFIG__SECTION__KEY=value maps to config[section][key] = value
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}__"):
            continue
        parts = key[len(prefix) + 2 :].lower().split("__")
        target = config_dict
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        # Type coercion for common cases
        if value.lower() in ("true", "false"):
            value = value.lower() == "true"
        elif value.isdigit():
            value = int(value)
        target[parts[-1]] = value
    return config_dict


def load_config(
    config_path: Optional[str] = None,
) -> ServiceConfig:
    """Load configuration from YAML file with env overrides.

    Priority: env vars > YAML file > defaults
    """
    config_dict = {}

    # 1. Load YAML if exists
    if config_path is None:
        config_path = os.getenv("CONFIG_PATH", "config/talent-sync.yml")
    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            config_dict = yaml.safe_load(f) or {}

    # 2. Apply env overrides
    config_dict = _apply_env_overrides(config_dict)

    # 3. Dedicated env vars (common deployment pattern)
    database = config_dict.setdefault("database", {})
    if os.getenv("DATABASE_URL"):
        database["url"] = os.environ["DATABASE_URL"]
    auth = config_dict.setdefault("auth", {})
    if os.getenv("JWT_SECRET_KEY"):
        auth["jwt_secret"] = os.environ["JWT_SECRET_KEY"]

    return ServiceConfig(**config_dict)


# Singleton for the service
_config: Optional[ServiceConfig] = None


def get_config() -> ServiceConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(config_path: Optional[str] = None) -> ServiceConfig:
    global _config
    _config = load_config(config_path)
    return _config
