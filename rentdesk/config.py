import os
import re
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file early so env vars are available for YAML interpolation
load_dotenv(Path.cwd() / ".env")

# Pattern to match $VAR_NAME environment variable references
ENV_VAR_PATTERN = re.compile(r"\$([A-Z_][A-Z0-9_]*)")

_config_path_override: Path | None = None


def interpolate_env_vars(value):
    """Recursively replace $VAR_NAME with os.environ values."""
    if isinstance(value, str):

        def replace(match):
            var = match.group(1)
            val = os.environ.get(var)
            if val is None:
                raise ValueError(f"Environment variable ${var} not set")
            return val

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]
    return value


def set_config_path(path: Path | str | None) -> None:
    """Force a specific config file, bypassing RENTDESK_ENV resolution."""
    global _config_path_override
    _config_path_override = Path(path) if path is not None else None


def get_config_path() -> Path:
    """Return the YAML config path: app.yaml, or app.<env>.yaml when RENTDESK_ENV is set."""
    if _config_path_override is not None:
        return _config_path_override

    env = os.environ.get("RENTDESK_ENV", "").strip().lower()
    if env and env != "production":
        return Path.cwd() / f"app.{env}.yaml"
    return Path.cwd() / "app.yaml"


def load_app_config() -> dict:
    """Load and parse the YAML config with environment variable interpolation."""
    config_path = get_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"{config_path.name} not found at {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    return interpolate_env_vars(config)


class SupabaseConfig(BaseModel):
    """Hosted Supabase Storage connection."""

    url: str
    service_key: str
    timeout: float = 30.0
    cache_control: int = 3600


class StorageConfig(BaseModel):
    """Object store configuration."""

    backend: str = "local"
    public_origin: str = "http://localhost:8080"
    local_path: str = "./storage"
    supabase: SupabaseConfig | None = None


class AssetPolicyOverride(BaseModel):
    """Per-entity override of an upload policy's limits."""

    max_size_mb: float | None = None
    allowed_types: list[str] | None = None


class LogfireConfig(BaseModel):
    """Pydantic Logfire observability configuration."""

    enabled: bool = False
    service_name: str = "rentdesk"
    environment: str | None = None
    console: bool = False


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    debug: bool = False

    storage: StorageConfig = StorageConfig()

    # Keyed by entity kind: vehicle, campaign, document
    assets: dict[str, AssetPolicyOverride] = {}

    logfire: LogfireConfig = LogfireConfig()


@lru_cache
def get_settings() -> Settings:
    """Load settings from .env and the YAML config."""
    base_settings = Settings()

    try:
        app_config = load_app_config()
    except FileNotFoundError:
        return base_settings

    if env := app_config.get("environment"):
        os.environ["RENTDESK_ENV"] = str(env)

    updates = {}

    if "debug" in app_config:
        updates["debug"] = bool(app_config["debug"])

    if "storage" in app_config:
        updates["storage"] = StorageConfig(**app_config["storage"])

    if "assets" in app_config:
        updates["assets"] = {
            kind: AssetPolicyOverride(**(override or {}))
            for kind, override in app_config["assets"].items()
        }

    if "logfire" in app_config:
        updates["logfire"] = LogfireConfig(**app_config["logfire"])

    if updates:
        return base_settings.model_copy(update=updates)

    return base_settings


def clear_settings_cache() -> None:
    """Drop the cached settings so the next call reloads them."""
    get_settings.cache_clear()
