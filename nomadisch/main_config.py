"""Nomadisch configuration with environment variables and K8s secrets support."""
import os
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# LOCAL DEBUG OVERRIDE - Change this to test other environments locally
# =============================================================================
LOCAL_ENV_OVERRIDE: "Environment | None" = None  # e.g., Environment.PROD


# =============================================================================
# K8s Secrets Config
# =============================================================================
# Secret path: /etc/{SECRETS_FOLDER_NAME}/{PROJECT_KEY}_{secret_name}
# e.g., /etc/secrets/nomadisch_airtable-token
SECRETS_FOLDER_NAME: str = os.getenv("SECRETS_FOLDER_NAME", "secrets")
PROJECT_KEY: str = os.getenv("PROJECT_KEY", "nomadisch")
SECRETS_BASE_PATH: str = f"/etc/{SECRETS_FOLDER_NAME}" if SECRETS_FOLDER_NAME else ""

# nomadisch/env_files/.env_base + .env_{ENV}; missing files are skipped
_ENV_FILES_DIR = Path(__file__).parent / "env_files"


class Environment(str, Enum):
    LOCAL = "local"
    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


def get_env_files(override: Environment | None = None) -> tuple[str, ...]:
    """Get .env files to load, base first. Override only works when ENV=local."""
    env = os.getenv("ENV", Environment.LOCAL.value)
    if env == Environment.LOCAL.value and override:
        env = override.value
    return str(_ENV_FILES_DIR / ".env_base"), str(_ENV_FILES_DIR / f".env_{env}")


def read_secret_from_file(secret_name: str, base_path: str | None) -> str | None:
    """Read secret from K8s mounted file."""
    if not base_path:
        return None
    secret_path = Path(base_path) / secret_name
    if not secret_path.is_file():
        return None
    try:
        return secret_path.read_text().strip() or None
    except OSError:
        return None


def get_k8s_secret_name(secret_name: str) -> str:
    """Get K8s secret filename: {PROJECT_KEY}_{secret_name}"""
    return f"{PROJECT_KEY}_{secret_name}"


def get_secret(env_var: str, secret_file_name: str | None = None, default: str | None = None) -> str | None:
    """Get secret: K8s file > env var > {env_var}_FILE > default."""
    if secret_file_name and SECRETS_BASE_PATH:
        k8s_name = get_k8s_secret_name(secret_file_name)
        if value := read_secret_from_file(k8s_name, SECRETS_BASE_PATH):
            return value
    if value := os.getenv(env_var):
        return value
    if file_path := os.getenv(f"{env_var}_FILE"):
        if value := read_secret_from_file(Path(file_path).name, str(Path(file_path).parent)):
            return value
    return default


ENV_FILES = get_env_files(LOCAL_ENV_OVERRIDE)


# =============================================================================
# Config Classes
# =============================================================================

class AirtableConfig(BaseSettings):
    """Airtable base holding the events and site settings tables.

    Token and base id are optional at load time so the app can boot without
    them; the store client raises ConfigurationError on first use instead.
    """
    model_config = SettingsConfigDict(env_file=ENV_FILES, env_prefix="AIRTABLE_", extra="ignore")

    token: SecretStr | None = Field(default=None)
    base_id: str | None = Field(default=None)
    events_table: str = "Events"
    settings_table: str = "Globals"
    api_url: str = "https://api.airtable.com/v0"

    @model_validator(mode="before")
    @classmethod
    def _load_secrets(cls, data: dict[str, Any]) -> dict[str, Any]:
        if not data.get("token"):
            data["token"] = get_secret("AIRTABLE_TOKEN", "airtable-token")
        return data

    @field_validator("events_table", "settings_table")
    @classmethod
    def _table_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("table name cannot be blank")
        return v


class AdminConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILES, env_prefix="ADMIN_", extra="ignore")

    password: SecretStr | None = Field(default=None)

    @model_validator(mode="before")
    @classmethod
    def _load_secrets(cls, data: dict[str, Any]) -> dict[str, Any]:
        if not data.get("password"):
            data["password"] = get_secret("ADMIN_PASSWORD", "admin-password")
        return data


class CloudinaryConfig(BaseSettings):
    """Unsigned upload settings. Neither value is secret."""
    model_config = SettingsConfigDict(env_file=ENV_FILES, env_prefix="CLOUDINARY_", extra="ignore")

    cloud_name: str | None = None
    upload_preset: str | None = None
    folder: str = "nomadisch/events"
    api_url: str = "https://api.cloudinary.com/v1_1"


class HttpClientConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILES, env_prefix="HTTP_", extra="ignore")

    timeout: float = 10.0
    connect_timeout: float = 5.0
    max_connections: int = 20
    http2: bool = True


class SiteConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILES, env_prefix="SITE_", extra="ignore")

    cache_seconds: int = Field(default=60, ge=0)


class CORSConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILES, env_prefix="CORS_", extra="ignore")

    allow_origins: str = "http://localhost:5173,http://localhost:3000"
    allow_credentials: bool = True
    allow_methods: str = "*"
    allow_headers: str = "*"

    @property
    def origins_list(self) -> list[str]:
        return [o.strip() for o in self.allow_origins.split(",")]

    @property
    def methods_list(self) -> list[str]:
        return ["*"] if self.allow_methods == "*" else [m.strip() for m in self.allow_methods.split(",")]

    @property
    def headers_list(self) -> list[str]:
        return ["*"] if self.allow_headers == "*" else [h.strip() for h in self.allow_headers.split(",")]


class LoggingConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILES, env_prefix="LOG_", extra="ignore")

    level: str = "INFO"
    format: str = "console"  # "console" or "json"
    level_httpx: str = "WARNING"
    level_uvicorn_access: str = "INFO"


class FastAPIConfig(BaseSettings):
    """FastAPI application configuration."""
    model_config = SettingsConfigDict(env_file=ENV_FILES, env_prefix="FASTAPI_", extra="ignore")

    title: str = "Nomadisch Labs API"
    description: str = "Events, site settings and admin actions for Nomadisch Labs"
    version: str = "0.1.0"
    docs_url: str | None = "/docs"
    redoc_url: str | None = "/redoc"
    openapi_url: str | None = "/openapi.json"
    debug: bool = False

    @field_validator("docs_url", "redoc_url", "openapi_url")
    @classmethod
    def _disable_docs_in_prod(cls, v: str | None) -> str | None:
        # Docs URLs can be disabled by setting to empty string in env
        return v if v else None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILES, extra="ignore")

    env: Environment = Field(default=Environment.LOCAL)
    app_name: str = Field(default="Nomadisch Labs API")
    debug: bool = Field(default=False)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    reload: bool = Field(default=False)

    @field_validator("debug", "reload")
    @classmethod
    def _no_debug_in_prod(cls, v: bool, info) -> bool:
        if info.data.get("env") == Environment.PROD and v:
            raise ValueError(f"{info.field_name} cannot be True in production")
        return v

    @property
    def is_production(self) -> bool:
        return self.env == Environment.PROD

    @property
    def is_local(self) -> bool:
        return self.env == Environment.LOCAL


# =============================================================================
# Lazy Loaders (cached)
# =============================================================================

@lru_cache
def get_settings() -> Settings:
    return Settings()

@lru_cache
def get_airtable_config() -> AirtableConfig:
    return AirtableConfig()

@lru_cache
def get_admin_config() -> AdminConfig:
    return AdminConfig()

@lru_cache
def get_cloudinary_config() -> CloudinaryConfig:
    return CloudinaryConfig()

@lru_cache
def get_http_client_config() -> HttpClientConfig:
    return HttpClientConfig()

@lru_cache
def get_site_config() -> SiteConfig:
    return SiteConfig()

@lru_cache
def get_cors_config() -> CORSConfig:
    return CORSConfig()

@lru_cache
def get_logging_config() -> LoggingConfig:
    return LoggingConfig()

@lru_cache
def get_fastapi_config() -> FastAPIConfig:
    return FastAPIConfig()


# =============================================================================
# Global Instances (core configs only)
# =============================================================================

settings = get_settings()
cors_config = get_cors_config()
logging_config = get_logging_config()
fastapi_config = get_fastapi_config()
