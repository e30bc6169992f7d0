"""Configuration settings using Pydantic."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SupabaseSettings(BaseSettings):
    """Supabase configuration."""
    model_config = SettingsConfigDict(env_prefix="SUPABASE_")

    url: str = ""
    key: str = ""
    items_table: str = "exam_items"
    responses_table: str = "responses"

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key)


class StorageSettings(BaseSettings):
    """Storage backend configuration."""
    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    backend: str = "supabase"  # supabase, local
    data_path: str = "./data"


class ServerSettings(BaseSettings):
    """WebSocket server configuration."""
    model_config = SettingsConfigDict(env_prefix="SERVER_")

    host: str = "0.0.0.0"
    port: int = 8765
    health_port: int = 8080


class LogSettings(BaseSettings):
    """Logging configuration."""
    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = "INFO"


class ListingSettings(BaseSettings):
    """Item list view configuration."""
    model_config = SettingsConfigDict(env_prefix="LISTING_")

    page_size: int = 20
    stem_preview_length: int = 100


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    log: LogSettings = Field(default_factory=LogSettings)
    listing: ListingSettings = Field(default_factory=ListingSettings)
