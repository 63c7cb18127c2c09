"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./vema.db"

    # Auth provider (Identity Toolkit REST API)
    auth_api_base: str = "https://identitytoolkit.googleapis.com/v1"
    auth_api_key: str = ""

    # Service
    service_name: str = "vema-gateway"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0


settings = Settings()
