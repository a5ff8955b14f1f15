from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = True

    # Application
    app_name: str = "TinyLink"
    app_version: str = "1.0.0"

    # Server
    host: str = "127.0.0.1"
    port: int = 4000
    base_url: str = "http://localhost:4000"

    # Link storage
    storage_backend: str = "sqlalchemy"  # Options: "sqlalchemy", "redis", "memory"
    database_url: str = "sqlite:///./tinylink.db"
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "tinylink"

    # Code generation
    code_length: int = 6  # Length of auto-generated codes (custom codes may be 6-8)
    max_code_attempts: int = 20

    # Logging
    log_level: str = "INFO"
    log_file: str = ""
    log_json: bool = False

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
