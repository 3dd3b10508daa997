"""Centralized settings for restlinks via Pydantic BaseSettings.

All configuration is read from environment variables with the RESTLINKS_
prefix, falling back to the defaults defined here. Set values in a .env file or
export them in the shell before starting the server.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Environment variable names are formed by uppercasing the field name and
    prepending the RESTLINKS_ prefix.  Example: RESTLINKS_PORT overrides port.
    """

    # Listening address for `restlinks serve`
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "info"

    # FastAPI application title (shown in the OpenAPI document)
    title: str = "restlinks"

    # Scheme prepended to the request host when links are made absolute
    url_scheme: str = "http"

    model_config = SettingsConfigDict(
        env_prefix="RESTLINKS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Module-level singleton: import this throughout the codebase
settings = Settings()
