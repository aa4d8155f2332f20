from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Manages application configuration using environment variables.

    Pydantic's BaseSettings will automatically load variables from a .env file
    or from the environment. See Pydantic documentation for more details.
    """

    # Database connection settings
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "scholar"

    # Logging configuration
    log_level: str = "INFO"

    # SerpAPI (Google Scholar engine) settings
    serpapi_api_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("SCHOLAR_SERPAPI_API_KEY", "SERP_API_KEY"),
    )
    serpapi_base_url: str = "https://serpapi.com/search.json"
    request_timeout: float = 30.0
    results_per_page: int = 10

    # Pipeline behaviour
    max_saves_per_author: int = 3
    author_delay_seconds: float = 2.0

    model_config = SettingsConfigDict(
        env_prefix="SCHOLAR_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )


# Create a single, reusable instance of the settings
settings = Settings()
