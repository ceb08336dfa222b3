from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


PACKAGE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = PACKAGE_DIR / "templates"
MIGRATIONS_DIR = PACKAGE_DIR / "migrations"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./data/diary.db"
    anthropic_api_key: str = ""

    classify_model: str = "claude-sonnet-4-5-20250929"
    analysis_model: str = "claude-sonnet-4-5-20250929"

    # Anthropic API timeout settings (seconds)
    anthropic_timeout: int = 180  # web search lookups can be slow
    anthropic_connect_timeout: int = 10

    llm_temperature: float = 0.3
    llm_max_tokens: int = 4096
    web_search_max_uses: int = 3

    # Calendar used for grouping entries and for naive custom times
    diary_timezone: str = "UTC"

    log_level: str = "INFO"


settings = Settings()
