from pathlib import Path

from pydantic import BaseModel, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


def choose_env_file() -> str:
    return ".env.local" if Path(".env.local").exists() else ".env"


class ProviderConfig(BaseModel):
    """Explicit provider options handed to each service at construction."""

    provider_api_key: SecretStr
    chat_model: str
    vision_model: str
    embed_model: str
    base_url: str
    similarity_threshold: float = 0.7
    result_cap: int = 10
    site_url: str = "http://localhost:3000"
    app_title: str = "AI Knowledge Vault"
    summary_language: str = "Traditional Chinese"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=choose_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # tolerate unrelated env vars
    )

    # Postgres (item store, pgvector enabled)
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DATABASE: str = "postgres"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Our own API Key
    VAULT_API_KEY: str = ""

    # OpenRouter (OpenAI-compatible gateway)
    OPENROUTER_API_KEY: str = ""
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENROUTER_CHAT_MODEL: str = "openai/gpt-4o-mini"
    OPENROUTER_VISION_MODEL: str = "openai/gpt-4o"
    OPENROUTER_EMBED_MODEL: str = "openai/text-embedding-3-small"
    SITE_URL: str = "http://localhost:3000"
    APP_TITLE: str = "AI Knowledge Vault"
    SUMMARY_LANGUAGE: str = "Traditional Chinese"

    # Search
    SIMILARITY_THRESHOLD: float = 0.7
    RESULT_CAP: int = 10

    # Link preview
    LINK_PREVIEW_API_KEY: str = ""
    LINK_PREVIEW_URL: str = "https://api.linkpreview.net/"

    @property
    def postgres_url(self) -> str:
        return f"postgresql://{self.POSTGRES_USERNAME}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DATABASE}"

    def provider_config(self) -> ProviderConfig:
        return ProviderConfig(
            provider_api_key=self.OPENROUTER_API_KEY,
            chat_model=self.OPENROUTER_CHAT_MODEL,
            vision_model=self.OPENROUTER_VISION_MODEL,
            embed_model=self.OPENROUTER_EMBED_MODEL,
            base_url=self.OPENROUTER_BASE_URL,
            similarity_threshold=self.SIMILARITY_THRESHOLD,
            result_cap=self.RESULT_CAP,
            site_url=self.SITE_URL,
            app_title=self.APP_TITLE,
            summary_language=self.SUMMARY_LANGUAGE,
        )


# Global settings instance (evaluated at import, but reads env on construction)
settings = Settings()
