from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Keys
    OPENAI_API_KEY: Optional[str] = ""
    ANTHROPIC_API_KEY: Optional[str] = ""
    GEMINI_API_KEY: Optional[str] = ""
    GROK_API_KEY: Optional[str] = ""
    PERPLEXITY_API_KEY: Optional[str] = ""

    # Application Settings
    APP_NAME: str = "AI Exposure Scoring Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # LLM Provider Configuration
    # Options: "openai", "claude", "gemini", "grok", "perplexity"
    QUERY_EXPANSION_PROVIDER: str = "openai"

    # Model Settings
    EXPANSION_OPENAI_MODEL: str = "gpt-4o-mini"
    EXPANSION_CLAUDE_MODEL: str = "claude-3-5-haiku-20241022"
    EXPANSION_GEMINI_MODEL: str = "gemini-2.5-flash-lite"
    EXPANSION_GROK_MODEL: str = "grok-3-mini"
    EXPANSION_PERPLEXITY_MODEL: str = "sonar"

    EXPANSION_TEMPERATURE: float = 0.7
    EXPANSION_MAX_TOKENS: int = 2000
    LLM_TIMEOUT: float = 60.0

    # Retry Settings (provider calls outside the expander)
    LLM_MAX_RETRIES: int = 3
    LLM_RETRY_BASE_DELAY: float = 1.0  # seconds
    LLM_RETRY_MAX_DELAY: float = 10.0  # seconds

    # Providers used for credit estimation when the caller gives none
    DEFAULT_SCAN_PROVIDERS: list = ["gemini", "openai", "anthropic", "perplexity"]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
