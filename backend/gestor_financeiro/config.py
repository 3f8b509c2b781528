"""
Application configuration using Pydantic settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # App
    app_name: str = "Gestor Financeiro"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./data/db.sqlite"
    store_timeout_seconds: float = 10.0

    # AI Provider
    ai_provider: str = "gemini"  # gemini, openai, openrouter, anthropic, ollama
    ai_model: str = "gemini-1.5-flash"
    ai_base_url: Optional[str] = None  # For Ollama: http://localhost:11434
    ai_temperature: float = 0.1
    llm_timeout_seconds: float = 10.0

    # API Keys (optional based on provider)
    gemini_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    openrouter_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None

    # SMS
    sms_sender_number: Optional[str] = None  # Seed value for the persisted allow-list

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    frontend_url: str = "http://localhost:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )


# Global settings instance
settings = Settings()
