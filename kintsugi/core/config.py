from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    app_name: str = "Kintsugi Smart Reflection API"
    # If ALLOWED_ORIGINS env is provided, it should be a JSON array.
    # Example: ["http://localhost:3000", "http://127.0.0.1:3000"]
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    # Smart (LLM) features are opt-in
    enable_smart_features: bool = False
    llm_provider: str = "anthropic"  # anthropic | openai
    llm_model: str = "claude-sonnet-4-20250514"
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    llm_max_tokens: int = 1024
    llm_temperature: float = 0.7
    llm_timeout_sec: float = 30.0

    # Daily spend cap in USD
    llm_daily_budget: float = 5.0

    @property
    def llm_api_key(self) -> Optional[str]:
        return self.anthropic_api_key or self.openai_api_key


settings = Settings()
