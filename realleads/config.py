from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from realleads.common.bootstrap_env import bootstrap_env


class Settings(BaseSettings):
    OPENAI_API_KEY: str = ""
    ORCHESTRATOR_MODEL: str = "gpt-4o"
    ORCHESTRATOR_TEMPERATURE: float = 0.3
    DRAFT_TEMPERATURE: float = 0.7
    TRANSCRIPTION_MODEL: str = "whisper-1"
    LLM_TIMEOUT_SECONDS: float = 60.0

    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    bootstrap_env()
    return Settings()
