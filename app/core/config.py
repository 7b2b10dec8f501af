from typing import List, Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = "Content Moderation Gateway"
    version: str = "1.0.0"

    # Upstream vision/language model
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    openai_temperature: float = 0.1
    openai_max_tokens: int = 800
    openai_timeout: Optional[float] = None  # None keeps the SDK default

    # Engagement analysis (comments/stories)
    analysis_model: str = "gpt-4o-mini"
    analysis_temperature: float = 0.3
    analysis_max_tokens: int = 500

    # Hosts allowed to call /moderate without an Authorization header
    trusted_local_hosts: List[str] = ["localhost:54321"]

    log_level: str = "INFO"
    log_file: Optional[str] = None

    class Config:
        env_file = ".env"

settings = Settings()

def get_settings() -> Settings:
    """FastAPI dependency returning the process-wide settings."""
    return settings
