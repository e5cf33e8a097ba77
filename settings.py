from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    openai_api_key: str

    image_model: str = "dall-e-3"
    client_max_retries: int = 2
    backoff_base_seconds: float = 1.0
    request_timeout_seconds: float = 120.0
    session_dir: Path = Path("./data/sessions")
    default_style: str = "modern-minimal"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MAP_",
        env_file_encoding="utf-8",
    )

    @field_validator("client_max_retries")
    @classmethod
    def retries_must_not_be_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("client_max_retries must be at least 0")
        return v

    @field_validator("backoff_base_seconds")
    @classmethod
    def backoff_must_not_be_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("backoff_base_seconds must be at least 0")
        return v

    @field_validator("request_timeout_seconds")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return v
