from __future__ import annotations

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Job Tracker"
    app_env: str = "development"
    app_host: str = "127.0.0.1"
    app_port: int = 8787
    log_level: str = "INFO"

    database_url: str = "sqlite:///./jobtracker.db"

    admin_emails: str = "admin@jobtracker.com,admin2@jobtracker.com"
    session_ttl_min: int = 720
    min_password_length: int = 6
    cors_origins: str = "http://127.0.0.1:8787"

    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4"
    openai_timeout_sec: int = 60

    resume_temperature: float = 0.7
    resume_max_tokens: int = 200
    job_description_temperature: float = 0.7
    job_description_max_tokens: int = 200
    insights_temperature: float = 0.8
    insights_max_tokens: int = 250
    interview_temperature: float = 0.7
    interview_max_tokens: int = 200
    chat_temperature: float = 0.8
    chat_max_tokens: int = 100

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def admin_email_set(self) -> frozenset[str]:
        return frozenset(
            email.strip().lower() for email in self.admin_emails.split(",") if email.strip()
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
