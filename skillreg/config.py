from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SKILLREG_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    guidance_dir: str = "guidance"
    skills_subdir: str = "skills"
    instructions_subdir: str = "instructions"

    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    sentry_dsn: str = ""

    environment: str = "development"
    allowed_origins: str = ""


settings = Settings()
