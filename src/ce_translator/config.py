"""Runtime configuration for CE Translator."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="CE_TRANSLATOR_", env_file=".env", extra="ignore")

    app_name: str = "ce-translator"
    log_level: str = "INFO"
    source_language: str = "en"
    target_language: str = "zh-Hans"
    settle_delay_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="Pause after capture ends before the transcript is committed for translation.",
    )
    muted: bool = False
    recognition_grace_seconds: float = Field(
        default=5.0,
        ge=0.0,
        description="How long a committed capture waits for the final transcript before giving up.",
    )
    max_capture_seconds: float = Field(default=30.0, gt=0.0, description="Longest audio a single capture records.")
    partial_interval_seconds: float | None = Field(
        default=2.0,
        description="Seconds of new audio between partial transcriptions; unset disables partials.",
    )
    speech_rate: int | None = None
    speech_volume: float | None = None
    argos_auto_install: bool = Field(
        default=False,
        description="Download missing Argos Translate packages when a locale pair is first requested.",
    )
    session_ready_timeout_seconds: float = 30.0


settings = Settings()
