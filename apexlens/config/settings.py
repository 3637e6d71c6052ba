from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Analyzer settings loaded from environment variables (APEXLENS_*)."""

    model_config = SettingsConfigDict(
        env_prefix="APEXLENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Transaction grouping: trailing window after the seed log
    grouping_window_seconds: float = Field(default=10.0, gt=0)

    # Lookahead windows (tokenized lines for exceptions, raw lines for limits)
    exception_lookahead_lines: int = Field(default=20, ge=1)
    limit_lookahead_lines: int = Field(default=20, ge=1)

    # Fast metadata scan windows
    metadata_head_lines: int = Field(default=5000, ge=1)
    metadata_tail_lines: int = Field(default=1000, ge=1)

    # Stack depth: methods called more often than this are loop candidates
    loop_call_threshold: int = Field(default=10, ge=1)

    # Logging
    log_level: str = "INFO"


settings = Settings()
