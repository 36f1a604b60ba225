"""
Application settings (Pydantic Settings).
"""
from datetime import time
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sitebook.errors import InvalidParameterError
from sitebook.scheduling.timeslots import VALID_GRANULARITIES, OperatingWindow

# .env next to the project root (parent of sitebook/)
_env_path = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_env_path, env_prefix="SITEBOOK_", extra="ignore"
    )

    database_url: str = "sqlite:///./sitebook.db"
    skip_db_init: bool = False
    log_level: str = "INFO"

    # bearer tokens are issued elsewhere; we only need to verify them
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_minutes: int = 60

    operating_open: time = time(6, 0)
    operating_close: time = time(19, 0)
    granularity_minutes: int = 15
    concurrent_slot_cap: int = 5
    sequential_slot_cap: int = 8
    default_duration_minutes: int = 60

    @field_validator("granularity_minutes", mode="after")
    @classmethod
    def check_granularity(cls, v: int) -> int:
        if v not in VALID_GRANULARITIES:
            raise ValueError(f"granularity must be one of {VALID_GRANULARITIES}")
        return v

    @field_validator("concurrent_slot_cap", "sequential_slot_cap", mode="after")
    @classmethod
    def check_cap(cls, v: int) -> int:
        if v < 1:
            raise ValueError("slot caps must be positive")
        return v

    @model_validator(mode="after")
    def check_operating_window(self) -> "Settings":
        try:
            OperatingWindow(self.operating_open, self.operating_close)
        except InvalidParameterError as e:
            raise ValueError(e.msg) from e
        return self

    @property
    def operating_window(self) -> OperatingWindow:
        return OperatingWindow(self.operating_open, self.operating_close)


settings = Settings()
