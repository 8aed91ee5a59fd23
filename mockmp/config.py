# mockmp/config.py
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MockSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MOCKMP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    log_json: bool = False  # JSON records instead of the console format

    # Diagnostics
    diagnostic_max_calls: int = Field(default=50, ge=1)  # Recorded calls listed in a verification failure

    # Engine behavior
    warn_cross_thread: bool = True  # Log once when a mocker is driven from a foreign thread
    record_outcomes: bool = True    # Keep returned values / raised errors on recorded invocations

    @property
    def is_debug(self) -> bool:
        return self.log_level == "DEBUG"


def warn_on_risky_config(s: MockSettings) -> list[str]:
    warnings: list[str] = []

    if not s.record_outcomes:
        warnings.append(
            "record_outcomes=False: threw(...) expectations can never match."
        )

    if not s.warn_cross_thread:
        warnings.append(
            "warn_cross_thread=False: concurrent use of one mocker goes unreported."
        )

    if s.diagnostic_max_calls < 5:
        warnings.append(
            f"diagnostic_max_calls={s.diagnostic_max_calls}: verification failures will list very few calls."
        )

    return warnings


@lru_cache(maxsize=1)
def get_settings() -> MockSettings:
    """Process-wide settings, read once from the environment."""
    return MockSettings()
