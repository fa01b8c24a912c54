from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class ChanSettings(BaseSettings):
    """
    Environment-driven settings for the board client and the catalog runner.
    """

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    # ---- Transport ----
    api_base_url: str = Field(default="https://a.4cdn.org", alias="CHAN_API_BASE_URL")

    request_timeout_sec: float = Field(default=15.0, alias="CHAN_REQUEST_TIMEOUT_SEC")
    # The read-only API asks for no more than one request per second.
    request_delay_sec: float = Field(default=1.0, alias="CHAN_REQUEST_DELAY_SEC")

    max_retries: int = Field(default=3, alias="CHAN_MAX_RETRIES")
    backoff_base_sec: float = Field(default=1.0, alias="CHAN_BACKOFF_BASE_SEC")
    backoff_max_sec: float = Field(default=20.0, alias="CHAN_BACKOFF_MAX_SEC")

    user_agent: str = Field(default="chanboard/0.1 (+catalog cache)", alias="CHAN_USER_AGENT")

    # ---- Runner ----
    board: str = Field(default="g", alias="CHAN_BOARD")
    # Regex matched against name, comment, subject and filename. Empty: list everything cached.
    query: str = Field(default="", alias="CHAN_QUERY")
    sample_size: int = Field(default=10, alias="CHAN_SAMPLE_SIZE")


def load_settings() -> ChanSettings:
    return ChanSettings()
