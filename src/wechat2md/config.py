# ABOUTME: Settings loaded from WECHAT2MD_* environment variables and .env via pydantic-settings
# ABOUTME: One immutable value carries every crawl, retry, batching and logging tunable

import functools
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/17.2 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
]


class Config(BaseSettings):
    """Every tunable of the extractor; frozen once loaded."""

    model_config = SettingsConfigDict(
        env_prefix="WECHAT2MD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # HTTP fetching
    user_agents: list[str] = Field(
        default_factory=lambda: list(DEFAULT_USER_AGENTS), description="Client identities rotated per request"
    )
    request_timeout: float = Field(default=45.0, ge=30.0, description="Per-request timeout in seconds")
    max_redirects: int = Field(default=5, ge=3, le=5, description="Redirects followed before giving up")
    verify_tls: bool = Field(
        default=False,
        description=(
            "Verify TLS certificates. Off by default: the platform's edge nodes serve certificate "
            "chains that intermittently fail verification, and reliability is preferred here."
        ),
    )

    # Retry policy (transport errors only)
    max_retries: int = Field(default=3, ge=0, description="Retries after the first attempt")
    retry_base_delay: float = Field(default=1.0, ge=0.0, description="Backoff unit, multiplied by attempt number")

    # Batch orchestration
    batch_size: int = Field(default=3, ge=1, description="Links fetched concurrently per window")
    request_delay_min: float = Field(default=2.0, ge=0.0, description="Lower bound of per-request jitter (seconds)")
    request_delay_max: float = Field(default=5.0, ge=0.0, description="Upper bound of per-request jitter (seconds)")
    batch_delay: float = Field(default=8.0, ge=0.0, description="Pause between batch windows (seconds)")

    # Album harvesting
    harvest_max_rounds: int = Field(default=50, ge=1, description="Hard ceiling on discovery rounds")
    harvest_stagnant_rounds: int = Field(default=5, ge=1, description="Consecutive empty rounds before stopping")
    scroll_pause_min: float = Field(default=2.0, ge=0.0, description="Lower bound of post-scroll pause (seconds)")
    scroll_pause_max: float = Field(default=4.0, ge=0.0, description="Upper bound of post-scroll pause (seconds)")
    navigation_timeout: float = Field(default=60.0, ge=1.0, description="Browser navigation timeout (seconds)")
    headless: bool = Field(default=True, description="Run the local browser headless")
    browser_endpoint: str | None = Field(
        default=None, description="CDP endpoint of a managed remote browser; local Chromium when unset"
    )

    # Content rules
    trusted_image_hosts: list[str] = Field(
        default_factory=lambda: ["mmbiz.qpic.cn"], description="Image CDN hosts accepted in output"
    )
    album_max_count: int = Field(default=50, ge=1, description="Largest maxCount accepted for album requests")

    # Logging
    log_mode: Literal["interactive", "production"] = Field(
        default="interactive", description="Sinks used when --json is not given: log files or stdout JSON"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_file: Path | None = Field(default=None, description="Human-readable log path, logs/wechat2md.log when unset")


@functools.cache
def get_config() -> Config:
    """Process-wide Config, built from the environment on first use."""
    return Config()
