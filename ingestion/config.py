"""
Service Configuration
=====================
Settings loaded from environment variables, plus the fixed id bounds.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List

# --- Configuration Constants ---
MIN_ID_VALUE = 1
MAX_ID_VALUE = 10**9 + 7

DEFAULT_BATCH_SIZE = 3
DEFAULT_RATE_LIMIT_SECONDS = 5.0
DEFAULT_IDLE_POLL_SECONDS = 1.0
DEFAULT_MAX_STORED_RECORDS = 1000

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    """Runtime knobs for batching, rate limiting and the HTTP process."""

    batch_size: int = DEFAULT_BATCH_SIZE
    rate_limit_seconds: float = DEFAULT_RATE_LIMIT_SECONDS
    idle_poll_seconds: float = DEFAULT_IDLE_POLL_SECONDS
    min_work_latency_seconds: float = 0.1
    max_work_latency_seconds: float = 0.5
    max_stored_records: int = DEFAULT_MAX_STORED_RECORDS
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    def __post_init__(self):
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.rate_limit_seconds < 0 or self.idle_poll_seconds < 0:
            raise ValueError("scheduler intervals must not be negative")
        if not 0 <= self.min_work_latency_seconds <= self.max_work_latency_seconds:
            raise ValueError("work latency bounds must satisfy 0 <= min <= max")

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            batch_size=int(os.getenv("BATCH_SIZE", str(DEFAULT_BATCH_SIZE))),
            rate_limit_seconds=float(os.getenv("RATE_LIMIT_SECONDS", str(DEFAULT_RATE_LIMIT_SECONDS))),
            idle_poll_seconds=float(os.getenv("IDLE_POLL_SECONDS", str(DEFAULT_IDLE_POLL_SECONDS))),
            min_work_latency_seconds=float(os.getenv("MIN_WORK_LATENCY_SECONDS", "0.1")),
            max_work_latency_seconds=float(os.getenv("MAX_WORK_LATENCY_SECONDS", "0.5")),
            max_stored_records=int(os.getenv("MAX_STORED_RECORDS", str(DEFAULT_MAX_STORED_RECORDS))),
            cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "*")) or ["*"],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once; later calls only adjust the level."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
