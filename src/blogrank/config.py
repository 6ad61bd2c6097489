from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os


@dataclass
class Config:
    hot_limit: int
    trending_limit: int
    feed_url: Optional[str]
    feed_token: Optional[str]
    feed_timeout_seconds: int
    log_level: str
    log_path: Optional[Path]


def load_config() -> Config:
    hot_limit = int(os.getenv("BLOGRANK_HOT_LIMIT", "10"))
    trending_limit = int(os.getenv("BLOGRANK_TRENDING_LIMIT", "5"))
    feed_url = os.getenv("BLOGRANK_FEED_URL", "").strip() or None
    feed_token = os.getenv("BLOGRANK_FEED_TOKEN", "").strip() or None
    feed_timeout_seconds = int(os.getenv("BLOGRANK_FEED_TIMEOUT_SECONDS", "30"))

    log_level = os.getenv("BLOGRANK_LOG_LEVEL", "WARNING").strip().upper()
    log_path_str = os.getenv("BLOGRANK_LOG_PATH", "").strip()
    log_path = Path(log_path_str) if log_path_str else None

    return Config(
        hot_limit=max(0, hot_limit),
        trending_limit=max(0, trending_limit),
        feed_url=feed_url,
        feed_token=feed_token,
        feed_timeout_seconds=max(1, feed_timeout_seconds),
        log_level=log_level,
        log_path=log_path,
    )
