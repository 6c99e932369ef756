"""
Configuration Management
=======================

Run options for the medicine scraper. Defaults can be overridden from a
.env file or the environment (MEDICINE_ARCHIVE_* variables); the CLI then
overrides those again.
"""

import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

DEFAULT_INDEX_URL = "https://www.nhs.uk/medicines/"
DEFAULT_BASE_PATH = "/medicines/"
DEFAULT_OUTPUT_PATH = "nhs-medicines.json"
DEFAULT_WORD_LIST = Path(__file__).parent / "data" / "word_list.txt"

# Number of medicines processed in test mode when no explicit limit is given
TEST_MODE_LIMIT = 10

ENV_PREFIX = "MEDICINE_ARCHIVE_"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(ENV_PREFIX + name, default)


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = _env(name)
    if value is None or not value.strip():
        return default
    return int(value)


@dataclass
class ScrapeOptions:
    """Options for one scraping run."""

    concurrency: int = 3
    delay_ms: int = 1000
    timeout_ms: int = 30000           # index + detail pages
    section_timeout_ms: int = 15000   # sub-section pages
    limit: int = 0                    # 0 = no cap
    test_mode: bool = False
    output_path: str = DEFAULT_OUTPUT_PATH
    index_url: str = DEFAULT_INDEX_URL
    base_path: str = DEFAULT_BASE_PATH
    word_list_path: str = str(DEFAULT_WORD_LIST)
    headless: bool = True
    log_dir: str = "logs"

    def __post_init__(self):
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")
        if self.delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {self.delay_ms}")
        if self.limit < 0:
            raise ValueError(f"limit must be >= 0, got {self.limit}")

    @property
    def processing_cap(self) -> Optional[int]:
        """How many catalog entries to process, or None for all of them."""
        if self.limit:
            return self.limit
        if self.test_mode:
            return TEST_MODE_LIMIT
        return None

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **overrides) -> 'ScrapeOptions':
        """
        Build options from the environment.

        Args:
            env_file: Optional .env path. Defaults to ./.env if present.
            **overrides: Values that win over both defaults and environment.
                None values are ignored so CLI flags that were not given
                fall through to the environment.
        """
        load_dotenv(env_file or os.path.join(os.getcwd(), ".env"))

        values = dict(
            concurrency=_env_int("CONCURRENCY", cls.concurrency),
            delay_ms=_env_int("DELAY_MS", cls.delay_ms),
            timeout_ms=_env_int("TIMEOUT_MS", cls.timeout_ms),
            section_timeout_ms=_env_int("SECTION_TIMEOUT_MS", cls.section_timeout_ms),
            limit=_env_int("LIMIT", cls.limit),
            test_mode=_env_bool("TEST_MODE", cls.test_mode),
            output_path=_env("OUTPUT_PATH", cls.output_path),
            index_url=_env("INDEX_URL", cls.index_url),
            base_path=_env("BASE_PATH", cls.base_path),
            word_list_path=_env("WORD_LIST", cls.word_list_path),
            headless=_env_bool("HEADLESS", cls.headless),
            log_dir=_env("LOG_DIR", cls.log_dir),
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Export options as dictionary"""
        return asdict(self)
