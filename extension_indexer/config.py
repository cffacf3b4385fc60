"""
Configuration settings for the extension indexer
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional


DEFAULT_WORKERS = 4
DEFAULT_FORMATS = ["json", "confluence"]
DEFAULT_CORE_NAME = "Platform Core"
DEFAULT_CORE_LINK = "Building the Platform"


@dataclass
class IndexerConfig:
    """Settings for one indexing run"""
    workers: int = DEFAULT_WORKERS
    output_dir: str = "."
    formats: List[str] = field(default_factory=lambda: list(DEFAULT_FORMATS))
    core_name: str = DEFAULT_CORE_NAME
    core_url: str = ""
    core_link: str = DEFAULT_CORE_LINK
    plugin_url_template: Optional[str] = None
    limit: Optional[int] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "IndexerConfig":
        return cls(
            workers=_env_int("EXTENSION_INDEXER_WORKERS", DEFAULT_WORKERS),
            output_dir=os.getenv("EXTENSION_INDEXER_OUTPUT_DIR", "."),
            core_name=os.getenv("EXTENSION_INDEXER_CORE_NAME", DEFAULT_CORE_NAME),
            core_url=os.getenv("EXTENSION_INDEXER_CORE_URL", ""),
            core_link=os.getenv("EXTENSION_INDEXER_CORE_LINK", DEFAULT_CORE_LINK),
            plugin_url_template=os.getenv("EXTENSION_INDEXER_PLUGIN_URL_TEMPLATE") or None,
            log_level=os.getenv("EXTENSION_INDEXER_LOG_LEVEL", "INFO").upper(),
        )

    def __post_init__(self):
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        if self.limit is not None and self.limit < 0:
            raise ValueError(f"limit must not be negative, got {self.limit}")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
