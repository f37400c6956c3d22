"""Runtime configuration loaded from the environment (.env supported)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from dotenv import load_dotenv

DEFAULT_DATA_DIR: Final[str] = "data"
DEFAULT_OUT_DIR: Final[str] = "out"
DEFAULT_PROJECT_IDS: Final[str] = "[124730]"
DEFAULT_SPECIES_ID: Final[str] = "3"
DEFAULT_SOURCE_TZ: Final[str] = "+01:00"


@dataclass(frozen=True, slots=True)
class ApiConfig:
    """Configuration for the position source."""

    base_url: str
    username: str = ""
    password: str = ""
    project_ids: str = DEFAULT_PROJECT_IDS
    species_id: str = DEFAULT_SPECIES_ID
    tz_name: str = DEFAULT_SOURCE_TZ
    timeout_seconds: float = 30.0
    min_interval_seconds: float = 0.5
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36"
    )

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> ApiConfig:
        """Build the config from API_* environment variables.

        Raises:
            ValueError: If API_BASE_URL is not set.
        """

        load_dotenv(env_file)
        base_url = os.getenv("API_BASE_URL", "").rstrip("/")
        if not base_url:
            raise ValueError("API_BASE_URL is not set (environment or .env)")
        return cls(
            base_url=base_url,
            username=os.getenv("API_USERNAME", ""),
            password=os.getenv("API_PASSWORD", ""),
            project_ids=os.getenv("API_PROJECT_IDS", DEFAULT_PROJECT_IDS),
            species_id=os.getenv("API_SPECIES_ID", DEFAULT_SPECIES_ID),
            tz_name=os.getenv("API_TZ", DEFAULT_SOURCE_TZ),
            timeout_seconds=float(os.getenv("API_TIMEOUT_SECONDS", "30")),
            min_interval_seconds=float(os.getenv("API_MIN_INTERVAL_SECONDS", "0.5")),
        )


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Where raw snapshots are read from and derived artifacts written to."""

    data_dir: Path = Path(DEFAULT_DATA_DIR)
    out_dir: Path = Path(DEFAULT_OUT_DIR)

    @classmethod
    def from_env(cls) -> StorageConfig:
        load_dotenv()
        return cls(
            data_dir=Path(os.getenv("DATA_DIR", DEFAULT_DATA_DIR)),
            out_dir=Path(os.getenv("OUT_DIR", DEFAULT_OUT_DIR)),
        )
