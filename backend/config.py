"""Environment-driven settings and logging setup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

DEFAULT_CORS_ORIGINS: Tuple[str, ...] = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
)

PACKAGED_REGS_DIR = Path(__file__).resolve().parent / "data"


@dataclass(frozen=True)
class Settings:
    log_level: str
    cors_origins: Tuple[str, ...]
    regs_dir: Path


def _split_origins(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return DEFAULT_CORS_ORIGINS
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read settings once; a local .env file is honoured if present."""
    load_dotenv()
    regs_dir = os.getenv("GAPS_REGS_DIR")
    return Settings(
        log_level=os.getenv("GAPS_LOG_LEVEL", "INFO").upper(),
        cors_origins=_split_origins(os.getenv("GAPS_CORS_ORIGINS")),
        regs_dir=Path(regs_dir) if regs_dir else PACKAGED_REGS_DIR,
    )


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=level or get_settings().log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
