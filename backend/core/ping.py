"""Health-check payload for the API."""

from typing import List

from backend.domain.regs import get_registry


def get_ping_message() -> str:
    return "pong"


def get_regulation_years() -> List[int]:
    """Years covered by the loaded regulation packs (loads them on first call)."""
    return get_registry().years
