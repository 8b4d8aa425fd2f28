"""Year-indexed regulatory parameters (caps, percentages, AVS scale).

The registry is read once from JSON packs named ``regs_<year>.json`` and then
shared read-only: every model below is frozen.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from backend.config import get_settings
from backend.models import LaaParams

logger = logging.getLogger(__name__)


class RegistryError(RuntimeError):
    pass


class _Frozen(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class TargetRules(_Frozen):
    invalidityMaxPct: float = 90
    deathMaxPct: float = 100
    retirementMaxPct: float = 100
    defaultInvalidityPct: float = 90
    defaultDeathPct: float = 80
    defaultRetirementPct: float = 80


class SavingsCreditBand(_Frozen):
    ageFrom: int
    ageTo: int
    pct: float


class LppRules(_Frozen):
    minConversionRatePct: float = 6.8
    retirementAgeMale: int = 65
    retirementAgeFemale: int = 65
    widowPct: float = 60
    orphanPct: float = 20
    invalidityChildPct: float = 20
    savingsCredits: List[SavingsCreditBand] = []

    def reference_age(self, sex: Optional[str]) -> int:
        return self.retirementAgeFemale if sex == "F" else self.retirementAgeMale


class ScaleRow(_Frozen):
    """One line of the AVS full-career scale (Échelle 44), monthly CHF."""

    income: float
    oldAgeInvalidity: float
    oldAgeInvalidityForWidowWidower: float
    widowWidowerSurvivor: float
    supplementary30: float
    child40: float
    orphan60: float


class AvsRules(_Frozen):
    fullCareerYears: int = 44
    retirementAge: int = 65
    invalidityChildPct: float = 40
    widowMinAge: float = 45
    minMarriageYears: float = 5
    minCohabitationYears: float = 5
    eduCreditCHF: float = 0
    careCreditCHF: float = 0
    scale: List[ScaleRow] = []


class Regulations(_Frozen):
    year: int
    currency: str = "CHF"
    targets: TargetRules = TargetRules()
    laa: LaaParams = LaaParams()
    lpp: LppRules = LppRules()
    avs: AvsRules = AvsRules()


class RegsRegistry:
    """Regulation packs keyed by year."""

    def __init__(self, packs: Dict[int, Regulations]):
        if not packs:
            raise RegistryError("no regulation pack available")
        self._packs = dict(packs)

    @property
    def years(self) -> List[int]:
        return sorted(self._packs)

    def for_year(self, year: int) -> Regulations:
        """Exact year, else the closest earlier year, else the most recent one."""
        if year in self._packs:
            return self._packs[year]
        earlier = [known for known in self._packs if known <= year]
        picked = max(earlier) if earlier else max(self._packs)
        logger.debug("No regulation pack for %s, using %s", year, picked)
        return self._packs[picked]


def load_registry(directory: Path) -> RegsRegistry:
    packs: Dict[int, Regulations] = {}
    for path in sorted(directory.glob("regs_*.json")):
        try:
            regs = Regulations.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            raise RegistryError(f"invalid regulation pack {path.name}: {exc}") from exc
        packs[regs.year] = regs
    if not packs:
        raise RegistryError(f"no regulation pack found in {directory}")
    logger.info("Loaded regulation packs for years %s", sorted(packs))
    return RegsRegistry(packs)


@lru_cache(maxsize=1)
def get_registry() -> RegsRegistry:
    return load_registry(get_settings().regs_dir)
