"""AVS/AI monthly figures estimated from the full-career scale (Échelle 44).

The scale row is picked from a RAMD proxy (income plus averaged educational
and caregiving credits) and weighted by a career coefficient. Invalidity and
survivor figures use the career completed so far, old age uses the career
projected to the AVS retirement age.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence, Set

from backend.domain.dates import age_on, parse_birthdate, parse_birthdates
from backend.domain.eligibility import MARRIED_OR_PARTNERSHIP
from backend.domain.numbers import clamp, non_negative, round_chf
from backend.domain.regs import AvsRules, ScaleRow
from backend.models import AvsCareer, EventContext

logger = logging.getLogger(__name__)

EDUCATION_CREDIT_YEARS = 16
FALLBACK_CONTRIBUTION_WINDOW = 22


@dataclass(frozen=True)
class ScaleFigures:
    invalidity: int
    invalidity_child: int
    widow: int
    child: int
    old_age: int
    coefficient: float
    projected_coefficient: float
    matched_income: float


def career_override_active(ctx: EventContext) -> bool:
    """User-supplied career data replaces the caller's AVS figures."""
    career = ctx.avsCareer
    if career is not None and (
        career.startWorkYearCH is not None or career.missingYears or career.caregivingYears
    ):
        return True
    return bool(parse_birthdates(ctx.childrenBirthdates))


def _contribution_years(career: Optional[AvsCareer], year: int, window: int) -> List[int]:
    if career is None or career.startWorkYearCH is None:
        return [year - offset for offset in range(window)]
    start = min(career.startWorkYearCH, year)
    gaps = set(career.missingYears)
    return [candidate for candidate in range(start, year + 1) if candidate not in gaps]


def contributed_years(career: Optional[AvsCareer], year: int, full_career: int = 44) -> int:
    if career is not None and career.startWorkYearCH is not None:
        return len(_contribution_years(career, year, full_career))
    gaps = set(career.missingYears) if career is not None else set()
    window_start = year - (full_career - 1)
    missing = sum(1 for gap in gaps if window_start <= gap <= year)
    return max(0, full_career - missing)


def career_coefficient(career: Optional[AvsCareer], year: int, full_career: int = 44) -> float:
    if full_career <= 0:
        return 0.0
    return clamp(contributed_years(career, year, full_career) / full_career, 0.0, 1.0)


def projected_coefficient(
    career: Optional[AvsCareer],
    birth: Optional[date],
    year: int,
    full_career: int = 44,
    retirement_age: int = 65,
) -> float:
    """Career coefficient once the remaining years up to retirement are added."""
    if full_career <= 0:
        return 0.0
    contributed = contributed_years(career, year, full_career)
    years_left = 0
    if birth is not None:
        age = age_on(birth, date(year, 1, 1))
        years_left = max(0, retirement_age - age)
    total = min(full_career, max(0, contributed + years_left))
    return total / full_career


def years_with_child_under_16(births: Iterable[date], year: int) -> Set[int]:
    years: Set[int] = set()
    for birth in births:
        last = min(year, birth.year + EDUCATION_CREDIT_YEARS - 1)
        years.update(range(birth.year, last + 1))
    return years


def ramd_proxy(
    annual_income: float,
    year: int,
    rules: AvsRules,
    marital_status: str = "single",
    births: Sequence[date] = (),
    career: Optional[AvsCareer] = None,
) -> float:
    """Income plus educational and caregiving credits averaged over contribution years."""
    contribution_years = _contribution_years(career, year, FALLBACK_CONTRIBUTION_WINDOW)
    count = max(1, len(contribution_years))
    contributed = set(contribution_years)

    education_years = len(years_with_child_under_16(births, year) & contributed)
    caregiving = set(career.caregivingYears) if career is not None else set()
    caregiving_years = len(caregiving & contributed)

    share = 0.5 if marital_status in MARRIED_OR_PARTNERSHIP else 1.0
    credits = share * rules.eduCreditCHF * education_years + rules.careCreditCHF * caregiving_years
    return non_negative(annual_income) + max(0.0, credits / count)


def pick_scale_row(rows: Sequence[ScaleRow], income: float) -> Optional[ScaleRow]:
    """Last row whose income does not exceed ``income``, clamped to the table."""
    if not rows:
        return None
    ordered = sorted(rows, key=lambda row: row.income)
    effective = max(0, round_chf(income))
    chosen = ordered[0]
    for row in ordered:
        if row.income > effective:
            break
        chosen = row
    return chosen


def compute_scale_figures(
    annual_income: float,
    ctx: EventContext,
    rules: AvsRules,
    year: int,
) -> Optional[ScaleFigures]:
    row_income = ramd_proxy(
        annual_income,
        year,
        rules,
        marital_status=ctx.survivor.maritalStatus,
        births=parse_birthdates(ctx.childrenBirthdates),
        career=ctx.avsCareer,
    )
    row = pick_scale_row(rules.scale, row_income)
    if row is None:
        logger.debug("AVS scale is empty for %s", year)
        return None

    current = career_coefficient(ctx.avsCareer, year, rules.fullCareerYears)
    projected = projected_coefficient(
        ctx.avsCareer,
        parse_birthdate(ctx.birthDateISO),
        year,
        rules.fullCareerYears,
        rules.retirementAge,
    )
    return ScaleFigures(
        invalidity=round_chf(row.oldAgeInvalidity * current),
        invalidity_child=round_chf(row.child40 * current),
        widow=round_chf(row.widowWidowerSurvivor * current),
        child=round_chf(row.child40 * current),
        old_age=round_chf(row.oldAgeInvalidity * projected),
        coefficient=current,
        projected_coefficient=projected,
        matched_income=row.income,
    )
