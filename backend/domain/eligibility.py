"""Survivor and child eligibility predicates.

All predicates are pure. Child eligibility takes an explicit reference date.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from backend.domain.dates import months_between
from backend.models import SurvivorContext

MARRIED_OR_PARTNERSHIP = frozenset({"married", "registered_partnership"})

CHILD_CUTOFF_YEARS = 18
EDUCATION_CUTOFF_YEARS = 25


def married_since_5y(survivor: SurvivorContext, min_years: float = 5) -> bool:
    if survivor.marriedSince5y is not None:
        return survivor.marriedSince5y
    return (survivor.marriageYears or 0) >= min_years


def avs_spouse_right(
    survivor: SurvivorContext,
    min_age: float = 45,
    min_marriage_years: float = 5,
) -> bool:
    """AVS widow(er) pension right.

    Married or registered partners qualify with a child, or when aged at least
    ``min_age`` at widowhood after ``min_marriage_years`` of marriage. An
    unknown age at widowhood does not block the right.
    """
    if survivor.maritalStatus not in MARRIED_OR_PARTNERSHIP:
        return False
    if survivor.hasChild:
        return True
    age = survivor.ageAtWidowhood if survivor.ageAtWidowhood is not None else min_age
    return age >= min_age and married_since_5y(survivor, min_marriage_years)


def lpp_partner_right(
    survivor: SurvivorContext,
    min_age: float = 45,
    min_marriage_years: float = 5,
    min_cohabitation_years: float = 5,
) -> bool:
    if survivor.maritalStatus in MARRIED_OR_PARTNERSHIP:
        return avs_spouse_right(survivor, min_age, min_marriage_years)
    if survivor.maritalStatus == "cohabiting":
        return survivor.partnerDesignated and (
            (survivor.cohabitationYears or 0) >= min_cohabitation_years
        )
    return False


def child_cutoff_years(extend_for_education: bool) -> int:
    return EDUCATION_CUTOFF_YEARS if extend_for_education else CHILD_CUTOFF_YEARS


def is_child_eligible(
    birth: Optional[date],
    reference: date,
    cutoff_years: int = CHILD_CUTOFF_YEARS,
) -> bool:
    # unknown birthdate: never counted
    if birth is None:
        return False
    return months_between(reference, birth) < cutoff_years * 12


def count_eligible_children(
    births: Iterable[Optional[date]],
    reference: date,
    cutoff_years: int = CHILD_CUTOFF_YEARS,
) -> int:
    return sum(1 for birth in births if is_child_eligible(birth, reference, cutoff_years))
