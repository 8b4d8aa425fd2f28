"""LPP (occupational pension) legal minima and capital-derived proxies."""

from __future__ import annotations

import math
from typing import Optional

from backend.domain.numbers import finite, non_negative, pct, round_chf
from backend.domain.regs import LppRules
from backend.models import LppInputs, LppInvalidityMinInputs


def savings_credit_pct(age: float, rules: LppRules) -> float:
    for band in rules.savingsCredits:
        if band.ageFrom <= age <= band.ageTo:
            return band.pct
    return 0.0


def invalidity_minimum_monthly(
    params: Optional[LppInvalidityMinInputs],
    rules: LppRules,
) -> Optional[int]:
    """Legal minimum invalidity pension, projected without interest.

    Savings credits on the coordinated salary are added to the current assets
    up to the reference age and converted at the minimum rate. Returns ``None``
    when any required input is missing.
    """
    if params is None:
        return None
    if (
        params.year is None
        or params.ageYears is None
        or params.coordinatedSalary is None
        or params.currentAssets is None
    ):
        return None

    age = finite(params.ageYears)
    salary = non_negative(params.coordinatedSalary)
    reference_age = rules.reference_age(params.sex)
    years = max(0, math.floor(reference_age - age))

    credits = sum(salary * savings_credit_pct(math.floor(age + step), rules) / 100 for step in range(1, years + 1))
    projected = round_chf(non_negative(params.currentAssets) + credits)
    annual = round_chf(pct(projected, rules.minConversionRatePct))
    return round_chf(annual / 12)


def conversion_rate(lpp: LppInputs, rules: LppRules) -> float:
    rate = finite(lpp.minConversionRatePct, rules.minConversionRatePct)
    return rate if rate > 0 else rules.minConversionRatePct


def capital_proxy_monthly(lpp: LppInputs, rules: LppRules) -> Optional[int]:
    """Certified annual pension / 12, else capital at 65 converted at the minimum rate."""
    if lpp.retirementAnnualFromCert is not None:
        return round_chf(non_negative(lpp.retirementAnnualFromCert) / 12)
    if lpp.capitalAt65FromCert is not None:
        return round_chf(pct(non_negative(lpp.capitalAt65FromCert), conversion_rate(lpp, rules)) / 12)
    return None
