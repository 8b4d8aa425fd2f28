"""Cross-scheme coordination.

Sickness benefits simply add up. Accident benefits are coordinated: LAA only
tops up AVS/AI until the overall cap on the insured earnings is reached, and
survivor shares are first limited by the family cap. Annual intermediates stay
unrounded; only the monthly figures returned are rounded to francs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from backend.domain.numbers import clamp, finite, non_negative, pct, round_chf
from backend.models import LaaParams

MIN_DEGREE_PCT = 40
MAX_DEGREE_PCT = 100


def clamp_degree(degree_pct: float) -> float:
    return clamp(finite(degree_pct, MAX_DEGREE_PCT), MIN_DEGREE_PCT, MAX_DEGREE_PCT)


def coordinate_sickness(amounts: Iterable[float]) -> float:
    """Sickness: additive, no cap even above the income."""
    return sum(non_negative(amount) for amount in amounts)


def insured_earnings(annual_income: float, laa: LaaParams) -> float:
    return min(non_negative(annual_income), non_negative(laa.insuredEarningsMax))


@dataclass(frozen=True)
class AccidentInvalidity:
    insured_annual: float
    nominal_annual: float
    cap_annual: float
    ai_monthly: int
    laa_monthly: int
    nominal_monthly: int
    cap_monthly: int
    total_monthly: int


def coordinate_accident_invalidity(
    annual_income: float,
    ai_monthly: float,
    degree_pct: float,
    laa: LaaParams,
) -> AccidentInvalidity:
    insured = insured_earnings(annual_income, laa)
    nominal = pct(insured, laa.disabilityPctFull) * clamp_degree(degree_pct) / 100
    ai_annual = non_negative(ai_monthly) * 12
    cap = pct(insured, laa.overallCapPct)
    laa_annual = max(0.0, min(nominal, cap - ai_annual))
    ai_rounded = round_chf(ai_annual / 12)
    total = round_chf((ai_annual + laa_annual) / 12)

    # LAA is the rounded total less the rounded AI
    return AccidentInvalidity(
        insured_annual=insured,
        nominal_annual=nominal,
        cap_annual=cap,
        ai_monthly=ai_rounded,
        laa_monthly=max(0, total - ai_rounded),
        nominal_monthly=round_chf(nominal / 12),
        cap_monthly=round_chf(cap / 12),
        total_monthly=total,
    )


@dataclass(frozen=True)
class AccidentSurvivors:
    insured_annual: float
    nominal_annual: float
    payable_annual: float
    prorata: float
    spouse_monthly: int
    orphans_monthly: int
    laa_monthly: int
    avs_monthly: int
    overall_cap_monthly: int


def coordinate_accident_survivors(
    annual_income: float,
    spouse_has_right: bool,
    orphans: int,
    avs_survivors_monthly: float,
    laa: LaaParams,
) -> AccidentSurvivors:
    insured = insured_earnings(annual_income, laa)
    spouse = pct(insured, laa.spousePct) if spouse_has_right else 0.0
    orphan_share = max(0, orphans) * pct(insured, laa.orphanPct)

    nominal = spouse + orphan_share
    family_cap = pct(insured, laa.familyCapPct)
    if nominal > family_cap:
        ratio = family_cap / nominal
        spouse *= ratio
        orphan_share *= ratio
        nominal = family_cap

    avs_annual = non_negative(avs_survivors_monthly) * 12
    overall_cap = pct(insured, laa.overallCapPct)
    payable = min(nominal, max(0.0, overall_cap - avs_annual))
    prorata = payable / nominal if nominal > 0 else 0.0

    return AccidentSurvivors(
        insured_annual=insured,
        nominal_annual=nominal,
        payable_annual=payable,
        prorata=finite(prorata),
        spouse_monthly=round_chf(spouse * prorata / 12),
        orphans_monthly=round_chf(orphan_share * prorata / 12),
        laa_monthly=round_chf(payable / 12),
        avs_monthly=round_chf(avs_annual / 12),
        overall_cap_monthly=round_chf(overall_cap / 12),
    )
