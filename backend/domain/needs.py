"""Replacement-income targets."""

from __future__ import annotations

from backend.domain.numbers import clamp, finite, non_negative, round_chf
from backend.domain.regs import TargetRules
from backend.models import NeedTargetsInput
from backend.schemas.gaps import NeedTargets


def clamp_targets(targets: NeedTargetsInput, rules: TargetRules) -> NeedTargets:
    """Fill missing targets with defaults and clamp each to [0, ceiling]."""

    def bounded(value, default, ceiling):
        return clamp(finite(value, default), 0, ceiling)

    return NeedTargets(
        invalidityPctTarget=bounded(
            targets.invalidityPctTarget, rules.defaultInvalidityPct, rules.invalidityMaxPct
        ),
        deathPctTarget=bounded(targets.deathPctTarget, rules.defaultDeathPct, rules.deathMaxPct),
        retirementPctTarget=bounded(
            targets.retirementPctTarget, rules.defaultRetirementPct, rules.retirementMaxPct
        ),
    )


def target_monthly(annual_income: float, target_pct: float) -> int:
    return round_chf(non_negative(annual_income) * target_pct / 1200)
