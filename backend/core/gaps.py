"""Coverage gaps per life event and cause."""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Tuple

from backend.domain.coordination import (
    coordinate_accident_invalidity,
    coordinate_accident_survivors,
    coordinate_sickness,
)
from backend.domain.numbers import finite, non_negative
from backend.domain.prepare import PreparedInputs, prepare_inputs
from backend.domain.regs import RegsRegistry
from backend.domain.resolver import Benefit, Resolved, Scheme, resolve
from backend.models import GapsRequest
from backend.schemas.gaps import DeathGaps, GapSegment, GapsResult, GapStack, InvalidityGaps

logger = logging.getLogger(__name__)


def segment(label: str, value: float, source: Scheme, estimated: bool = False) -> GapSegment:
    return GapSegment(label=label, value=non_negative(value), source=source.value, estimated=estimated)


def build_stack(target: float, segments: List[GapSegment]) -> GapStack:
    """Covered is capped at the target; the gap uses the uncapped sum so a surplus gives 0."""
    target = non_negative(target)
    raw = finite(coordinate_sickness(item.value for item in segments))
    return GapStack(
        target=target,
        segments=segments,
        covered=min(target, raw),
        gap=max(0.0, target - raw),
    )


def _third_pillar(prepared: PreparedInputs, benefit: Benefit) -> List[GapSegment]:
    resolved = resolve(Scheme.P3, benefit, prepared.resolver)
    if resolved.monthly <= 0:
        return []
    return [segment("3rd pillar", resolved.monthly, Scheme.P3, resolved.estimated)]


def _estimated(*parts: Tuple[Resolved, bool]) -> bool:
    """Estimated when any part that actually contributes to the amount is."""
    return any(part.estimated for part, contributes in parts if contributes)


def invalidity_gaps(prepared: PreparedInputs) -> InvalidityGaps:
    ctx = prepared.request.ctx
    inputs = prepared.resolver
    target = prepared.targets_monthly.invalidity
    children = prepared.eligible_children(prepared.reference)

    avs_adult = resolve(Scheme.AVS, Benefit.INVALIDITY, inputs)
    avs_child = resolve(Scheme.AVS, Benefit.INVALIDITY_CHILD, inputs)
    lpp_adult = resolve(Scheme.LPP, Benefit.INVALIDITY, inputs)
    lpp_child = resolve(Scheme.LPP, Benefit.INVALIDITY_CHILD, inputs)
    p3 = _third_pillar(prepared, Benefit.INVALIDITY)

    sickness_segments = [segment("AVS/AI", avs_adult.monthly, Scheme.AVS, avs_adult.estimated)]
    if children > 0:
        sickness_segments.append(
            segment("AVS/AI children", children * avs_child.monthly, Scheme.AVS, avs_child.estimated)
        )
    sickness_segments.append(segment("LPP", lpp_adult.monthly, Scheme.LPP, lpp_adult.estimated))
    if children > 0 and lpp_child.monthly > 0:
        sickness_segments.append(
            segment("LPP children", children * lpp_child.monthly, Scheme.LPP, lpp_child.estimated)
        )
    sickness = build_stack(target, sickness_segments + p3)

    ai_total = avs_adult.monthly + children * avs_child.monthly
    coordinated = coordinate_accident_invalidity(
        prepared.income, ai_total, ctx.invalidityDegreePct, prepared.laa
    )
    ai_estimated = _estimated((avs_adult, True), (avs_child, children > 0))
    accident = build_stack(
        target,
        [
            segment("AI (adult + children)", coordinated.ai_monthly, Scheme.AVS, ai_estimated),
            segment("LAA (coordinated)", coordinated.laa_monthly, Scheme.LAA),
        ]
        + p3,
    )

    current = accident if ctx.eventInvalidity == "accident" else sickness
    return InvalidityGaps(sickness=sickness, accident=accident, current=current)


def death_gaps(prepared: PreparedInputs) -> DeathGaps:
    ctx = prepared.request.ctx
    inputs = prepared.resolver
    target = prepared.targets_monthly.death
    orphans = prepared.eligible_children(prepared.reference)

    avs_widow = resolve(Scheme.AVS, Benefit.SURVIVOR, inputs)
    avs_orphan = resolve(Scheme.AVS, Benefit.ORPHAN, inputs)
    lpp_widow = resolve(Scheme.LPP, Benefit.SURVIVOR, inputs)
    lpp_orphan = resolve(Scheme.LPP, Benefit.ORPHAN, inputs)

    avs_total = (avs_widow.monthly if prepared.spouse_right else 0.0) + orphans * avs_orphan.monthly
    lpp_total = (lpp_widow.monthly if prepared.partner_right else 0.0) + orphans * lpp_orphan.monthly

    avs_estimated = _estimated((avs_widow, prepared.spouse_right), (avs_orphan, orphans > 0))
    lpp_estimated = _estimated((lpp_widow, prepared.partner_right), (lpp_orphan, orphans > 0))
    sickness_segments = [
        segment("AVS survivors", avs_total, Scheme.AVS, avs_estimated),
        segment("LPP survivors", lpp_total, Scheme.LPP, lpp_estimated),
    ] + _third_pillar(prepared, Benefit.SURVIVOR)
    sickness = build_stack(target, sickness_segments)

    coordinated = coordinate_accident_survivors(
        prepared.income, prepared.spouse_right, orphans, avs_total, prepared.laa
    )
    accident = build_stack(
        target,
        sickness_segments + [segment("LAA survivors", coordinated.laa_monthly, Scheme.LAA)],
    )

    capital = prepared.request.lpp.deathCapital
    current = accident if ctx.eventDeath == "accident" else sickness
    return DeathGaps(
        sickness=sickness,
        accident=accident,
        current=current,
        capital=non_negative(capital) if capital is not None else None,
    )


def retirement_gap(prepared: PreparedInputs) -> GapStack:
    inputs = prepared.resolver
    avs = resolve(Scheme.AVS, Benefit.OLD_AGE, inputs)
    lpp = resolve(Scheme.LPP, Benefit.OLD_AGE, inputs)
    return build_stack(
        prepared.targets_monthly.retirement,
        [
            segment("AVS old age", avs.monthly, Scheme.AVS, avs.estimated),
            segment("LPP old age", lpp.monthly, Scheme.LPP, lpp.estimated),
        ]
        + _third_pillar(prepared, Benefit.OLD_AGE),
    )


def compute_gaps(
    request: GapsRequest,
    reference_date: date,
    registry: Optional[RegsRegistry] = None,
) -> GapsResult:
    """Targets, covered amounts and gaps for disability, death and retirement."""
    prepared = prepare_inputs(request, reference_date, registry)
    logger.debug("Computing gaps for %s (regulations %s)", reference_date, prepared.regs.year)
    return GapsResult(
        targetsPct=prepared.targets,
        targetsMonthly=prepared.targets_monthly,
        invalidity=invalidity_gaps(prepared),
        death=death_gaps(prepared),
        retirement=retirement_gap(prepared),
    )
