from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from backend.domain.avs import ScaleFigures, career_override_active, compute_scale_figures
from backend.domain.dates import parse_birthdate, parse_birthdates
from backend.domain.eligibility import (
    avs_spouse_right,
    child_cutoff_years,
    count_eligible_children,
    lpp_partner_right,
)
from backend.domain.needs import clamp_targets, target_monthly
from backend.domain.regs import Regulations, RegsRegistry, get_registry
from backend.domain.resolver import ResolverInputs
from backend.models import GapsRequest, LaaParams
from backend.schemas.gaps import NeedTargets, TargetsMonthly

logger = logging.getLogger(__name__)


@dataclass
class PreparedInputs:
    request: GapsRequest
    reference: date
    regs: Regulations
    laa: LaaParams
    targets: NeedTargets
    targets_monthly: TargetsMonthly
    births: List[date]
    birth_date: Optional[date]
    figures: Optional[ScaleFigures]
    resolver: ResolverInputs
    spouse_right: bool
    partner_right: bool

    @property
    def income(self) -> float:
        return self.request.annualIncome

    @property
    def child_cutoff(self) -> int:
        return child_cutoff_years(self.request.ctx.extendChildBenefitsTo25)

    def eligible_children(self, at: date, cutoff_years: Optional[int] = None) -> int:
        """Children counted at ``at``: from birthdates when any, else the declared count."""
        cutoff = self.child_cutoff if cutoff_years is None else cutoff_years
        if self.births:
            return count_eligible_children(self.births, at, cutoff)
        return max(0, self.request.ctx.childrenCount)


def prepare_inputs(
    request: GapsRequest,
    reference_date: date,
    registry: Optional[RegsRegistry] = None,
) -> PreparedInputs:
    """Resolve regulations, targets and eligibility once for a computation."""
    registry = registry or get_registry()
    regs = registry.for_year(reference_date.year)
    ctx = request.ctx

    targets = clamp_targets(request.targets, regs.targets)
    targets_monthly = TargetsMonthly(
        invalidity=target_monthly(request.annualIncome, targets.invalidityPctTarget),
        death=target_monthly(request.annualIncome, targets.deathPctTarget),
        retirement=target_monthly(request.annualIncome, targets.retirementPctTarget),
    )

    figures = None
    if career_override_active(ctx):
        figures = compute_scale_figures(request.annualIncome, ctx, regs.avs, reference_date.year)
        logger.debug("AVS career override active, coefficient %s", figures and figures.coefficient)

    birth_date = parse_birthdate(ctx.birthDateISO)
    resolver = ResolverInputs(
        avs=request.avs,
        lpp=request.lpp,
        regs=regs,
        third_pillar=request.thirdPillar,
        figures=figures,
        birth_known=birth_date is not None,
    )

    rules = regs.avs
    return PreparedInputs(
        request=request,
        reference=reference_date,
        regs=regs,
        laa=request.laaParams or regs.laa,
        targets=targets,
        targets_monthly=targets_monthly,
        births=parse_birthdates(ctx.childrenBirthdates),
        birth_date=birth_date,
        figures=figures,
        resolver=resolver,
        spouse_right=avs_spouse_right(ctx.survivor, rules.widowMinAge, rules.minMarriageYears),
        partner_right=lpp_partner_right(
            ctx.survivor, rules.widowMinAge, rules.minMarriageYears, rules.minCohabitationYears
        ),
    )
