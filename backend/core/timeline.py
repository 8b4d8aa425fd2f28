"""Month-by-month coverage projection.

A projection is a lazy, restartable sequence: iterating it computes each
month on demand, and every new iteration starts again from ``start``.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterator, List, Optional

from backend.domain.coordination import coordinate_accident_invalidity, coordinate_accident_survivors
from backend.domain.dates import add_months, month_start, months_between, yyyymm
from backend.domain.eligibility import CHILD_CUTOFF_YEARS, EDUCATION_CUTOFF_YEARS, count_eligible_children
from backend.domain.numbers import finite, non_negative, round_chf
from backend.domain.prepare import PreparedInputs, prepare_inputs
from backend.domain.regs import RegsRegistry
from backend.domain.resolver import Benefit, Scheme, resolve
from backend.models import TimelineRequest
from backend.schemas.timeline import TimelineMarker, TimelinePoint, TimelineResult

logger = logging.getLogger(__name__)

MAX_MONTHS = 600
DEFAULT_CURRENT_AGE = 40


def retirement_month(
    start: date,
    retirement_age: int,
    birth: Optional[date] = None,
    current_age: Optional[float] = None,
) -> date:
    if birth is not None:
        return month_start(add_months(birth, retirement_age * 12))
    age = finite(current_age, DEFAULT_CURRENT_AGE)
    months = max(0, round_chf((retirement_age - age) * 12))
    return month_start(add_months(start, months))


def build_markers(births: List[date], retirement: date, retirement_age: int) -> List[TimelineMarker]:
    markers: List[TimelineMarker] = []
    for birth in births:
        for years in (CHILD_CUTOFF_YEARS, EDUCATION_CUTOFF_YEARS):
            markers.append(
                TimelineMarker(x=yyyymm(add_months(birth, years * 12)), label=f"Child turns {years}")
            )
    markers.append(TimelineMarker(x=yyyymm(retirement), label=f"Retirement starts (age {retirement_age})"))
    return markers


def _point(t: str, target: float, avs: float = 0.0, lpp: float = 0.0, laa: float = 0.0, p3: float = 0.0) -> TimelinePoint:
    avs, lpp, laa, p3 = (non_negative(value) for value in (avs, lpp, laa, p3))
    target = non_negative(target)
    covered = avs + lpp + laa + p3
    return TimelinePoint(
        t=t,
        target=target,
        covered=covered,
        gap=max(0.0, target - covered),
        avs=avs,
        lpp=lpp,
        laa=laa,
        p3=p3,
    )


class TimelineProjection:
    """Monthly points from ``start`` to ``end`` inclusive, at most ``MAX_MONTHS``."""

    def __init__(self, request: TimelineRequest, prepared: PreparedInputs):
        self.request = request
        self.prepared = prepared
        self.retirement_age = request.retirementStartAge or prepared.regs.avs.retirementAge
        self.retirement = retirement_month(
            request.start, self.retirement_age, prepared.birth_date, request.currentAge
        )

        inputs = prepared.resolver
        self._avs_invalidity = resolve(Scheme.AVS, Benefit.INVALIDITY, inputs).monthly
        self._avs_invalidity_child = resolve(Scheme.AVS, Benefit.INVALIDITY_CHILD, inputs).monthly
        self._lpp_invalidity = resolve(Scheme.LPP, Benefit.INVALIDITY, inputs).monthly
        self._lpp_invalidity_child = resolve(Scheme.LPP, Benefit.INVALIDITY_CHILD, inputs).monthly
        self._avs_widow = resolve(Scheme.AVS, Benefit.SURVIVOR, inputs).monthly
        self._avs_orphan = resolve(Scheme.AVS, Benefit.ORPHAN, inputs).monthly
        self._lpp_widow = resolve(Scheme.LPP, Benefit.SURVIVOR, inputs).monthly
        self._lpp_orphan = resolve(Scheme.LPP, Benefit.ORPHAN, inputs).monthly
        self._avs_old_age = resolve(Scheme.AVS, Benefit.OLD_AGE, inputs).monthly

    def __len__(self) -> int:
        months = months_between(self.request.end, self.request.start) + 1
        if add_months(self.request.start, months - 1) > self.request.end:
            months -= 1
        return max(0, min(MAX_MONTHS, months))

    def __iter__(self) -> Iterator[TimelinePoint]:
        theme = self.request.theme
        for index in range(len(self)):
            month = add_months(self.request.start, index)
            if theme == "disability":
                yield self._disability(month)
            elif theme == "death":
                yield self._death(month)
            else:
                yield self._retirement(month)

    @property
    def markers(self) -> List[TimelineMarker]:
        return build_markers(self.prepared.births, self.retirement, self.retirement_age)

    def _third_pillar(self, benefit: Benefit) -> float:
        return resolve(Scheme.P3, benefit, self.prepared.resolver).monthly

    def _disability(self, month: date) -> TimelinePoint:
        prepared = self.prepared
        children = count_eligible_children(prepared.births, month, prepared.child_cutoff)
        avs = self._avs_invalidity + children * self._avs_invalidity_child
        lpp = self._lpp_invalidity + children * self._lpp_invalidity_child
        laa = 0.0
        if self.request.scenario == "accident":
            laa = coordinate_accident_invalidity(
                prepared.income, avs, self.request.ctx.invalidityDegreePct, prepared.laa
            ).laa_monthly
        return _point(
            yyyymm(month),
            prepared.targets_monthly.invalidity,
            avs=avs,
            lpp=lpp,
            laa=laa,
            p3=self._third_pillar(Benefit.INVALIDITY),
        )

    def _death(self, month: date) -> TimelinePoint:
        prepared = self.prepared
        # orphans always stop at 18 here, education extension or not
        orphans = prepared.eligible_children(month, CHILD_CUTOFF_YEARS)
        avs = (self._avs_widow if prepared.spouse_right else 0.0) + orphans * self._avs_orphan
        lpp = (self._lpp_widow if prepared.partner_right else 0.0) + orphans * self._lpp_orphan
        laa = 0.0
        if self.request.scenario == "accident":
            laa = coordinate_accident_survivors(
                prepared.income, prepared.spouse_right, orphans, avs, prepared.laa
            ).laa_monthly
        return _point(
            yyyymm(month),
            prepared.targets_monthly.death,
            avs=avs,
            lpp=lpp,
            laa=laa,
            p3=self._third_pillar(Benefit.SURVIVOR),
        )

    def _retirement(self, month: date) -> TimelinePoint:
        t = yyyymm(month)
        if t < yyyymm(self.retirement):
            return _point(t, 0.0)
        certified = self.request.lpp.retirementAnnualFromCert
        return _point(
            t,
            self.prepared.targets_monthly.retirement,
            avs=self._avs_old_age,
            lpp=non_negative(certified) / 12,
            p3=self._third_pillar(Benefit.OLD_AGE),
        )

    def result(self) -> TimelineResult:
        return TimelineResult(data=list(self), markers=self.markers)


def project_timeline(
    request: TimelineRequest,
    reference_date: date,
    registry: Optional[RegsRegistry] = None,
) -> TimelineProjection:
    prepared = prepare_inputs(request, reference_date, registry)
    projection = TimelineProjection(request, prepared)
    logger.debug(
        "Timeline %s/%s over %s months, retirement %s",
        request.theme,
        request.scenario,
        len(projection),
        yyyymm(projection.retirement),
    )
    return projection
