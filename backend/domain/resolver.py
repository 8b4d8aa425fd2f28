"""Benefit resolution through ordered fallback chains.

Each (scheme, benefit) pair owns a list of candidates tried in priority
order; the first one yielding a usable amount wins and its source tells
whether the figure is sourced (certificate, caller) or estimated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from backend.domain.avs import ScaleFigures
from backend.domain.lpp import capital_proxy_monthly, conversion_rate, invalidity_minimum_monthly
from backend.domain.numbers import finite, pct, round_chf
from backend.domain.regs import Regulations
from backend.models import AvsInputs, LppInputs, ThirdPillar

logger = logging.getLogger(__name__)


class Scheme(str, Enum):
    AVS = "AVS"
    LPP = "LPP"
    LAA = "LAA"
    P3 = "P3"


class Benefit(str, Enum):
    INVALIDITY = "invalidity"
    INVALIDITY_CHILD = "invalidity_child"
    SURVIVOR = "survivor"
    ORPHAN = "orphan"
    OLD_AGE = "old_age"


class BenefitSource(str, Enum):
    CERTIFICATE = "certificate"
    DECLARED = "declared"
    LEGAL_MINIMUM = "legal_minimum"
    CAPITAL_PROXY = "capital_proxy"
    LEGAL_DEFAULT = "legal_default"
    CAREER_PROJECTION = "career_projection"
    NONE = "none"


SOURCED = frozenset({BenefitSource.CERTIFICATE, BenefitSource.DECLARED, BenefitSource.NONE})


@dataclass(frozen=True)
class Resolved:
    monthly: float
    source: BenefitSource

    @property
    def estimated(self) -> bool:
        return self.source not in SOURCED


NOTHING = Resolved(monthly=0.0, source=BenefitSource.NONE)


@dataclass(frozen=True)
class Candidate:
    """One fallback step. ``accept_zero`` lets an explicit zero win."""

    source: BenefitSource
    compute: Callable[[], Optional[float]]
    accept_zero: bool = False


def resolve_first(candidates: Sequence[Candidate]) -> Resolved:
    for candidate in candidates:
        raw = candidate.compute()
        if raw is None:
            continue
        value = finite(raw)
        if value > 0 or (candidate.accept_zero and value == 0):
            return Resolved(monthly=value, source=candidate.source)
    return NOTHING


@dataclass(frozen=True)
class ResolverInputs:
    avs: AvsInputs
    lpp: LppInputs
    regs: Regulations
    third_pillar: Optional[ThirdPillar] = None
    figures: Optional[ScaleFigures] = None
    birth_known: bool = False
    cache: Dict[Tuple[Scheme, Benefit], Resolved] = field(default_factory=dict, compare=False)


ChainBuilder = Callable[[ResolverInputs], List[Candidate]]


def _value(amount: Optional[float]) -> Callable[[], Optional[float]]:
    return lambda: amount


def _share_of(scheme: Scheme, benefit: Benefit, percent: float, inputs: ResolverInputs):
    def compute() -> Optional[float]:
        base = resolve(scheme, benefit, inputs).monthly
        return round_chf(pct(base, percent)) if base > 0 else None

    return compute


def _lpp_invalidity(inputs: ResolverInputs) -> List[Candidate]:
    lpp, rules = inputs.lpp, inputs.regs.lpp
    return [
        Candidate(BenefitSource.CERTIFICATE, _value(lpp.invalidityMonthly)),
        Candidate(BenefitSource.LEGAL_MINIMUM, lambda: invalidity_minimum_monthly(lpp.invalidityMin, rules)),
        Candidate(BenefitSource.CAPITAL_PROXY, lambda: capital_proxy_monthly(lpp, rules)),
    ]


def _lpp_child_chain(certified: Optional[float], percent: float, inputs: ResolverInputs) -> List[Candidate]:
    return [
        Candidate(BenefitSource.CERTIFICATE, _value(certified)),
        Candidate(BenefitSource.LEGAL_DEFAULT, _share_of(Scheme.LPP, Benefit.INVALIDITY, percent, inputs)),
    ]


def _lpp_invalidity_child(inputs: ResolverInputs) -> List[Candidate]:
    return _lpp_child_chain(inputs.lpp.invalidityChildMonthly, inputs.regs.lpp.invalidityChildPct, inputs)


def _lpp_orphan(inputs: ResolverInputs) -> List[Candidate]:
    return _lpp_child_chain(inputs.lpp.orphanMonthly, inputs.regs.lpp.orphanPct, inputs)


def _lpp_survivor(inputs: ResolverInputs) -> List[Candidate]:
    return _lpp_child_chain(inputs.lpp.widowMonthly, inputs.regs.lpp.widowPct, inputs)


def _lpp_old_age(inputs: ResolverInputs) -> List[Candidate]:
    lpp = inputs.lpp
    annual = lpp.retirementAnnualFromCert

    def from_capital() -> Optional[float]:
        if lpp.capitalAt65FromCert is None:
            return None
        return round_chf(pct(finite(lpp.capitalAt65FromCert), conversion_rate(lpp, inputs.regs.lpp)) / 12)

    return [
        Candidate(
            BenefitSource.CERTIFICATE,
            lambda: round_chf(finite(annual) / 12) if annual is not None else None,
            accept_zero=True,
        ),
        Candidate(BenefitSource.CAPITAL_PROXY, from_capital),
    ]


def _career(inputs: ResolverInputs, attribute: str) -> List[Candidate]:
    if inputs.figures is None:
        return []
    return [Candidate(BenefitSource.CAREER_PROJECTION, _value(getattr(inputs.figures, attribute)))]


def _avs_invalidity(inputs: ResolverInputs) -> List[Candidate]:
    return _career(inputs, "invalidity") + [
        Candidate(BenefitSource.DECLARED, _value(inputs.avs.invalidityMonthly), accept_zero=True),
    ]


def _avs_invalidity_child(inputs: ResolverInputs) -> List[Candidate]:
    return _career(inputs, "invalidity_child") + [
        Candidate(BenefitSource.DECLARED, _value(inputs.avs.invalidityChildMonthly), accept_zero=True),
        Candidate(
            BenefitSource.LEGAL_DEFAULT,
            _share_of(Scheme.AVS, Benefit.INVALIDITY, inputs.regs.avs.invalidityChildPct, inputs),
        ),
    ]


def _avs_survivor(inputs: ResolverInputs) -> List[Candidate]:
    return _career(inputs, "widow") + [
        Candidate(BenefitSource.DECLARED, _value(inputs.avs.widowMonthly), accept_zero=True),
    ]


def _avs_orphan(inputs: ResolverInputs) -> List[Candidate]:
    return _career(inputs, "child") + [
        Candidate(BenefitSource.DECLARED, _value(inputs.avs.childMonthly), accept_zero=True),
    ]


def _avs_old_age(inputs: ResolverInputs) -> List[Candidate]:
    # projection to retirement only beats the caller's figure when the birth date is known
    projected = _career(inputs, "old_age")
    declared = [Candidate(BenefitSource.DECLARED, _value(inputs.avs.oldAgeMonthly), accept_zero=True)]
    if inputs.birth_known:
        return projected + declared
    return declared + projected


def _third_pillar(attribute: str) -> ChainBuilder:
    def build(inputs: ResolverInputs) -> List[Candidate]:
        if inputs.third_pillar is None:
            return []
        return [Candidate(BenefitSource.DECLARED, _value(getattr(inputs.third_pillar, attribute)))]

    return build


CHAINS: Dict[Tuple[Scheme, Benefit], ChainBuilder] = {
    (Scheme.AVS, Benefit.INVALIDITY): _avs_invalidity,
    (Scheme.AVS, Benefit.INVALIDITY_CHILD): _avs_invalidity_child,
    (Scheme.AVS, Benefit.SURVIVOR): _avs_survivor,
    (Scheme.AVS, Benefit.ORPHAN): _avs_orphan,
    (Scheme.AVS, Benefit.OLD_AGE): _avs_old_age,
    (Scheme.LPP, Benefit.INVALIDITY): _lpp_invalidity,
    (Scheme.LPP, Benefit.INVALIDITY_CHILD): _lpp_invalidity_child,
    (Scheme.LPP, Benefit.SURVIVOR): _lpp_survivor,
    (Scheme.LPP, Benefit.ORPHAN): _lpp_orphan,
    (Scheme.LPP, Benefit.OLD_AGE): _lpp_old_age,
    (Scheme.P3, Benefit.INVALIDITY): _third_pillar("invalidityMonthly"),
    (Scheme.P3, Benefit.SURVIVOR): _third_pillar("deathMonthly"),
    (Scheme.P3, Benefit.OLD_AGE): _third_pillar("retirementMonthly"),
}


def resolve(scheme: Scheme, benefit: Benefit, inputs: ResolverInputs) -> Resolved:
    """Monthly amount for one benefit; LAA is coordinated elsewhere and resolves to zero."""
    key = (scheme, benefit)
    if key in inputs.cache:
        return inputs.cache[key]
    builder = CHAINS.get(key)
    resolved = resolve_first(builder(inputs)) if builder is not None else NOTHING
    logger.debug("Resolved %s %s from %s: %s", scheme.value, benefit.value, resolved.source.value, resolved.monthly)
    inputs.cache[key] = resolved
    return resolved
