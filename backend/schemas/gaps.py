"""Data contracts for coverage-gap results."""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SegmentSource = Literal["AVS", "LPP", "LAA", "P3"]


class GapSegment(BaseModel):
    """Monthly amount contributed by one scheme to a stack."""

    model_config = ConfigDict(frozen=True)

    label: str
    value: float = Field(..., ge=0)
    source: SegmentSource
    estimated: bool = False


class GapStack(BaseModel):
    model_config = ConfigDict(frozen=True)

    target: float = Field(..., ge=0)
    segments: List[GapSegment]
    covered: float = Field(..., ge=0)
    gap: float = Field(..., ge=0)


class NeedTargets(BaseModel):
    """Clamped target percentages of the annual income."""

    model_config = ConfigDict(frozen=True)

    invalidityPctTarget: float
    deathPctTarget: float
    retirementPctTarget: float


class TargetsMonthly(BaseModel):
    model_config = ConfigDict(frozen=True)

    invalidity: float
    death: float
    retirement: float


class InvalidityGaps(BaseModel):
    model_config = ConfigDict(frozen=True)

    sickness: GapStack = Field(..., serialization_alias="maladie")
    accident: GapStack
    current: GapStack


class DeathGaps(BaseModel):
    model_config = ConfigDict(frozen=True)

    sickness: GapStack = Field(..., serialization_alias="maladie")
    accident: GapStack
    current: GapStack
    capital: Optional[float] = Field(None, ge=0, description="LPP lump sum paid on death.")


class GapsResult(BaseModel):
    """Coverage per life event; ``current`` follows the cause chosen in the context.

    Sickness stacks are dumped under ``maladie`` with ``by_alias=True``.
    """

    model_config = ConfigDict(frozen=True)

    targetsPct: NeedTargets
    targetsMonthly: TargetsMonthly
    invalidity: InvalidityGaps
    death: DeathGaps
    retirement: GapStack
