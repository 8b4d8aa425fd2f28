"""Data contracts for the monthly coverage timeline."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class TimelinePoint(BaseModel):
    """Coverage for one month (``t`` formatted ``YYYY-MM``)."""

    model_config = ConfigDict(frozen=True)

    t: str
    target: float = Field(..., ge=0)
    covered: float = Field(..., ge=0)
    gap: float = Field(..., ge=0)
    avs: float = Field(0.0, ge=0)
    lpp: float = Field(0.0, ge=0)
    laa: float = Field(0.0, ge=0)
    p3: float = Field(0.0, ge=0)


class TimelineMarker(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: str
    label: str


class TimelineResult(BaseModel):
    data: List[TimelinePoint]
    markers: List[TimelineMarker]
