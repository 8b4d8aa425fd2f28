from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

EventKind = Literal["sickness", "accident"]
Theme = Literal["disability", "death", "retirement"]
Sex = Literal["F", "M"]
MaritalStatus = Literal[
    "single",
    "married",
    "divorced",
    "registered_partnership",
    "cohabiting",
    "widowed",
]


class NeedTargetsInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    invalidityPctTarget: Optional[float] = None
    deathPctTarget: Optional[float] = None
    retirementPctTarget: Optional[float] = None


class AvsInputs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    invalidityMonthly: float = 0.0
    invalidityChildMonthly: Optional[float] = None
    widowMonthly: float = 0.0
    childMonthly: float = 0.0
    oldAgeMonthly: Optional[float] = None


class LppInvalidityMinInputs(BaseModel):
    """Inputs of the legal minimum LPP invalidity pension (no interest)."""

    model_config = ConfigDict(extra="forbid")

    year: Optional[int] = None
    ageYears: Optional[float] = None
    sex: Optional[Sex] = None
    coordinatedSalary: Optional[float] = None
    currentAssets: Optional[float] = None


class LppInputs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    invalidityMonthly: Optional[float] = None
    invalidityChildMonthly: Optional[float] = None
    widowMonthly: Optional[float] = None
    orphanMonthly: Optional[float] = None
    deathCapital: Optional[float] = None
    retirementAnnualFromCert: Optional[float] = None
    capitalAt65FromCert: Optional[float] = None
    minConversionRatePct: Optional[float] = None
    invalidityMin: Optional[LppInvalidityMinInputs] = None


class LaaParams(BaseModel):
    """LAA regulatory constants; percentages are expressed as 0..100."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    insuredEarningsMax: float = 148200
    disabilityPctFull: float = 80
    overallCapPct: float = 90
    spousePct: float = 40
    orphanPct: float = 15
    familyCapPct: float = 70


class SurvivorContext(BaseModel):
    model_config = ConfigDict(extra="forbid")

    maritalStatus: MaritalStatus = "single"
    hasChild: bool = False
    ageAtWidowhood: Optional[float] = None
    marriageYears: Optional[float] = None
    marriedSince5y: Optional[bool] = None
    cohabitationYears: Optional[float] = None
    partnerDesignated: bool = False


class AvsCareer(BaseModel):
    """User-supplied AVS career data; any of it switches AVS to local estimates."""

    model_config = ConfigDict(extra="forbid")

    startWorkYearCH: Optional[int] = None
    missingYears: List[int] = Field(default_factory=list)
    caregivingYears: List[int] = Field(default_factory=list)


class EventContext(BaseModel):
    model_config = ConfigDict(extra="forbid")

    eventInvalidity: EventKind = "sickness"
    eventDeath: EventKind = "sickness"
    invalidityDegreePct: float = 100
    childrenCount: int = 0
    childrenBirthdates: List[Optional[str]] = Field(default_factory=list)
    extendChildBenefitsTo25: bool = False
    survivor: SurvivorContext = Field(default_factory=SurvivorContext)
    avsCareer: Optional[AvsCareer] = None
    birthDateISO: Optional[str] = None

    @field_validator("childrenBirthdates", mode="before")
    @classmethod
    def none_means_no_birthdates(cls, value):
        return [] if value is None else value


class ThirdPillar(BaseModel):
    model_config = ConfigDict(extra="forbid")

    invalidityMonthly: Optional[float] = None
    deathMonthly: Optional[float] = None
    retirementMonthly: Optional[float] = None


class GapsRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    annualIncome: float = 0.0
    targets: NeedTargetsInput = Field(default_factory=NeedTargetsInput)
    avs: AvsInputs = Field(default_factory=AvsInputs)
    lpp: LppInputs = Field(default_factory=LppInputs)
    laaParams: Optional[LaaParams] = None
    ctx: EventContext = Field(default_factory=EventContext)
    thirdPillar: Optional[ThirdPillar] = None
    referenceDate: Optional[date] = None


class TimelineRequest(GapsRequest):
    theme: Theme
    scenario: EventKind = "sickness"
    start: date
    end: date
    retirementStartAge: Optional[int] = None
    currentAge: Optional[float] = None

    @model_validator(mode="after")
    def default_scenario_from_event(self) -> "TimelineRequest":
        if "scenario" not in self.model_fields_set:
            if self.theme == "disability":
                self.scenario = self.ctx.eventInvalidity
            elif self.theme == "death":
                self.scenario = self.ctx.eventDeath
        return self
