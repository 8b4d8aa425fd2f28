from __future__ import annotations

from datetime import date

from backend.core.timeline import MAX_MONTHS, project_timeline, retirement_month
from backend.domain.dates import add_months
from backend.models import TimelineRequest
from backend.schemas.timeline import TimelineMarker

REFERENCE = date(2025, 6, 1)


def load_timeline(**overrides) -> dict:
    request = {
        "annualIncome": 95000,
        "avs": {"invalidityMonthly": 1500, "widowMonthly": 1200, "childMonthly": 500, "oldAgeMonthly": 2000},
        "lpp": {"invalidityMonthly": 2000, "retirementAnnualFromCert": 24000},
        "theme": "disability",
        "start": "2027-01-01",
        "end": "2029-12-01",
    }
    request.update(overrides)
    return request


def project(payload: dict, registry):
    return project_timeline(TimelineRequest.model_validate(payload), REFERENCE, registry)


def by_month(projection) -> dict:
    return {point.t: point for point in projection}


def test_disability_children_drop_out_at_18(registry):
    payload = load_timeline(ctx={"childrenBirthdates": ["2010-03-15"]})

    points = by_month(project(payload, registry))

    # birthdates switch AVS to scale figures: 2520 adult, 1008 per child
    assert (points["2028-02"].avs, points["2028-02"].lpp) == (3528, 2400)
    assert (points["2028-03"].avs, points["2028-03"].lpp) == (2520, 2000)
    assert points["2028-03"].laa == 0
    assert points["2028-03"].covered == 4520
    assert points["2028-03"].gap == 7125 - 4520


def test_projection_is_lazy_and_restartable(registry):
    projection = project(load_timeline(), registry)

    assert len(projection) == 36
    assert next(iter(projection)).t == "2027-01"
    assert list(projection) == list(projection)
    assert projection.result().data[-1].t == "2029-12"


def test_projection_is_capped(registry):
    projection = project(load_timeline(theme="retirement", start="2025-01-01", end="2100-01-01"), registry)

    assert len(projection) == MAX_MONTHS
    assert len(list(projection)) == MAX_MONTHS


def test_end_before_start_is_empty(registry):
    projection = project(load_timeline(start="2027-01-01", end="2026-01-01"), registry)

    assert list(projection) == []


def test_accident_disability_adds_coordinated_laa(registry):
    payload = load_timeline(annualIncome=200000, avs={"invalidityMonthly": 2000}, lpp={}, scenario="accident")

    point = next(iter(project(payload, registry)))

    assert (point.avs, point.laa) == (2000, 9115)


def test_scenario_defaults_to_the_event_cause():
    payload = load_timeline(ctx={"eventInvalidity": "accident", "eventDeath": "sickness"})

    assert TimelineRequest.model_validate(payload).scenario == "accident"
    assert TimelineRequest.model_validate({**payload, "theme": "death"}).scenario == "sickness"
    assert TimelineRequest.model_validate({**payload, "scenario": "sickness"}).scenario == "sickness"


def test_death_uses_children_count_without_birthdates(registry):
    payload = load_timeline(
        theme="death",
        lpp={},
        ctx={"childrenCount": 2, "survivor": {"maritalStatus": "married", "hasChild": True}},
    )

    points = list(project(payload, registry))

    assert {point.avs for point in points} == {2200}
    assert {point.lpp for point in points} == {0}


def test_death_orphans_stop_at_18_even_with_education_extension(registry):
    payload = load_timeline(
        theme="death",
        start="2022-12-01",
        end="2023-01-01",
        lpp={},
        ctx={
            "childrenBirthdates": ["2005-01-01"],
            "extendChildBenefitsTo25": True,
            "survivor": {"maritalStatus": "married", "hasChild": True},
        },
    )

    points = list(project(payload, registry))

    assert [point.avs for point in points] == [2016 + 1008, 2016]


def test_retirement_starts_at_birth_date_plus_65(registry):
    payload = load_timeline(
        theme="retirement",
        start="2034-01-01",
        end="2036-12-01",
        ctx={"birthDateISO": "1970-05-20"},
    )

    projection = project(payload, registry)
    points = by_month(projection)

    assert (points["2035-04"].target, points["2035-04"].covered) == (0, 0)
    assert (points["2035-05"].target, points["2035-05"].avs, points["2035-05"].lpp) == (6333, 2000, 2000)
    assert TimelineMarker(x="2035-05", label="Retirement starts (age 65)") in projection.markers


def test_retirement_month_from_current_age():
    assert retirement_month(date(2025, 1, 1), 65, current_age=60) == date(2030, 1, 1)
    assert retirement_month(date(2025, 1, 1), 65) == date(2050, 1, 1)
    assert retirement_month(date(2025, 1, 1), 64, birth=date(1970, 5, 20)) == date(2034, 5, 1)


def test_child_markers(registry):
    projection = project(load_timeline(ctx={"childrenBirthdates": ["2010-03-15", "garbage"]}), registry)

    labels = [(marker.x, marker.label) for marker in projection.markers]

    assert ("2028-03", "Child turns 18") in labels
    assert ("2035-03", "Child turns 25") in labels
    assert len(labels) == 3


def test_accident_death_adds_coordinated_laa_survivors(registry):
    payload = load_timeline(
        theme="death",
        scenario="accident",
        annualIncome=100000,
        avs={"widowMonthly": 1500, "childMonthly": 600},
        lpp={},
        ctx={"childrenCount": 1, "survivor": {"maritalStatus": "married", "hasChild": True}},
    )

    points = list(project(payload, registry))

    # spouse 40% + orphan 15% of 100000 is under the family cap and the AVS room
    assert {(point.avs, point.laa) for point in points} == {(2100, 4583)}
    assert {point.covered for point in points} == {2100 + 4583}


def test_far_future_dates_are_clamped(registry):
    projection = project(load_timeline(ctx={"childrenBirthdates": ["9990-01-01"]}), registry)

    assert len(list(projection)) == 36
    assert ("9999-12", "Child turns 18") in [(marker.x, marker.label) for marker in projection.markers]
    assert retirement_month(date(2025, 1, 1), 65, birth=date(9990, 1, 1)) == date(9999, 12, 1)
    assert retirement_month(date(2025, 1, 1), 65, current_age=-1e9) == date(9999, 12, 1)
    assert add_months(date(1, 3, 31), -10) == date(1, 1, 31)
