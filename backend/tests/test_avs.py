from __future__ import annotations

import math
from datetime import date

from backend.domain.avs import (
    career_coefficient,
    career_override_active,
    compute_scale_figures,
    pick_scale_row,
    projected_coefficient,
    ramd_proxy,
    years_with_child_under_16,
)
from backend.models import AvsCareer, EventContext


def test_career_coefficient_counts_years_since_start_minus_gaps():
    career = AvsCareer(startWorkYearCH=2005, missingYears=[2010])

    assert math.isclose(career_coefficient(career, 2025), 20 / 44)


def test_career_coefficient_without_start_uses_44_year_window():
    career = AvsCareer(missingYears=[1970, 2000, 2024])

    assert math.isclose(career_coefficient(career, 2025), 42 / 44)


def test_career_coefficient_is_capped_at_full_career():
    assert career_coefficient(AvsCareer(startWorkYearCH=1970), 2025) == 1.0
    assert career_coefficient(None, 2025) == 1.0


def test_projection_adds_years_left_until_65():
    career = AvsCareer(startWorkYearCH=2015)

    assert math.isclose(projected_coefficient(career, date(1960, 1, 1), 2025), 11 / 44)
    assert projected_coefficient(AvsCareer(startWorkYearCH=2005), date(1985, 3, 10), 2025) == 1.0
    assert math.isclose(projected_coefficient(career, None, 2025), 11 / 44)


def test_education_years_stop_before_16():
    assert years_with_child_under_16([date(2000, 4, 1)], 2025) == set(range(2000, 2016))
    assert years_with_child_under_16([date(2015, 5, 1)], 2025) == set(range(2015, 2026))


def test_ramd_proxy_averages_credits(regs):
    births = [date(2015, 5, 1)]

    assert ramd_proxy(60000, 2025, regs.avs) == 60000
    assert math.isclose(ramd_proxy(60000, 2025, regs.avs, "single", births), 60000 + 45360 * 11 / 22)
    assert math.isclose(ramd_proxy(60000, 2025, regs.avs, "married", births), 60000 + 0.5 * 45360 * 11 / 22)


def test_scale_row_is_an_income_floor(regs):
    rows = regs.avs.scale

    assert pick_scale_row(rows, 10000).income == 15120
    assert pick_scale_row(rows, 45360).income == 45360
    assert pick_scale_row(rows, 50000).income == 49896
    assert pick_scale_row(rows, 200000).income == 90720
    assert pick_scale_row([], 50000) is None


def test_override_needs_career_data_or_birthdates():
    assert career_override_active(EventContext()) is False
    assert career_override_active(EventContext(avsCareer=AvsCareer())) is False
    assert career_override_active(EventContext(avsCareer=AvsCareer(missingYears=[2020]))) is True
    assert career_override_active(EventContext(childrenBirthdates=["2018-04"])) is True
    assert career_override_active(EventContext(childrenBirthdates=["not a date"])) is False


def test_scale_figures_weighted_by_career(regs):
    ctx = EventContext(avsCareer=AvsCareer(startWorkYearCH=2005))

    figures = compute_scale_figures(120000, ctx, regs.avs, 2025)

    assert figures.matched_income == 90720
    assert figures.invalidity == 1203
    assert figures.child == 481
    assert figures.old_age == figures.invalidity
    assert math.isclose(figures.coefficient, 21 / 44)
