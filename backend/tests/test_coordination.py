from __future__ import annotations

import math

import pytest

from backend.domain.coordination import (
    clamp_degree,
    coordinate_accident_invalidity,
    coordinate_accident_survivors,
    coordinate_sickness,
)
from backend.models import LaaParams

LAA = LaaParams()


def test_sickness_is_additive_even_above_income():
    assert coordinate_sickness([3000, 5000, 2000.5]) == 10000.5
    assert coordinate_sickness([1000, -50, float("inf")]) == 1000


def test_accident_invalidity_high_income():
    result = coordinate_accident_invalidity(200000, 0, 100, LAA)

    assert result.insured_annual == 148200
    assert math.isclose(result.nominal_annual, 118560)
    assert math.isclose(result.cap_annual, 133380)
    assert result.laa_monthly == 9880
    assert result.total_monthly == 9880


def test_laa_only_tops_up_ai_to_the_cap():
    result = coordinate_accident_invalidity(200000, 2000, 100, LAA)

    # cap 133380 - AI 24000 leaves 109380 of the 118560 nominal
    assert result.laa_monthly == 9115
    assert result.total_monthly == 11115
    assert result.total_monthly <= result.cap_monthly


@pytest.mark.parametrize("income", [0, 30000, 80000, 148200, 250000])
@pytest.mark.parametrize("degree", [40, 55, 100])
@pytest.mark.parametrize("ai_monthly", [0, 1000, 2000])
def test_ai_plus_laa_never_exceeds_the_cap(income, degree, ai_monthly):
    result = coordinate_accident_invalidity(income, ai_monthly, degree, LAA)

    if ai_monthly * 12 <= result.cap_annual:
        assert result.total_monthly <= math.floor(min(income, 148200) * 90 / 100 / 12 + 0.5)
    else:
        assert result.laa_monthly == 0


def test_degree_is_clamped():
    assert clamp_degree(10) == 40
    assert clamp_degree(150) == 100
    assert clamp_degree(float("nan")) == 100


def test_survivors_within_family_cap():
    result = coordinate_accident_survivors(100000, True, 2, 0, LAA)

    assert math.isclose(result.nominal_annual, 70000)
    assert result.laa_monthly == 5833
    assert result.spouse_monthly == 3333
    assert result.orphans_monthly == 2500


def test_family_cap_scales_shares_proportionally():
    result = coordinate_accident_survivors(100000, True, 4, 0, LAA)

    assert math.isclose(result.nominal_annual, 70000)
    assert result.spouse_monthly == 2333
    assert result.orphans_monthly == 3500


def test_survivors_coordinate_with_avs():
    result = coordinate_accident_survivors(100000, True, 2, 5000, LAA)

    assert math.isclose(result.payable_annual, 30000)
    assert math.isclose(result.prorata, 30000 / 70000)
    assert result.laa_monthly == 2500


def test_no_beneficiary_gives_zero_without_dividing_by_zero():
    result = coordinate_accident_survivors(100000, False, 0, 0, LAA)

    assert result.prorata == 0
    assert result.laa_monthly == 0


def test_rounded_ai_and_laa_stay_within_the_cap():
    result = coordinate_accident_invalidity(12000, 100.5, 100, LAA)

    assert result.cap_monthly == 900
    assert (result.ai_monthly, result.laa_monthly) == (101, 799)
    assert result.ai_monthly + result.laa_monthly == result.total_monthly == 900
