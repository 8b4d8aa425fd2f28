from __future__ import annotations

import pytest
from pydantic import ValidationError

from backend.domain.regs import Regulations, RegistryError, RegsRegistry, load_registry


def test_packaged_registry_has_current_year(registry: RegsRegistry):
    regs = registry.for_year(2025)

    assert regs.year == 2025
    assert regs.laa.insuredEarningsMax == 148200
    assert regs.lpp.minConversionRatePct == 6.8
    assert regs.avs.fullCareerYears == 44
    assert len(regs.avs.scale) == 51


def test_year_pick_prefers_exact_then_earlier_then_latest():
    registry = RegsRegistry({2024: Regulations(year=2024), 2026: Regulations(year=2026)})

    assert registry.for_year(2026).year == 2026
    assert registry.for_year(2025).year == 2024
    assert registry.for_year(2031).year == 2026
    assert registry.for_year(2010).year == 2026


def test_regulations_are_read_only(registry: RegsRegistry):
    regs = registry.for_year(2025)

    with pytest.raises(ValidationError):
        regs.year = 1999


def test_empty_directory_is_a_configuration_error(tmp_path):
    with pytest.raises(RegistryError):
        load_registry(tmp_path)


def test_malformed_pack_is_a_configuration_error(tmp_path):
    (tmp_path / "regs_2025.json").write_text('{"year": "soon"}', encoding="utf-8")

    with pytest.raises(RegistryError):
        load_registry(tmp_path)
