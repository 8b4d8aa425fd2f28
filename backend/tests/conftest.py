from __future__ import annotations

from datetime import date

import pytest
from flask.testing import FlaskClient

from backend.app import create_app
from backend.config import PACKAGED_REGS_DIR
from backend.domain.regs import RegsRegistry, load_registry

REFERENCE = date(2025, 6, 1)


@pytest.fixture()
def client() -> FlaskClient:
    flask_app = create_app()
    flask_app.config.update(TESTING=True)
    with flask_app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="session")
def registry() -> RegsRegistry:
    return load_registry(PACKAGED_REGS_DIR)


@pytest.fixture()
def regs(registry: RegsRegistry):
    return registry.for_year(REFERENCE.year)
