"""Common fixtures and utilities"""

import pytest

import tputfmt
from tputfmt.testutil import FakeResolver


@pytest.fixture(autouse=True)
def clean_env_fixture(monkeypatch):
    for var in ("NO_COLOR", "TPUTFMT_RESOLVER", "TPUTFMT_STYLES", "TPUTFMT_FORCE"):
        monkeypatch.delenv(var, raising=False)
    tputfmt.reset_default()
    yield
    tputfmt.reset_default()


@pytest.fixture(name="resolver")
def resolver_fixture():
    return FakeResolver(colors=256)
