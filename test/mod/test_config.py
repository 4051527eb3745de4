#
# Test for the tputfmt.config
#
import pytest

from tputfmt import config


@pytest.mark.parametrize("env,expected", [
    # implicit false
    ("", False),
    # explicit true
    ("1", True),
    ("true", True),
    ("t", True),
    ("TRUE", True),
    # explicit false
    ("false", False),
    ("0", False),
    ("f", False),
    ("F", False),
    ("FALSE", False),
])
def test_force(monkeypatch, env, expected):
    monkeypatch.setenv("TPUTFMT_FORCE", env)
    assert config.force() == expected


def test_force_invalid(monkeypatch):
    monkeypatch.setenv("TPUTFMT_FORCE", "maybe")
    with pytest.raises(RuntimeError, match="unsupported bool value 'maybe'"):
        config.force()


def test_explicit_environ():
    assert config.get_bool("X", {"X": "1"})
    assert not config.get_bool("X", {})
    assert config.get_string("X", {}) == ""
    assert config.get_string("X", {"X": "val"}) == "val"


@pytest.mark.parametrize("env,expected", [
    ({}, False),
    ({"NO_COLOR": ""}, False),
    ({"NO_COLOR": "1"}, True),
    ({"NO_COLOR": "anything"}, True),
])
def test_no_color(env, expected):
    assert config.no_color(env) == expected


def test_styles_path(monkeypatch):
    assert config.styles_path() is None
    monkeypatch.setenv("TPUTFMT_STYLES", "/etc/tputfmt.json")
    assert config.styles_path() == "/etc/tputfmt.json"
