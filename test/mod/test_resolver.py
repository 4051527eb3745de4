#
# Tests for the 'tputfmt.resolver' module.
#
import curses
import shutil
import subprocess
import textwrap

import pytest

from tputfmt import resolver
from tputfmt.resolver import (Attribute, NullResolver, TerminfoResolver,
                              TputResolver, detect)
from tputfmt.testutil import has_executable, mock_command

FAKE_TPUT = textwrap.dedent("""\
#!/bin/sh
if [ "$1" = "-T" ]; then shift 2; fi
case "$1" in
  colors) echo 256 ;;
  setaf) printf '<fg%s>' "$2" ;;
  setab) printf '<bg%s>' "$2" ;;
  sgr0) printf '<reset>' ;;
  bold) printf '<bold>' ;;
  *) exit 1 ;;
esac
""")

# 8-bit controls: CSI is the single byte 0x9b
FAKE_TPUT_8BIT = textwrap.dedent("""\
#!/bin/sh
if [ "$1" = "-T" ]; then shift 2; fi
case "$1" in
  colors) echo 256 ;;
  setaf) printf '\\2333%sm' "$2" ;;
  setab) printf '\\2334%sm' "$2" ;;
  *) printf '\\233m' ;;
esac
""")


@pytest.fixture(autouse=True)
def terminfo_state_fixture(monkeypatch):
    monkeypatch.setattr(TerminfoResolver, "_setup_term", None)


def has_terminfo(term):
    if not has_executable("infocmp"):
        return False
    r = subprocess.run(["infocmp", term], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL, check=False)
    return r.returncode == 0


def test_attribute_lookup():
    assert Attribute.lookup("bold") is Attribute.BOLD
    assert Attribute.lookup("Reverse") is Attribute.REVERSE
    assert Attribute.lookup(Attribute.DIM) is Attribute.DIM
    assert Attribute.lookup("nonexistent") is None
    assert Attribute.lookup(None) is None


def test_attribute_capnames():
    assert {a.name.lower(): a.capname for a in Attribute} == {
        "reset": "sgr0",
        "bold": "bold",
        "dim": "dim",
        "standout": "smso",
        "italic": "sitm",
        "underline": "smul",
        "blink": "blink",
        "reverse": "rev",
    }


def test_null_resolver():
    r = NullResolver()
    assert not r.available
    assert r.colors() == 0
    assert r.set_foreground(1) == ""
    assert r.set_background(1) == ""
    for attr in Attribute:
        assert r.attribute(attr) == ""


def test_tput_resolver():
    with mock_command("tput", FAKE_TPUT) as mocked_cmd:
        r = TputResolver("xterm-256color")
        assert r.colors() == 256
        assert r.set_foreground(2) == "<fg2>"
        assert r.set_background(0) == "<bg0>"
        assert r.attribute(Attribute.RESET) == "<reset>"
        assert r.attribute(Attribute.BOLD) == "<bold>"
        assert mocked_cmd.call_args_list == [
            ["-T", "xterm-256color", "colors"],
            ["-T", "xterm-256color", "setaf", "2"],
            ["-T", "xterm-256color", "setab", "0"],
            ["-T", "xterm-256color", "sgr0"],
            ["-T", "xterm-256color", "bold"],
        ]


def test_tput_resolver_without_term():
    with mock_command("tput", FAKE_TPUT) as mocked_cmd:
        r = TputResolver()
        assert r.set_foreground(9) == "<fg9>"
        assert mocked_cmd.call_args_list == [["setaf", "9"]]


def test_tput_resolver_unsupported():
    with mock_command("tput", FAKE_TPUT):
        r = TputResolver("xterm")
        assert r.attribute(Attribute.ITALIC) == ""


@pytest.mark.parametrize("script", [
    "exit 3\n",
    "echo not-a-number\n",
    "",
])
def test_tput_resolver_bad_colors(script):
    with mock_command("tput", script):
        assert TputResolver("xterm").colors() == 0


def test_tput_resolver_missing_binary(tmp_path):
    r = TputResolver("xterm", tput=str(tmp_path / "no-such-tput"))
    assert r.colors() == 0
    assert r.set_foreground(1) == ""
    assert r.attribute(Attribute.BOLD) == ""


@pytest.mark.skipif(not has_executable("tput") or not has_terminfo("xterm-256color"),
                    reason="need tput and the xterm-256color terminfo entry")
def test_tput_resolver_real():
    r = TputResolver("xterm-256color")
    assert r.colors() == 256
    assert r.set_foreground(2) == "\x1b[32m"
    assert r.set_background(0) == "\x1b[40m"
    assert r.attribute(Attribute.BOLD) == "\x1b[1m"


def test_terminfo_resolver_setup_failure(monkeypatch):
    def fail(*_args):
        raise curses.error("setupterm: could not find terminal")

    monkeypatch.setattr(curses, "setupterm", fail)
    r = TerminfoResolver("no-such-terminal")
    assert not r.available
    assert r.colors() == 0
    assert r.set_foreground(1) == ""
    assert r.attribute(Attribute.BOLD) == ""


def test_terminfo_resolver_missing_capability(monkeypatch):
    monkeypatch.setattr(curses, "setupterm", lambda *_args: None)
    monkeypatch.setattr(curses, "tigetstr", lambda _cap: None)
    monkeypatch.setattr(curses, "tigetnum", lambda _cap: -1)
    r = TerminfoResolver("vt52")
    assert r.available
    assert r.colors() == 0
    assert r.set_background(3) == ""
    assert r.attribute(Attribute.ITALIC) == ""


def test_terminfo_resolver_parametrized(monkeypatch):
    monkeypatch.setattr(curses, "setupterm", lambda *_args: None)
    monkeypatch.setattr(curses, "tigetstr", lambda cap: f"[{cap}]".encode())
    monkeypatch.setattr(curses, "tparm", lambda cap, *params: cap + repr(params).encode())
    monkeypatch.setattr(curses, "tigetnum", lambda _cap: 88)
    r = TerminfoResolver("rxvt-88color")
    assert r.colors() == 88
    assert r.set_foreground(5) == "[setaf](5,)"
    assert r.attribute(Attribute.UNDERLINE) == "[smul]"


@pytest.mark.skipif(not has_terminfo("xterm-256color"), reason="need the xterm-256color terminfo entry")
def test_terminfo_resolver_real():
    r = TerminfoResolver("xterm-256color")
    assert r.available
    assert TerminfoResolver._setup_term == "xterm-256color"
    assert r.colors() == 256
    assert r.set_foreground(2) == "\x1b[32m"
    assert r.set_background(0) == "\x1b[40m"


@pytest.mark.parametrize("env", [
    {},
    {"TERM": ""},
    {"TERM": "dumb"},
    {"TERM": "xterm", "NO_COLOR": "1"},
    {"TERM": "xterm", "TPUTFMT_RESOLVER": "null"},
])
def test_detect_null(env):
    assert isinstance(detect(env), NullResolver)


def test_detect_tput():
    with mock_command("tput", FAKE_TPUT):
        r = detect({"TERM": "xterm-256color"})
    assert isinstance(r, TputResolver)
    assert r.term == "xterm-256color"
    assert resolver.describe(r) == {"resolver": "tput", "term": "xterm-256color"}


def test_detect_tput_missing(tmp_path):
    r = detect({"TERM": "xterm", "PATH": str(tmp_path)})
    assert isinstance(r, NullResolver)


def test_detect_terminfo(monkeypatch):
    monkeypatch.setattr(curses, "setupterm", lambda *_args: None)
    r = detect({"TERM": "xterm", "TPUTFMT_RESOLVER": "terminfo"})
    assert isinstance(r, TerminfoResolver)
    assert r.term == "xterm"


def test_detect_unknown_backend():
    with pytest.raises(ValueError, match="unknown resolver 'magic'"):
        detect({"TERM": "xterm", "TPUTFMT_RESOLVER": "magic"})


def test_tput_resolver_8bit_controls():
    with mock_command("tput", FAKE_TPUT_8BIT):
        r = TputResolver("xterm-8bit")
        seq = r.set_foreground(1)
        assert seq.encode("utf-8", "surrogateescape") == b"\x9b31m"
        assert r.set_background(0).encode("utf-8", "surrogateescape") == b"\x9b40m"
        assert r.attribute(Attribute.RESET).encode("utf-8", "surrogateescape") == b"\x9bm"


def test_terminfo_resolver_8bit_controls(monkeypatch):
    monkeypatch.setattr(curses, "setupterm", lambda *_args: None)
    monkeypatch.setattr(curses, "tigetstr", lambda _cap: b"\x9b1m")
    r = TerminfoResolver("xterm-8bit")
    assert r.attribute(Attribute.BOLD).encode("utf-8", "surrogateescape") == b"\x9b1m"


def test_terminfo_resolver_remembers_first_term(monkeypatch, caplog):
    monkeypatch.setattr(curses, "setupterm", lambda *_args: None)
    caplog.set_level("DEBUG", logger="tputfmt.resolver")

    TerminfoResolver("xterm-256color")
    assert TerminfoResolver._setup_term == "xterm-256color"
    assert "already set up" not in caplog.text

    TerminfoResolver("xterm-256color")
    assert "already set up" not in caplog.text

    TerminfoResolver("vt100")
    assert TerminfoResolver._setup_term == "xterm-256color"
    assert "terminfo already set up for 'xterm-256color', 'vt100' is ignored" in caplog.text


def test_terminfo_resolver_failed_setup_is_not_remembered(monkeypatch):
    def fail(*_args):
        raise curses.error("setupterm: could not find terminal")

    monkeypatch.setattr(curses, "setupterm", fail)
    TerminfoResolver("no-such-terminal")
    assert TerminfoResolver._setup_term is None


def test_detect_tput_uses_resolved_path():
    with mock_command("tput", FAKE_TPUT):
        found = shutil.which("tput")
        r = detect({"TERM": "xterm-256color"})
        assert r.tput == found
        assert r.colors() == 256


def test_detect_tput_from_given_path(tmp_path):
    tput = tmp_path / "tput"
    tput.write_text(FAKE_TPUT, encoding="utf8")
    tput.chmod(0o755)
    # the process PATH does not contain tmp_path, only the given environment does
    r = detect({"TERM": "xterm-256color", "PATH": str(tmp_path)})
    assert isinstance(r, TputResolver)
    assert r.tput == str(tput)
    assert r.set_foreground(5) == "<fg5>"
