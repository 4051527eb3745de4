"""Terminal capability resolvers

A resolver maps a terminal type to the concrete escape sequences for
colors and text attributes. The `Formatter` never talks to the terminfo
database itself; it asks a `Resolver` and caches the answers.

Three implementations are provided:

  `TputResolver`      runs the `tput` binary for every lookup
  `TerminfoResolver`  reads the database via the `curses` module
  `NullResolver`      knows no capabilities at all

Resolvers never raise for unsupported capabilities or a broken terminal
setup, they return `0` or an empty string instead. Sequences that are
not valid UTF-8 are decoded with `surrogateescape`, so encoding them the
same way gives back the original bytes. Use `detect()` to pick
the right implementation for the current environment.
"""

import abc
import curses
import enum
import logging
import os
import shutil
import subprocess
from typing import Dict, List, Mapping, Optional

from . import config

__all__ = [
    "Attribute",
    "NullResolver",
    "Resolver",
    "TerminfoResolver",
    "TputResolver",
    "detect",
]


log = logging.getLogger(__name__)


class Attribute(enum.Enum):
    """Named text attributes and their terminfo capability names"""

    RESET = "sgr0"
    BOLD = "bold"
    DIM = "dim"
    STANDOUT = "smso"
    ITALIC = "sitm"
    UNDERLINE = "smul"
    BLINK = "blink"
    REVERSE = "rev"

    @property
    def capname(self) -> str:
        return self.value

    @classmethod
    def lookup(cls, name) -> Optional["Attribute"]:
        """Return the attribute for `name` or `None` if unknown

        Accepts members as well as their (case insensitive) names.
        """
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            return None
        return cls.__members__.get(name.upper())


class Resolver(abc.ABC):
    """Source of escape sequences for a single terminal type"""

    name = "abstract"

    @abc.abstractmethod
    def colors(self) -> int:
        """Number of colors the terminal supports"""

    @abc.abstractmethod
    def set_foreground(self, index: int) -> str:
        """Sequence selecting foreground color `index`"""

    @abc.abstractmethod
    def set_background(self, index: int) -> str:
        """Sequence selecting background color `index`"""

    @abc.abstractmethod
    def attribute(self, attr: Attribute) -> str:
        """Sequence enabling `attr`"""

    @property
    def available(self) -> bool:
        """Whether a capability database backs this resolver"""
        return True


class NullResolver(Resolver):
    """Resolver used when no terminal is present"""

    name = "null"

    def colors(self) -> int:
        return 0

    def set_foreground(self, index: int) -> str:
        return ""

    def set_background(self, index: int) -> str:
        return ""

    def attribute(self, attr: Attribute) -> str:
        return ""

    @property
    def available(self) -> bool:
        return False


class TputResolver(Resolver):
    """Resolve capabilities by running `tput`

    If `term` is given it is passed via `-T`, otherwise `tput` consults
    the `TERM` environment variable itself.
    """

    name = "tput"

    def __init__(self, term: Optional[str] = None, tput: str = "tput"):
        self.term = term
        self.tput = tput

    def _run(self, *args: str) -> str:
        cmd: List[str] = [self.tput]
        if self.term:
            cmd += ["-T", self.term]
        cmd += list(args)

        try:
            r = subprocess.run(cmd,
                               stdout=subprocess.PIPE,
                               stderr=subprocess.DEVNULL,
                               encoding="utf8",
                               errors="surrogateescape",
                               check=False)
        except OSError as e:
            log.debug("failed to run %s: %s", self.tput, e)
            return ""

        if r.returncode != 0:
            log.debug("'%s' exited with %d", " ".join(cmd), r.returncode)
            return ""

        return r.stdout

    def colors(self) -> int:
        out = self._run("colors").strip()
        try:
            return max(0, int(out))
        except ValueError:
            log.debug("tput reported unparsable color count: %r", out)
            return 0

    def set_foreground(self, index: int) -> str:
        return self._run("setaf", str(index))

    def set_background(self, index: int) -> str:
        return self._run("setab", str(index))

    def attribute(self, attr: Attribute) -> str:
        return self._run(attr.capname)


class TerminfoResolver(Resolver):
    """Resolve capabilities via `curses` and the terminfo database

    `curses.setupterm()` can only be initialized once per process, so all
    instances share the terminal type of the first one that was set up.
    """

    name = "terminfo"

    # terminal type of the first successful setupterm() call
    _setup_term: Optional[str] = None

    def __init__(self, term: Optional[str] = None, fd: Optional[int] = None):
        self.term = term
        self._ready = self._setup(term, fd)

    @classmethod
    def _setup(cls, term, fd) -> bool:
        if fd is None:
            # init sequences go to stdout
            fd = 1
        wanted = term or os.environ.get("TERM", "")
        if cls._setup_term is not None and wanted != cls._setup_term:
            log.debug("terminfo already set up for %r, %r is ignored",
                      cls._setup_term, wanted)
        try:
            curses.setupterm(term, fd)
        except (curses.error, OSError) as e:
            log.debug("terminfo setup for %r failed: %s", term, e)
            return False
        if cls._setup_term is None:
            TerminfoResolver._setup_term = wanted
        return True

    def _string(self, capname: str, *params: int) -> str:
        if not self._ready:
            return ""
        try:
            cap = curses.tigetstr(capname)
            if not cap:
                return ""
            if params:
                cap = curses.tparm(cap, *params)
        except curses.error as e:
            log.debug("terminfo lookup of %s failed: %s", capname, e)
            return ""
        # 8-bit controls (e.g. CSI as 0x9b) are not valid UTF-8
        return cap.decode("utf-8", "surrogateescape")

    def colors(self) -> int:
        if not self._ready:
            return 0
        # -1 if absent, -2 if not a numeric capability
        return max(0, curses.tigetnum("colors"))

    def set_foreground(self, index: int) -> str:
        return self._string("setaf", index)

    def set_background(self, index: int) -> str:
        return self._string("setab", index)

    def attribute(self, attr: Attribute) -> str:
        return self._string(attr.capname)

    @property
    def available(self) -> bool:
        return self._ready


BACKENDS = {
    "tput": TputResolver,
    "terminfo": TerminfoResolver,
}


def detect(environ: Optional[Mapping[str, str]] = None) -> Resolver:
    """Select a resolver based on the environment

    Returns a `NullResolver` if there is no usable terminal type or the
    user opted out of colors via `NO_COLOR`. Otherwise the backend named
    by `TPUTFMT_RESOLVER` is used, `tput` by default.
    """
    env: Mapping[str, str] = os.environ if environ is None else environ

    term = env.get("TERM", "")
    if not term or term == "dumb":
        log.debug("no usable terminal type, disabling formatting")
        return NullResolver()

    if config.no_color(env):
        return NullResolver()

    backend = config.get_string(config.ENV_RESOLVER, env) or "tput"
    if backend == "null":
        return NullResolver()

    klass = BACKENDS.get(backend)
    if klass is None:
        raise ValueError(f"unknown resolver '{backend}'")

    if klass is TputResolver:
        tput = shutil.which("tput", path=env.get("PATH"))
        if tput is None:
            log.debug("tput not found, disabling formatting")
            return NullResolver()
        return TputResolver(term, tput=tput)

    return klass(term)


def describe(resolver: Resolver) -> Dict[str, str]:
    """Short description of `resolver`, for diagnostics"""
    return {
        "resolver": resolver.name,
        "term": getattr(resolver, "term", None) or "",
    }
