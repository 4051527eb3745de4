"""Cached output formatting

The `Formatter` wraps text in the escape sequences of a terminal. It asks
its `Resolver` for each sequence once and keeps the answer for the rest
of its lifetime, so repeated formatting does not hit the terminfo
database (or spawn `tput`) again.

On construction the formatter queries the number of colors and eagerly
resolves the standard palette: the named attributes, if a capability
database is available, and the 8 base foreground and background colors,
if the terminal supports at least 8 colors. Any other color index is
resolved on first use.

A process wide formatter for the current environment is available via
`get_default()`.
"""

import threading
from typing import Dict, Optional, Union

from . import config
from .resolver import Attribute, Resolver, detect
from .styles import Style, StyleSheet

__all__ = [
    "Formatter",
    "get_default",
    "reset_default",
]


MIN_COLORS = 8
BASE_COLORS = 8


def color_key(family: str, index: int) -> str:
    """Cache key of color `index` in `family` ("fg" or "bg")"""
    if index < 0:
        raise ValueError(f"invalid color index {index}")
    return f"{family}_{index:03d}"


class Formatter:
    """Wrap text in cached terminal escape sequences"""

    def __init__(self, resolver: Resolver, styles: Optional[StyleSheet] = None):
        self.resolver = resolver
        self.styles = styles if styles is not None else StyleSheet.default()
        self._cache: Dict[str, str] = {}
        self._lock = threading.Lock()

        self.colors = resolver.colors()
        self._init_palette()

    def _init_palette(self):
        if self.resolver.available:
            for attr in Attribute:
                self._cache[attr.name.lower()] = self.resolver.attribute(attr)

        if self.colors < MIN_COLORS:
            return

        for i in range(BASE_COLORS):
            self._color("fg", i)
            self._color("bg", i)

    def _color(self, family: str, index: int) -> str:
        key = color_key(family, index)

        seq = self._cache.get(key)
        if seq is not None:
            return seq

        if self.colors < MIN_COLORS:
            return ""

        with self._lock:
            seq = self._cache.get(key)
            if seq is None:
                if family == "fg":
                    seq = self.resolver.set_foreground(index)
                else:
                    seq = self.resolver.set_background(index)
                self._cache[key] = seq

        return seq

    @property
    def reset(self) -> str:
        return self._cache.get("reset", "")

    @property
    def cache(self) -> Dict[str, str]:
        """Snapshot of all resolved sequences"""
        with self._lock:
            return dict(self._cache)

    def sequence(self, key: str) -> str:
        """Resolved sequence for `key`, empty if not (yet) resolved"""
        return self._cache.get(key, "")

    def wrap(self, prefix: str, text: str) -> str:
        return prefix + text + self.reset

    def foreground(self, index: int, text: str) -> str:
        return self.wrap(self._color("fg", index), text)

    def background(self, index: int, text: str) -> str:
        return self.wrap(self._color("bg", index), text)

    def attribute(self, name: Union[str, Attribute], text: str) -> str:
        """Wrap `text` in the sequence of attribute `name`

        Unknown attribute names result in plain `text`.
        """
        attr = Attribute.lookup(name)
        prefix = self._cache.get(attr.name.lower(), "") if attr else ""
        return self.wrap(prefix, text)

    def prefix(self, style: Style) -> str:
        """All sequences needed to switch to `style`"""
        seq = ""
        if style.fg is not None:
            seq += self._color("fg", style.fg)
        if style.bg is not None:
            seq += self._color("bg", style.bg)
        for attr in style.attrs:
            seq += self._cache.get(attr.name.lower(), "")
        return seq

    def style(self, style: Union[str, Style], text: str) -> str:
        """Wrap `text` in a `Style` or a named style of the style sheet

        Unknown style names result in plain `text`.
        """
        if isinstance(style, str):
            found = self.styles.get(style)
            if found is None:
                return self.wrap("", text)
            style = found
        return self.wrap(self.prefix(style), text)


_default: Optional[Formatter] = None
_default_lock = threading.Lock()


def get_default() -> Formatter:
    """The formatter for the current process environment

    Built on first use; the style sheet named by `TPUTFMT_STYLES` is
    merged over the built-in styles.
    """
    global _default

    with _default_lock:
        if _default is None:
            styles = StyleSheet.default()
            path = config.styles_path()
            if path:
                styles = styles.merge(StyleSheet.load(path))
            _default = Formatter(detect(), styles)
        return _default


def reset_default() -> None:
    """Drop the process wide formatter, the next `get_default()` rebuilds it"""
    global _default

    with _default_lock:
        _default = None
