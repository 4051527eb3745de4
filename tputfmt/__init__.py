"""tputfmt Module

The `tputfmt` module formats text with the color and attribute escape
sequences of the current terminal, as reported by the terminfo database.
Sequences are looked up once through a capability resolver and cached.

The command line interface in `tputfmt.main_cli` exposes the same
formatting to shell scripts.
"""

from .formatter import Formatter, get_default, reset_default
from .resolver import Attribute, NullResolver, Resolver, detect
from .styles import Style, StyleSheet

__version__ = "1"

__all__ = [
    "Attribute",
    "Formatter",
    "NullResolver",
    "Resolver",
    "Style",
    "StyleSheet",
    "detect",
    "get_default",
    "reset_default",
    "__version__",
]
