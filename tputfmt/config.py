"""Environment driven settings"""

import os
from typing import Mapping, Optional

ENV_RESOLVER = "TPUTFMT_RESOLVER"
ENV_STYLES = "TPUTFMT_STYLES"
ENV_FORCE = "TPUTFMT_FORCE"
ENV_NO_COLOR = "NO_COLOR"


def _env(environ: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if environ is None else environ


def get_bool(option: str, environ: Optional[Mapping[str, str]] = None) -> bool:
    opt = _env(environ).get(option, "")
    # python has no strconv.ParseBool() so we roll our own
    if opt.upper() in {"1", "T", "TRUE"}:
        return True
    if opt.upper() in {"", "0", "F", "FALSE"}:
        return False
    raise RuntimeError(f"unsupported bool value '{opt}' for {option}")


def get_string(option: str, environ: Optional[Mapping[str, str]] = None) -> str:
    return str(_env(environ).get(option, ""))


def no_color(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Whether the user opted out of colors, see https://no-color.org"""
    return bool(get_string(ENV_NO_COLOR, environ))


def force(environ: Optional[Mapping[str, str]] = None) -> bool:
    return get_bool(ENV_FORCE, environ)


def styles_path(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    path = get_string(ENV_STYLES, environ)
    return path or None
