"""Named styles

A style combines an optional foreground color, an optional background
color and any number of attributes. Styles are grouped in a `StyleSheet`
which can be loaded from a JSON document of the form:

    {
      "version": "1",
      "styles": {
        "error": {"fg": 1, "attrs": ["bold"]},
        "banner": {"fg": 15, "bg": 4}
      }
    }

Documents are checked against a JSON schema before use; the errors are
collected in a `ValidationResult`.
"""

import copy
import json
from collections import deque
from typing import Any, Deque, Dict, Iterator, List, Optional, Set, Union

import jsonschema

from .resolver import Attribute

__all__ = [
    "Style",
    "StyleError",
    "StyleSheet",
    "ValidationError",
    "ValidationResult",
    "validate",
]


SCHEMA = {
    "$schema": "http://json-schema.org/draft-04/schema#",
    "title": "tputfmt style sheet",
    "type": "object",
    "additionalProperties": False,
    "required": ["styles"],
    "properties": {
        "version": {"enum": ["1"]},
        "styles": {
            "type": "object",
            "additionalProperties": {"$ref": "#/definitions/style"},
        },
    },
    "definitions": {
        "color": {
            "type": "integer",
            "minimum": 0,
            "maximum": 255,
        },
        "style": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "fg": {"$ref": "#/definitions/color"},
                "bg": {"$ref": "#/definitions/color"},
                "attrs": {
                    "type": "array",
                    "items": {"enum": [a.name.lower() for a in Attribute]},
                    "uniqueItems": True,
                },
            },
        },
    },
}


class ValidationError:
    """A single schema violation: a `message` and the `path` to the element"""

    def __init__(self, message: str):
        self.message = message
        self.path: Deque[Union[int, str]] = deque()

    @classmethod
    def from_exception(cls, ex):
        err = cls(ex.message)
        err.path = deque(ex.absolute_path)
        return err

    @property
    def id(self):
        if not self.path:
            return "."

        result = ""
        for p in self.path:
            if isinstance(p, int):
                result += f"[{p}]"
            elif " " in p:
                result += f".'{p}'"
            else:
                result += "." + p

        return result

    def as_dict(self):
        return {
            "message": self.message,
            "path": list(self.path)
        }

    def __hash__(self):
        return hash((self.id, self.message))

    def __eq__(self, other: object):
        if not isinstance(other, ValidationError):
            return NotImplemented
        return (self.id, self.message) == (other.id, other.message)

    def __lt__(self, other: "ValidationError"):
        return (self.id, self.message) < (other.id, other.message)

    def __str__(self):
        return f"ValidationError: {self.message} [{self.id}]"


class ValidationResult:
    """Result of validating a style sheet"""

    def __init__(self, origin: Optional[str] = None):
        self.origin = origin
        self.errors: Set[ValidationError] = set()

    def fail(self, msg: str) -> ValidationError:
        err = ValidationError(msg)
        self.errors.add(err)
        return err

    def add(self, err: ValidationError):
        self.errors.add(err)
        return self

    def as_dict(self):
        errors = [e.as_dict() for e in self]
        if not errors:
            return {}

        return {
            "title": "Style sheet validation failed",
            "success": False,
            "errors": errors
        }

    @property
    def valid(self):
        return len(self) == 0

    def __iadd__(self, error: ValidationError):
        return self.add(error)

    def __bool__(self):
        return self.valid

    def __len__(self):
        return len(self.errors)

    def __iter__(self):
        return iter(sorted(self.errors))

    def __str__(self):
        return f"ValidationResult: {len(self)} error(s)"


class StyleError(ValueError):
    """A style sheet could not be loaded"""

    def __init__(self, result: ValidationResult):
        self.result = result
        origin = result.origin or "<style sheet>"
        msgs = "; ".join(f"{e.id}: {e.message}" for e in result)
        super().__init__(f"{origin}: {msgs}")


_validator = jsonschema.Draft4Validator(SCHEMA)


def validate(data: Any, origin: Optional[str] = None) -> ValidationResult:
    """Check `data` against the style sheet schema"""
    res = ValidationResult(origin)
    for error in _validator.iter_errors(data):
        res += ValidationError.from_exception(error)
    return res


class Style:
    """Foreground, background and attributes of a piece of text"""

    def __init__(self,
                 fg: Optional[int] = None,
                 bg: Optional[int] = None,
                 attrs: Optional[List[Attribute]] = None):
        self.fg = fg
        self.bg = bg
        self.attrs = list(attrs or [])

    @classmethod
    def from_dict(cls, data: Dict) -> "Style":
        attrs = [Attribute[a.upper()] for a in data.get("attrs", [])]
        return cls(data.get("fg"), data.get("bg"), attrs)

    def as_dict(self) -> Dict:
        d: Dict[str, Any] = {}
        if self.fg is not None:
            d["fg"] = self.fg
        if self.bg is not None:
            d["bg"] = self.bg
        if self.attrs:
            d["attrs"] = [a.name.lower() for a in self.attrs]
        return d

    def __eq__(self, other: object):
        if not isinstance(other, Style):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self):
        return f"Style({self.as_dict()!r})"


class StyleSheet:
    """A set of named styles"""

    def __init__(self, styles: Optional[Dict[str, Style]] = None):
        self.styles: Dict[str, Style] = dict(styles or {})

    @classmethod
    def default(cls) -> "StyleSheet":
        return cls({
            "success": Style(fg=2, attrs=[Attribute.BOLD]),
            "error": Style(fg=1, attrs=[Attribute.BOLD]),
            "warning": Style(fg=3),
            "info": Style(fg=6),
            "emphasis": Style(attrs=[Attribute.BOLD]),
        })

    @classmethod
    def from_dict(cls, data: Any, origin: Optional[str] = None) -> "StyleSheet":
        res = validate(data, origin)
        if not res:
            raise StyleError(res)
        styles = {
            name: Style.from_dict(desc)
            for name, desc in data["styles"].items()
        }
        return cls(styles)

    @classmethod
    def load(cls, path: str) -> "StyleSheet":
        with open(path, encoding="utf8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                res = ValidationResult(path)
                res.fail(f"invalid JSON: {e}")
                raise StyleError(res) from e
        return cls.from_dict(data, path)

    def merge(self, other: "StyleSheet") -> "StyleSheet":
        """New sheet with the styles of `other` taking precedence"""
        styles = copy.deepcopy(self.styles)
        styles.update(copy.deepcopy(other.styles))
        return StyleSheet(styles)

    def get(self, name: str) -> Optional[Style]:
        return self.styles.get(name)

    def as_dict(self) -> Dict:
        return {
            "version": "1",
            "styles": {n: s.as_dict() for n, s in self.styles.items()},
        }

    def __contains__(self, name: str) -> bool:
        return name in self.styles

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.styles))

    def __len__(self) -> int:
        return len(self.styles)
