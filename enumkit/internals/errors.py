# internals/errors.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict


class Severity(str, Enum):
    ERROR = "error"


class Category(str, Enum):
    GENERAL     = "general"
    PARSE       = "parse"
    DECLARATION = "declaration"
    BACKEND     = "backend"


@dataclass(frozen=True)
class ErrorMessage:
    code: str
    severity: Severity
    text: str
    category: Category = Category.GENERAL
    doc: str = ""


REGISTRY: Dict[str, ErrorMessage] = {}

class _ErrorCatalog:
    def __init__(self, backing: Dict[str, ErrorMessage]) -> None:
        self._registry = backing

    def __getattr__(self, name: str) -> ErrorMessage:
        try:
            return self._registry[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __getitem__(self, code: str) -> ErrorMessage:
        return self._registry[code]


ERR = _ErrorCatalog(REGISTRY)


#
# --- Exceptions
#

class EnumKitError(Exception):
    """Base class for every error raised by enumkit.

    The catalog code is kept on the instance so callers (and the CLI) can
    report it without parsing the message.
    """
    code: str = ""

    def __init__(self, code: str, **kwargs) -> None:
        self.code = code
        self.params = kwargs
        super().__init__(f"{code}: {format_message(code, **kwargs)}")


class FormatError(EnumKitError, ValueError):
    """Text does not parse as the enumeration's representation."""

    def __init__(self, code: str, *, text: str, type_name: str, **kwargs) -> None:
        self.text = text
        self.type_name = type_name
        super().__init__(code, text=text, type_name=type_name, **kwargs)


class NotDefinedError(EnumKitError, ValueError):
    """Text parsed, but the value is not declared (or not made of declared flags)."""

    def __init__(self, code: str, *, text: str, type_name: str, value: int, **kwargs) -> None:
        self.text = text
        self.type_name = type_name
        self.value = value
        super().__init__(code, text=text, type_name=type_name, value=value, **kwargs)


class UnsupportedRepresentationError(EnumKitError, TypeError):
    pass


class EmptyTypeError(EnumKitError, LookupError):
    pass


class RepresentationOverflowError(EnumKitError, OverflowError):
    pass


class BackendError(EnumKitError, RuntimeError):
    pass


def raise_error(em: ErrorMessage, exc_type: type = EnumKitError, **kwargs) -> None:
    """Raise `exc_type` for catalog entry `em`, formatting its text with `kwargs`."""
    raise exc_type(em.code, **kwargs)


def format_message(code: str, **kwargs) -> str:
    return _fmt(code, **kwargs)


#
# --- Helpers
#

def _add(msg: ErrorMessage) -> None:
    if msg.code in REGISTRY:
        raise ValueError(f"duplicate error code {REGISTRY[msg.code]} in {msg}")
    REGISTRY[msg.code] = msg

def _get(code: str) -> ErrorMessage:
    try:
        return REGISTRY[code]
    except KeyError:
        raise KeyError(f"unknown error code: {code}")

def _fmt(code: str, **kwargs) -> str:
    msg = _get(code)
    try:
        return msg.text.format(**kwargs)
    except KeyError as key_error:
        missing = key_error.args[0]
        raise KeyError(f"missing text key '{missing}' for {code} "
                       f"(needed by: {msg.text!r})") from None


#
# --- Registry population
#

# Data errors - EK1xxx range
_add(ErrorMessage("EK1001", Severity.ERROR,
    "'{text}' is not a valid representation of enum '{type_name}' ({hint})",
    Category.PARSE, "The text is neither a member name list nor an integer literal."))

_add(ErrorMessage("EK1002", Severity.ERROR,
    "'{text}' names no member of enum '{type_name}' (unknown name '{name}')",
    Category.PARSE, "A name in the text is not declared by the enumeration."))

_add(ErrorMessage("EK1003", Severity.ERROR,
    "'{text}' is out of range for enum '{type_name}' ({representation})",
    Category.PARSE, "The integer literal does not fit the underlying representation."))

_add(ErrorMessage("EK1004", Severity.ERROR,
    "'{text}' is not defined by enum '{type_name}' (value {value})",
    Category.PARSE, "The value is not declared, or for a flag set not composed of declared flags."))

# Declaration / setup errors - EK2xxx range
_add(ErrorMessage("EK2001", Severity.ERROR,
    "unsupported underlying representation {representation!r} for '{type_name}'",
    Category.DECLARATION, "Only 8/16/32/64-bit signed and unsigned integers are supported."))

_add(ErrorMessage("EK2002", Severity.ERROR,
    "member '{member}' of '{type_name}' has non-integer value {value!r}",
    Category.DECLARATION, "Enumerations must be backed by integer values."))

_add(ErrorMessage("EK2003", Severity.ERROR,
    "value {value} of '{type_name}' does not fit {representation}",
    Category.DECLARATION, "A declared value exceeds the range of the underlying representation."))

_add(ErrorMessage("EK2004", Severity.ERROR,
    "value {value} does not fit {representation}",
    Category.DECLARATION, "An operand exceeds the range of the underlying representation."))

_add(ErrorMessage("EK2005", Severity.ERROR,
    "enum '{type_name}' has no defined values ({what} is undefined)",
    Category.DECLARATION, "Bounds, flags mask and random draws need at least one declared value."))

_add(ErrorMessage("EK2006", Severity.ERROR,
    "'{type_name}' is not an enumeration",
    Category.DECLARATION, "Expected an enum.Enum subclass or an EnumKind."))

_add(ErrorMessage("EK2007", Severity.ERROR,
    "member name {member!r} of '{type_name}' cannot be read back by parse()",
    Category.DECLARATION, "Member names must be identifiers (a letter or '_' followed by letters, digits or '_')."))

# Backend errors - EK3xxx range
_add(ErrorMessage("EK3001", Severity.ERROR,
    "LLVM module failed verification: {message}",
    Category.BACKEND, "Generated width primitives IR is invalid (bug)."))

_add(ErrorMessage("EK3002", Severity.ERROR,
    "native function '{name}' not found in JIT engine",
    Category.BACKEND, "A width primitive was not emitted for the requested kind (bug)."))
