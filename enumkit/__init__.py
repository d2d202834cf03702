"""enumkit - cached metadata, validated parsing and width-aware bit algorithms for enums."""
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("enumkit")
    __dev__ = False
except PackageNotFoundError:
    # Development mode - read from pyproject.toml
    import tomllib
    from pathlib import Path
    try:
        pyproject = Path(__file__).parent.parent / "pyproject.toml"
        with open(pyproject, "rb") as f:
            __version__ = tomllib.load(f).get("project", {}).get("version", "unknown")
    except (OSError, tomllib.TOMLDecodeError):
        __version__ = "unknown"
    __dev__ = True

from enumkit.config import Options, configure, get_options
from enumkit.internals.errors import (
    EnumKitError,
    FormatError,
    NotDefinedError,
    UnsupportedRepresentationError,
    EmptyTypeError,
    RepresentationOverflowError,
    BackendError,
)
from enumkit.semantics.typesys import IntKind, EnumMember, EnumKind
from enumkit.semantics.declarations import declare, snapshot, StaticAttributeLookup
from enumkit.backend.resolver import resolve
from enumkit.toolkit import EnumInfo, enum_info

__all__ = [
    '__version__',
    'Options',
    'configure',
    'get_options',
    'EnumKitError',
    'FormatError',
    'NotDefinedError',
    'UnsupportedRepresentationError',
    'EmptyTypeError',
    'RepresentationOverflowError',
    'BackendError',
    'IntKind',
    'EnumMember',
    'EnumKind',
    'declare',
    'snapshot',
    'StaticAttributeLookup',
    'resolve',
    'EnumInfo',
    'enum_info',
]
