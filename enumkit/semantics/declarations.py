"""
Declaration boundary: snapshot Python ``enum`` classes into EnumKind.

The core only needs a read-only view of an enumeration: its (name, value)
pairs, its underlying integer representation and whether it is a flag set.
Python enums carry neither a width nor display attributes, so both are
attached with the ``declare`` decorator:

    @declare("u8", display_names={"READ": "Read access"})
    class Perm(enum.IntFlag):
        NONE = 0
        READ = 1
        WRITE = 2
        EXECUTE = 4

Classes without a declaration default to i32 and take their flag-set marking
from ``enum.Flag`` inheritance.
"""
from __future__ import annotations
import enum
from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol, Union

from enumkit.internals.errors import ERR, raise_error, UnsupportedRepresentationError
from enumkit.semantics.typesys import IntKind, EnumMember, EnumKind, DEFAULT_KIND

DECLARATION_ATTR = "__enumkit_declaration__"


@dataclass(frozen=True)
class Declaration:
    """Options attached to an enum class by ``declare``."""
    representation: Optional[Union[IntKind, str]] = None
    flags: Optional[bool] = None
    display_names: Mapping[str, str] = field(default_factory=dict)
    descriptions: Mapping[str, str] = field(default_factory=dict)


def declare(representation: Optional[Union[IntKind, str]] = None, *,
            flags: Optional[bool] = None,
            display_names: Optional[Mapping[str, str]] = None,
            descriptions: Optional[Mapping[str, str]] = None):
    """Class decorator recording the underlying representation and display attributes.

    Args:
        representation: IntKind or tag such as "u8"; validated immediately.
        flags: Force the flag-set marking on or off (default: enum.Flag subclass).
        display_names: member name -> display name.
        descriptions: member name -> description.
    """
    if representation is not None:
        representation = IntKind.from_tag(representation)

    def decorator(cls):
        if not (isinstance(cls, type) and issubclass(cls, enum.Enum)):
            raise_error(ERR.EK2006, UnsupportedRepresentationError,
                        type_name=getattr(cls, "__name__", repr(cls)))
        setattr(cls, DECLARATION_ATTR, Declaration(
            representation=representation,
            flags=flags,
            display_names=dict(display_names or {}),
            descriptions=dict(descriptions or {}),
        ))
        return cls

    return decorator


def declaration_of(enum_cls) -> Declaration:
    # Only look at the class itself; a subclass must not inherit a width
    return enum_cls.__dict__.get(DECLARATION_ATTR) or Declaration()


def snapshot(enum_cls) -> EnumKind:
    """Take the read-only EnumKind snapshot of a Python enum class."""
    if isinstance(enum_cls, EnumKind):
        return enum_cls
    if not (isinstance(enum_cls, type) and issubclass(enum_cls, enum.Enum)):
        raise_error(ERR.EK2006, UnsupportedRepresentationError,
                    type_name=getattr(enum_cls, "__name__", repr(enum_cls)))

    decl = declaration_of(enum_cls)
    is_flags = decl.flags if decl.flags is not None else issubclass(enum_cls, enum.Flag)
    representation = decl.representation if decl.representation is not None else DEFAULT_KIND

    # __members__ includes aliases, in definition order
    members = tuple(
        EnumMember(
            name=name,
            value=member.value,
            display_name=decl.display_names.get(name),
            description=decl.descriptions.get(name),
        )
        for name, member in enum_cls.__members__.items()
    )
    return EnumKind(enum_cls.__name__, members, representation, is_flags)


class AttributeLookup(Protocol):
    """Value -> optional display strings (the attribute collaborator)."""

    def display_name(self, value: int) -> Optional[str]: ...

    def description(self, value: int) -> Optional[str]: ...


class StaticAttributeLookup:
    """Mapping-backed AttributeLookup."""

    def __init__(self, display_names: Optional[Mapping[int, str]] = None,
                 descriptions: Optional[Mapping[int, str]] = None) -> None:
        self._display_names = dict(display_names or {})
        self._descriptions = dict(descriptions or {})

    def display_name(self, value: int) -> Optional[str]:
        return self._display_names.get(value)

    def description(self, value: int) -> Optional[str]:
        return self._descriptions.get(value)

    @classmethod
    def from_kind(cls, kind: EnumKind) -> "StaticAttributeLookup":
        """Collect the attributes declared on members; first member with text wins for aliases."""
        display_names: dict[int, str] = {}
        descriptions: dict[int, str] = {}
        for member in kind.members:
            if member.display_name is not None:
                display_names.setdefault(member.value, member.display_name)
            if member.description is not None:
                descriptions.setdefault(member.value, member.description)
        return cls(display_names, descriptions)
