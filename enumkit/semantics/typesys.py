from __future__ import annotations
import operator
from enum import Enum
from typing import Optional, Mapping, Union
from dataclasses import dataclass

from enumkit.internals.errors import (
    ERR,
    raise_error,
    UnsupportedRepresentationError,
    RepresentationOverflowError,
)
from enumkit.internals.parser import is_member_name


class IntKind(Enum):
    """Underlying integer representation of an enumeration."""
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"

    def __str__(self) -> str:
        return self.value

    @property
    def width(self) -> int:
        return int(self.value[1:])

    @property
    def signed(self) -> bool:
        return self.value[0] == "i"

    @property
    def mask(self) -> int:
        return (1 << self.width) - 1

    @property
    def sign_bit(self) -> int:
        return 1 << (self.width - 1)

    @property
    def min_value(self) -> int:
        return -self.sign_bit if self.signed else 0

    @property
    def max_value(self) -> int:
        return self.sign_bit - 1 if self.signed else self.mask

    @classmethod
    def from_tag(cls, tag: Union["IntKind", str], type_name: str = "<unknown>") -> "IntKind":
        """Map a representation tag ('u8', 'uint8', 'byte', ...) to its IntKind.

        Unknown tags raise UnsupportedRepresentationError, never a default width.
        """
        if isinstance(tag, IntKind):
            return tag
        if isinstance(tag, str):
            kind = TAG_TO_KIND.get(tag.strip().lower())
            if kind is not None:
                return kind
        raise_error(ERR.EK2001, UnsupportedRepresentationError,
                    representation=tag, type_name=type_name)

    def fits(self, value: int) -> bool:
        return self.min_value <= value <= self.max_value

    def check(self, value) -> int:
        """Return `value` as a plain int, raising if it does not fit this kind.

        Enum members are unwrapped to their integer value.
        """
        value = as_int(value)
        if not self.fits(value):
            raise_error(ERR.EK2004, RepresentationOverflowError,
                        value=value, representation=self)
        return value

    def to_pattern(self, value: int) -> int:
        """Unsigned bit pattern of an in-range value."""
        return value & self.mask

    def from_pattern(self, bits: int) -> int:
        """Reinterpret an unsigned bit pattern as a value of this kind."""
        bits &= self.mask
        if self.signed and bits & self.sign_bit:
            return bits - (1 << self.width)
        return bits

    def wrap(self, value: int) -> int:
        """Truncate an arbitrary int to this width (two's complement wraparound)."""
        return self.from_pattern(value)


TAG_TO_KIND: Mapping[str, IntKind] = {
    "i8": IntKind.I8,
    "i16": IntKind.I16,
    "i32": IntKind.I32,
    "i64": IntKind.I64,
    "u8": IntKind.U8,
    "u16": IntKind.U16,
    "u32": IntKind.U32,
    "u64": IntKind.U64,
    # numpy / ctypes style spellings
    "int8": IntKind.I8,
    "int16": IntKind.I16,
    "int32": IntKind.I32,
    "int64": IntKind.I64,
    "uint8": IntKind.U8,
    "uint16": IntKind.U16,
    "uint32": IntKind.U32,
    "uint64": IntKind.U64,
    # C-family enum base type names
    "sbyte": IntKind.I8,
    "byte": IntKind.U8,
    "short": IntKind.I16,
    "ushort": IntKind.U16,
    "int": IntKind.I32,
    "uint": IntKind.U32,
    "long": IntKind.I64,
    "ulong": IntKind.U64,
}

DEFAULT_KIND = IntKind.I32


def as_int(value) -> int:
    """Integer value of an int, an int-valued enum member, or anything with __index__."""
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return int(value)
    return operator.index(value)


@dataclass(frozen=True)
class EnumMember:
    """A single declared (name, value) pair."""
    name: str
    value: int
    display_name: Optional[str] = None
    description: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.name}={self.value}"


@dataclass(frozen=True)
class EnumKind:
    """Identity and declaration snapshot of one enumerated type.

    Members keep declaration order and include aliases (several names for one
    value). The snapshot is immutable; everything derived from it is computed
    lazily by `enumkit.toolkit.EnumInfo`.
    """
    name: str
    members: tuple[EnumMember, ...]
    representation: IntKind = DEFAULT_KIND
    is_flags: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "representation",
                           IntKind.from_tag(self.representation, self.name))
        object.__setattr__(self, "members", tuple(self.members))
        for member in self.members:
            if not is_member_name(member.name):
                raise_error(ERR.EK2007, UnsupportedRepresentationError,
                            member=member.name, type_name=self.name)
            if isinstance(member.value, bool) or not isinstance(member.value, int):
                raise_error(ERR.EK2002, UnsupportedRepresentationError,
                            member=member.name, value=member.value, type_name=self.name)
            if not self.representation.fits(member.value):
                raise_error(ERR.EK2003, RepresentationOverflowError,
                            value=member.value, type_name=self.name,
                            representation=self.representation)

    def __str__(self) -> str:
        return self.name

    @classmethod
    def of(cls, name: str, pairs, representation: Union[IntKind, str] = DEFAULT_KIND,
           is_flags: bool = False) -> "EnumKind":
        """Build a kind from (name, value) pairs or a name -> value mapping."""
        if isinstance(pairs, Mapping):
            pairs = pairs.items()
        members = tuple(EnumMember(n, v) for n, v in pairs)
        return cls(name, members, representation, is_flags)

    @classmethod
    def from_enum(cls, enum_cls) -> "EnumKind":
        from enumkit.semantics.declarations import snapshot
        return snapshot(enum_cls)
