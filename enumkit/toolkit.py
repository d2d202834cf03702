"""
Per-enumeration toolkit: cached metadata, queries and validated parsing.

    info = enum_info(Perm)
    info.values                 # (0, 1, 2, 4)
    info.flags_mask             # 7
    info.is_defined(3)          # True, 3 is READ | WRITE
    info.parse("Read, Write")   # 3
    info.bitwise.find_msb(6)    # 4

Thread safety: every derived field is a pure function of the immutable
EnumKind snapshot and is memoized with functools.cached_property. Nothing here
relies on that memoization being exclusive: Python 3.11 serializes the first
computation behind a lock, 3.12 and later take no lock and let racing threads
each compute the field. Either way the results are equal and the last write
wins, so readers only ever observe a complete value. The enum_info registry
converges the same way through dict.setdefault, so all callers end up sharing
one EnumInfo per enumeration.
"""
from __future__ import annotations

import bisect
import functools
import logging
import random
from functools import cached_property
from typing import Optional, Sequence

from lark import UnexpectedInput

from enumkit.backend.resolver import resolve
from enumkit.backend.width_ops import WidthOps
from enumkit.internals.errors import (
    ERR,
    raise_error,
    FormatError,
    NotDefinedError,
    EmptyTypeError,
)
from enumkit.internals.parser import parse_text, describe_parse_error
from enumkit.semantics.declarations import AttributeLookup, StaticAttributeLookup, snapshot
from enumkit.semantics.typesys import EnumKind, as_int

logger = logging.getLogger(__name__)


def fold_case(name: str) -> str:
    """Upper-case `name` one character at a time, for ignore-case name matching.

    Characters whose upper case is longer than one character ('ß' -> 'SS') are
    kept as they are, so "STRASSE" does not match "Straße".
    """
    chars = []
    for ch in name:
        upper = ch.upper()
        chars.append(upper if len(upper) == 1 else ch)
    return "".join(chars)


def _contains(sorted_items: Sequence, item) -> bool:
    index = bisect.bisect_left(sorted_items, item)
    return index < len(sorted_items) and sorted_items[index] == item


class EnumInfo:
    """Metadata cache and query/parse layer for one enumeration.

    Values returned are plain ints; enum members are accepted wherever a
    value is expected.
    """

    def __init__(self, enum_type, *, backend: Optional[str] = None,
                 attributes: Optional[AttributeLookup] = None,
                 rng: Optional[random.Random] = None) -> None:
        self.kind: EnumKind = snapshot(enum_type)
        self.name = self.kind.name
        self.representation = self.kind.representation
        self.has_flags = self.kind.is_flags
        # Zero is always representable, declared or not
        self.zero = 0
        self._backend = backend
        self._attributes = attributes
        self._random = rng if rng is not None else random.Random()

    def __repr__(self) -> str:
        flags = ", flags" if self.has_flags else ""
        return f"<EnumInfo {self.name} ({self.representation}{flags})>"

    # ------------------------------------------------------------------
    # Metadata cache
    # ------------------------------------------------------------------

    @cached_property
    def values(self) -> tuple[int, ...]:
        """Defined values, ascending, aliases collapsed."""
        return tuple(sorted({member.value for member in self.kind.members}))

    @cached_property
    def values_descending(self) -> tuple[int, ...]:
        return self.values[::-1]

    @cached_property
    def names(self) -> tuple[str, ...]:
        """Defined names in ordinal (code point) order, one entry per name."""
        return tuple(sorted({member.name for member in self.kind.members}))

    @cached_property
    def names_descending(self) -> tuple[str, ...]:
        return self.names[::-1]

    @cached_property
    def _folded_names(self) -> tuple[str, ...]:
        return tuple(sorted({fold_case(name) for name in self.names}))

    @cached_property
    def _value_by_name(self) -> dict[str, int]:
        lookup: dict[str, int] = {}
        for member in self.kind.members:
            lookup.setdefault(member.name, member.value)
        return lookup

    @cached_property
    def _value_by_folded_name(self) -> dict[str, int]:
        lookup: dict[str, int] = {}
        for member in self.kind.members:
            lookup.setdefault(fold_case(member.name), member.value)
        return lookup

    @cached_property
    def _name_by_value(self) -> dict[int, str]:
        lookup: dict[int, str] = {}
        for member in self.kind.members:
            lookup.setdefault(member.value, member.name)
        return lookup

    def _require_values(self, what: str) -> tuple[int, ...]:
        if not self.values:
            raise_error(ERR.EK2005, EmptyTypeError, type_name=self.name, what=what)
        return self.values

    @cached_property
    def min_value(self) -> int:
        return self._require_values("min_value")[0]

    @cached_property
    def max_value(self) -> int:
        return self._require_values("max_value")[-1]

    @cached_property
    def flags_mask(self) -> int:
        """OR of every defined value; computed on first use only."""
        values = self._require_values("flags_mask")
        mask = functools.reduce(self.bitwise.or_, values)
        logger.debug("%s flags mask = %#x", self.name, self.representation.to_pattern(mask))
        return mask

    @cached_property
    def bitwise(self) -> WidthOps:
        """Width primitives for this enumeration's representation, resolved once."""
        return resolve(self.representation, self._backend, self.name)

    @cached_property
    def attributes(self) -> AttributeLookup:
        if self._attributes is not None:
            return self._attributes
        return StaticAttributeLookup.from_kind(self.kind)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def clamp(self, value, minimum, maximum) -> int:
        check = self.representation.check
        value, minimum, maximum = check(value), check(minimum), check(maximum)
        if value < minimum:
            return minimum
        if value > maximum:
            return maximum
        return value

    def clamp_to_defined_range(self, value) -> int:
        """Clamp to [min_value, max_value]; membership is not considered."""
        return self.clamp(value, self.min_value, self.max_value)

    def is_defined(self, value) -> bool:
        """True if `value` is declared, or for flag sets made only of declared flags.

        A string is looked up as a member name instead.
        """
        if isinstance(value, str):
            return self.is_name_defined(value)
        value = as_int(value)
        if not self.representation.fits(value) or not self.values:
            return False
        if self.has_flags:
            # Subset of the mask: no bit outside the declared flags
            return self.bitwise.and_not(value, self.flags_mask) == 0
        return _contains(self.values, value)

    def is_name_defined(self, name: str, ignore_case: bool = False) -> bool:
        if ignore_case:
            return _contains(self._folded_names, fold_case(name))
        return _contains(self.names, name)

    def name_of(self, value) -> Optional[str]:
        """First declared name of an exactly defined value, or None."""
        return self._name_by_value.get(as_int(value))

    def format_value(self, value) -> str:
        """Text form of a value that parse() reads back.

        Declared values give their name; flag combinations give their flag names
        ("Read, Write"); anything else gives its decimal string.
        """
        value = self.representation.check(value)
        name = self.name_of(value)
        if name is not None:
            return name
        if self.has_flags and value != 0:
            remaining = value
            parts = []
            for flag in self.values_descending:
                if flag != 0 and self.bitwise.and_not(flag, remaining) == 0:
                    parts.append(self._name_by_value[flag])
                    remaining = self.bitwise.and_not(remaining, flag)
                    if remaining == 0:
                        return ", ".join(reversed(parts))
        return str(value)

    def random_value(self, rng: Optional[random.Random] = None) -> int:
        """A uniformly drawn defined value; never an undeclared flag combination."""
        values = self._require_values("random_value")
        return (rng or self._random).choice(values)

    def display_name(self, value) -> Optional[str]:
        return self.attributes.display_name(as_int(value))

    def description(self, value) -> Optional[str]:
        return self.attributes.description(as_int(value))

    # ------------------------------------------------------------------
    # Flag composition
    # ------------------------------------------------------------------

    def with_flags(self, value, flags) -> int:
        return self.bitwise.or_(value, flags)

    def without_flags(self, value, flags) -> int:
        return self.bitwise.and_not(value, flags)

    def with_flags_toggled(self, value, flags) -> int:
        return self.bitwise.xor(value, flags)

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def _lookup_name(self, name: str, ignore_case: bool) -> Optional[int]:
        if ignore_case:
            return self._value_by_folded_name.get(fold_case(name))
        return self._value_by_name.get(name)

    def _parse_value(self, text: str, ignore_case: bool) -> int:
        if not isinstance(text, str):
            raise TypeError(f"expected str, got {type(text).__name__}")
        try:
            parsed = parse_text(text)
        except UnexpectedInput as e:
            raise_error(ERR.EK1001, FormatError, text=text, type_name=self.name,
                        hint=describe_parse_error(e, text))

        if isinstance(parsed, int):
            if not self.representation.fits(parsed):
                raise_error(ERR.EK1003, FormatError, text=text, type_name=self.name,
                            representation=self.representation)
            return parsed

        value = 0
        for name in parsed:
            member_value = self._lookup_name(name, ignore_case)
            if member_value is None:
                raise_error(ERR.EK1002, FormatError, text=text, type_name=self.name, name=name)
            value = self.bitwise.or_(value, member_value)
        return value

    def parse(self, text: str, only_defined: bool = True, ignore_case: bool = False) -> int:
        """Parse a member name list or an integer literal.

        Raises:
            FormatError: the text is not a name list or an in-range integer.
            NotDefinedError: `only_defined` and the value is not defined (see is_defined).
        """
        value = self._parse_value(text, ignore_case)
        if only_defined and not self.is_defined(value):
            raise_error(ERR.EK1004, NotDefinedError, text=text, type_name=self.name, value=value)
        return value

    def try_parse(self, text: str, only_defined: bool = True,
                  ignore_case: bool = False) -> Optional[int]:
        """Like parse(), returning None instead of raising FormatError/NotDefinedError."""
        try:
            return self.parse(text, only_defined, ignore_case)
        except (FormatError, NotDefinedError):
            return None


_registry: dict = {}


def enum_info(enum_type, *, backend: Optional[str] = None) -> EnumInfo:
    """The shared EnumInfo of an enum class or EnumKind (one per enumeration and backend)."""
    key = (enum_type, backend)
    info = _registry.get(key)
    if info is None:
        info = _registry.setdefault(key, EnumInfo(enum_type, backend=backend))
    return info
