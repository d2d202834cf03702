"""
Width primitives: the bit operations every enumeration needs, one row per
integer representation.

A row is stateless and bound to a single IntKind. Public methods range-check
their operands against the kind (so a native row can never truncate silently)
and delegate to the backend implementation:

- or_(a, b), and_not(a, b), xor(a, b)
- is_power_of_two(x): x > 0 and exactly one bit set
- backfill_below_msb(x): every bit below the highest set bit, e.g. 0b1001 -> 0b1111
- shift_left(x, n=1), shift_right(x, n=1): logical shifts on the bit pattern;
  counts >= width shift everything out
- find_lsb(x), find_msb(x): keep only the lowest / highest set bit. Signed kinds
  scan the magnitude and give the result the sign of x (find_msb(-6) == -4).

Signed values are handled as their unsigned bit pattern wherever a shift is
involved, then reinterpreted, so sign extension never leaks into a result.
"""
from __future__ import annotations
import operator
from abc import ABC, abstractmethod
from typing import Dict

from enumkit.backend.constants import (
    DE_BRUIJN_SEQUENCE,
    DE_BRUIJN_SHIFT,
    DE_BRUIJN_BIT_POSITION,
    U64_MASK,
)
from enumkit.semantics.typesys import IntKind


class WidthOps(ABC):
    """Bit primitives for one IntKind."""

    backend_name = "abstract"

    def __init__(self, kind: IntKind) -> None:
        self.kind = kind

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.kind}>"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def or_(self, a, b) -> int:
        return self._or(self.kind.check(a), self.kind.check(b))

    def and_not(self, a, b) -> int:
        return self._and_not(self.kind.check(a), self.kind.check(b))

    def xor(self, a, b) -> int:
        return self._xor(self.kind.check(a), self.kind.check(b))

    def is_power_of_two(self, x) -> bool:
        return self._is_power_of_two(self.kind.check(x))

    def backfill_below_msb(self, x) -> int:
        return self._backfill_below_msb(self.kind.check(x))

    def shift_left(self, x, n: int = 1) -> int:
        return self._shift_left(self.kind.check(x), _check_count(n))

    def shift_right(self, x, n: int = 1) -> int:
        return self._shift_right(self.kind.check(x), _check_count(n))

    def find_lsb(self, x) -> int:
        return self._find_lsb(self.kind.check(x))

    def find_msb(self, x) -> int:
        return self._find_msb(self.kind.check(x))

    # ------------------------------------------------------------------
    # Backend hooks (operands already validated)
    # ------------------------------------------------------------------

    @abstractmethod
    def _or(self, a: int, b: int) -> int: ...

    @abstractmethod
    def _and_not(self, a: int, b: int) -> int: ...

    @abstractmethod
    def _xor(self, a: int, b: int) -> int: ...

    @abstractmethod
    def _is_power_of_two(self, x: int) -> bool: ...

    @abstractmethod
    def _backfill_below_msb(self, x: int) -> int: ...

    @abstractmethod
    def _shift_left(self, x: int, n: int) -> int: ...

    @abstractmethod
    def _shift_right(self, x: int, n: int) -> int: ...

    @abstractmethod
    def _find_lsb(self, x: int) -> int: ...

    @abstractmethod
    def _find_msb(self, x: int) -> int: ...


def _check_count(n) -> int:
    n = operator.index(n)
    if n < 0:
        raise ValueError(f"negative shift count: {n}")
    return n


def de_bruijn_position(bit: int) -> int:
    """Position of a single set bit (u64 pattern) via the De Bruijn multiply-and-shift scan."""
    return DE_BRUIJN_BIT_POSITION[((bit * DE_BRUIJN_SEQUENCE) & U64_MASK) >> DE_BRUIJN_SHIFT]


class PythonWidthOps(WidthOps):
    """Width primitives in plain Python integer arithmetic.

    Python ints are unbounded, so every result is masked to the width and
    reinterpreted through IntKind.from_pattern.
    """

    backend_name = "python"

    def __init__(self, kind: IntKind) -> None:
        super().__init__(kind)
        # Cascade of shifts 1, 2, 4, ... up to half the width
        self._backfill_shifts = tuple(1 << i for i in range(kind.width.bit_length() - 1))

    def _or(self, a: int, b: int) -> int:
        return self.kind.from_pattern(a | b)

    def _and_not(self, a: int, b: int) -> int:
        return self.kind.from_pattern(a & ~b)

    def _xor(self, a: int, b: int) -> int:
        return self.kind.from_pattern(a ^ b)

    def _is_power_of_two(self, x: int) -> bool:
        return x > 0 and (x & (x - 1)) == 0

    def _backfill_pattern(self, bits: int) -> int:
        for shift in self._backfill_shifts:
            bits |= bits >> shift
        return bits

    def _backfill_below_msb(self, x: int) -> int:
        return self.kind.from_pattern(self._backfill_pattern(self.kind.to_pattern(x)))

    def _shift_left(self, x: int, n: int) -> int:
        if n >= self.kind.width:
            return 0
        return self.kind.from_pattern(self.kind.to_pattern(x) << n)

    def _shift_right(self, x: int, n: int) -> int:
        if n >= self.kind.width:
            return 0
        return self.kind.from_pattern(self.kind.to_pattern(x) >> n)

    def _lsb_pattern(self, bits: int) -> int:
        isolated = bits & -bits
        return 1 << de_bruijn_position(isolated)

    def _msb_pattern(self, bits: int) -> int:
        bits = self._backfill_pattern(bits)
        bits &= ~(bits >> 1)
        return 1 << de_bruijn_position(bits)

    def _find_lsb(self, x: int) -> int:
        if x == 0:
            return 0
        bit = self.kind.from_pattern(self._lsb_pattern(self.kind.to_pattern(x)))
        if x < 0:
            # The lowest set bit of x and -x coincide; only the sign changes
            return self.kind.wrap(-bit)
        return bit

    def _find_msb(self, x: int) -> int:
        if x == 0:
            return 0
        if x >= 0:
            return self.kind.from_pattern(self._msb_pattern(x))
        magnitude = self.kind.to_pattern(-x)
        bit = self.kind.from_pattern(self._msb_pattern(magnitude))
        return self.kind.wrap(-bit)


PYTHON_WIDTH_OPS: Dict[IntKind, PythonWidthOps] = {kind: PythonWidthOps(kind) for kind in IntKind}
