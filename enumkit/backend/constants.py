"""Bit-scan constants shared by the python and native width primitives.

The De Bruijn scan maps an isolated bit to its position: multiply the bit
(as u64) by DE_BRUIJN_SEQUENCE, keep the top 6 bits of the 64-bit product and
look the result up in DE_BRUIJN_BIT_POSITION.
"""
from llvmlite import ir

# ============================================================================
# De Bruijn bit scan
# ============================================================================

DE_BRUIJN_SEQUENCE = 0x37E84A99DAE458F
DE_BRUIJN_SHIFT = 58
U64_MASK = (1 << 64) - 1

DE_BRUIJN_BIT_POSITION = (
    0, 1, 17, 2, 18, 50, 3, 57,
    47, 19, 22, 51, 29, 4, 33, 58,
    15, 48, 20, 27, 25, 23, 52, 41,
    54, 30, 38, 5, 43, 34, 59, 8,
    63, 16, 49, 56, 46, 21, 28, 32,
    14, 26, 24, 40, 53, 37, 42, 7,
    62, 55, 45, 31, 13, 39, 36, 6,
    61, 44, 12, 35, 60, 11, 10, 9,
)


# ============================================================================
# LLVM types and constants
# ============================================================================

I8 = ir.IntType(8)
I32 = ir.IntType(32)
I64 = ir.IntType(64)

# Shift counts cross the native boundary as i32
SHIFT_COUNT_TYPE = I32

# Predicates come back as i8 (0/1) rather than i1 to keep the C ABI trivial
BOOL_RESULT_TYPE = I8

DE_BRUIJN_TABLE_TYPE = ir.VectorType(I8, len(DE_BRUIJN_BIT_POSITION))


def make_int_const(int_type: ir.IntType, value: int) -> ir.Constant:
    """Constant of `int_type` from a Python int; negative values are encoded as two's complement."""
    return ir.Constant(int_type, value & ((1 << int_type.width) - 1))


def make_de_bruijn_table() -> ir.Constant:
    return ir.Constant(DE_BRUIJN_TABLE_TYPE, list(DE_BRUIJN_BIT_POSITION))
