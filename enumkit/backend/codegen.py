"""
LLVM IR generation for the width primitives.

Generates one function per primitive per integer kind:

    enumkit_or_{kind}(T a, T b) -> T
    enumkit_and_not_{kind}(T a, T b) -> T
    enumkit_xor_{kind}(T a, T b) -> T
    enumkit_is_pow2_{kind}(T x) -> i8
    enumkit_backfill_{kind}(T x) -> T
    enumkit_shl_{kind}(T x, i32 n) -> T
    enumkit_lshr_{kind}(T x, i32 n) -> T
    enumkit_find_lsb_{kind}(T x) -> T
    enumkit_find_msb_{kind}(T x) -> T

For kinds: i8, i16, i32, i64, u8, u16, u32, u64

LLVM integers carry no signedness, so a signed and an unsigned kind of the same
width share the IR type and differ only in the comparisons and the sign
handling of the bit scans:
    - is_pow2 uses a signed 'x > 0' for signed kinds
    - find_lsb/find_msb scan the magnitude of negative values and negate the result

Shifts are always logical (lshr), matching the pure-Python rows. Shift counts
of width or more produce 0 instead of LLVM poison.
"""
from __future__ import annotations
from typing import Iterable, Optional

from llvmlite import ir

from enumkit.backend.constants import (
    I64,
    SHIFT_COUNT_TYPE,
    BOOL_RESULT_TYPE,
    DE_BRUIJN_SEQUENCE,
    DE_BRUIJN_SHIFT,
    make_int_const,
    make_de_bruijn_table,
)
from enumkit.semantics.typesys import IntKind

MODULE_NAME = "enumkit_width_ops"

OP_OR = "or"
OP_AND_NOT = "and_not"
OP_XOR = "xor"
OP_IS_POW2 = "is_pow2"
OP_BACKFILL = "backfill"
OP_SHL = "shl"
OP_LSHR = "lshr"
OP_FIND_LSB = "find_lsb"
OP_FIND_MSB = "find_msb"

ALL_OPS = (OP_OR, OP_AND_NOT, OP_XOR, OP_IS_POW2, OP_BACKFILL,
           OP_SHL, OP_LSHR, OP_FIND_LSB, OP_FIND_MSB)


def function_name(op: str, kind: IntKind) -> str:
    return f"enumkit_{op}_{kind}"


def int_type_of(kind: IntKind) -> ir.IntType:
    return ir.IntType(kind.width)


def _begin(module: ir.Module, op: str, kind: IntKind, ret_type: ir.Type,
           arg_types: list, arg_names: tuple) -> tuple[ir.Function, ir.IRBuilder]:
    func_type = ir.FunctionType(ret_type, arg_types)
    func = ir.Function(module, func_type, name=function_name(op, kind))
    for arg, name in zip(func.args, arg_names):
        arg.name = name
    entry = func.append_basic_block("entry")
    return func, ir.IRBuilder(entry)


# ============================================================================
# Shared emitters
# ============================================================================

def emit_backfill(builder: ir.IRBuilder, value: ir.Value, kind: IntKind) -> ir.Value:
    """x |= x >> 1; x |= x >> 2; ... up to half the width, with logical shifts."""
    int_type = int_type_of(kind)
    shift = 1
    while shift < kind.width:
        shifted = builder.lshr(value, ir.Constant(int_type, shift), name=f"shr{shift}")
        value = builder.or_(value, shifted, name=f"fill{shift}")
        shift <<= 1
    return value


def emit_bit_from_isolated(builder: ir.IRBuilder, isolated: ir.Value, kind: IntKind) -> ir.Value:
    """Rebuild a single-bit value from an isolated bit via the De Bruijn scan.

    position = table[(zext64(isolated) * DE_BRUIJN_SEQUENCE) >> 58]
    result   = 1 << position
    """
    int_type = int_type_of(kind)
    if kind.width < 64:
        wide = builder.zext(isolated, I64, name="wide")
    else:
        wide = isolated
    product = builder.mul(wide, make_int_const(I64, DE_BRUIJN_SEQUENCE), name="product")
    index = builder.lshr(product, ir.Constant(I64, DE_BRUIJN_SHIFT), name="index")
    position = builder.extract_element(make_de_bruijn_table(), index, name="position")
    if kind.width > 8:
        position = builder.zext(position, int_type, name="position_ext")
    return builder.shl(ir.Constant(int_type, 1), position, name="bit")


def emit_apply_sign(builder: ir.IRBuilder, bit: ir.Value, is_negative: Optional[ir.Value],
                    kind: IntKind) -> ir.Value:
    """Negate `bit` when the input was negative (wrapping, so MIN stays MIN)."""
    if is_negative is None:
        return bit
    zero = ir.Constant(int_type_of(kind), 0)
    negated = builder.sub(zero, bit, name="negated")
    return builder.select(is_negative, negated, bit, name="signed_bit")


# ============================================================================
# Function generators
# ============================================================================

def generate_bitwise_functions(module: ir.Module, kind: IntKind) -> None:
    """Generate or / and_not / xor for one kind."""
    int_type = int_type_of(kind)

    for op in (OP_OR, OP_AND_NOT, OP_XOR):
        func, builder = _begin(module, op, kind, int_type, [int_type, int_type], ("a", "b"))
        a, b = func.args

        if op == OP_OR:
            result = builder.or_(a, b, name="result")
        elif op == OP_AND_NOT:
            inverted = builder.not_(b, name="inverted")
            result = builder.and_(a, inverted, name="result")
        else:
            result = builder.xor(a, b, name="result")

        builder.ret(result)


def generate_is_power_of_two_function(module: ir.Module, kind: IntKind) -> None:
    """Generate is_pow2: (x > 0) && ((x & (x - 1)) == 0), returned as i8."""
    int_type = int_type_of(kind)
    func, builder = _begin(module, OP_IS_POW2, kind, BOOL_RESULT_TYPE, [int_type], ("x",))
    x = func.args[0]
    zero = ir.Constant(int_type, 0)
    one = ir.Constant(int_type, 1)

    # Negative values are never powers of two for signed kinds
    if kind.signed:
        positive = builder.icmp_signed('>', x, zero, name="positive")
    else:
        positive = builder.icmp_unsigned('!=', x, zero, name="positive")

    below = builder.sub(x, one, name="below")
    overlap = builder.and_(x, below, name="overlap")
    single_bit = builder.icmp_unsigned('==', overlap, zero, name="single_bit")
    result = builder.and_(positive, single_bit, name="result")
    builder.ret(builder.zext(result, BOOL_RESULT_TYPE, name="result_i8"))


def generate_backfill_function(module: ir.Module, kind: IntKind) -> None:
    int_type = int_type_of(kind)
    func, builder = _begin(module, OP_BACKFILL, kind, int_type, [int_type], ("x",))
    builder.ret(emit_backfill(builder, func.args[0], kind))


def generate_shift_functions(module: ir.Module, kind: IntKind) -> None:
    """Generate shl and lshr taking an i32 count.

    Implementation:
        in_range = n <u width
        result = in_range ? (x op (in_range ? n : 0)) : 0

    The inner select keeps the shift amount legal so LLVM never sees an
    out-of-range shift.
    """
    int_type = int_type_of(kind)
    zero = ir.Constant(int_type, 0)

    for op in (OP_SHL, OP_LSHR):
        func, builder = _begin(module, op, kind, int_type, [int_type, SHIFT_COUNT_TYPE], ("x", "n"))
        x, n = func.args

        width = ir.Constant(SHIFT_COUNT_TYPE, kind.width)
        in_range = builder.icmp_unsigned('<', n, width, name="in_range")

        if kind.width < SHIFT_COUNT_TYPE.width:
            count = builder.trunc(n, int_type, name="count")
        elif kind.width > SHIFT_COUNT_TYPE.width:
            count = builder.zext(n, int_type, name="count")
        else:
            count = n
        safe_count = builder.select(in_range, count, zero, name="safe_count")

        if op == OP_SHL:
            shifted = builder.shl(x, safe_count, name="shifted")
        else:
            shifted = builder.lshr(x, safe_count, name="shifted")

        builder.ret(builder.select(in_range, shifted, zero, name="result"))


def generate_find_lsb_function(module: ir.Module, kind: IntKind) -> None:
    """Generate find_lsb: isolate x & -x, then rebuild the bit via De Bruijn."""
    int_type = int_type_of(kind)
    func, builder = _begin(module, OP_FIND_LSB, kind, int_type, [int_type], ("x",))
    x = func.args[0]
    zero = ir.Constant(int_type, 0)

    # The lowest set bit of x and -x coincide, so no magnitude is needed here
    negated = builder.sub(zero, x, name="neg_x")
    isolated = builder.and_(x, negated, name="isolated")
    bit = emit_bit_from_isolated(builder, isolated, kind)

    is_negative = builder.icmp_signed('<', x, zero, name="is_negative") if kind.signed else None
    bit = emit_apply_sign(builder, bit, is_negative, kind)

    is_zero = builder.icmp_unsigned('==', x, zero, name="is_zero")
    builder.ret(builder.select(is_zero, zero, bit, name="result"))


def generate_find_msb_function(module: ir.Module, kind: IntKind) -> None:
    """Generate find_msb: backfill, keep the top bit (y & ~(y >> 1)), De Bruijn."""
    int_type = int_type_of(kind)
    func, builder = _begin(module, OP_FIND_MSB, kind, int_type, [int_type], ("x",))
    x = func.args[0]
    zero = ir.Constant(int_type, 0)
    one = ir.Constant(int_type, 1)

    if kind.signed:
        is_negative = builder.icmp_signed('<', x, zero, name="is_negative")
        negated = builder.sub(zero, x, name="neg_x")
        magnitude = builder.select(is_negative, negated, x, name="magnitude")
    else:
        is_negative = None
        magnitude = x

    filled = emit_backfill(builder, magnitude, kind)
    below = builder.lshr(filled, one, name="below")
    isolated = builder.and_(filled, builder.not_(below, name="not_below"), name="isolated")
    bit = emit_bit_from_isolated(builder, isolated, kind)
    bit = emit_apply_sign(builder, bit, is_negative, kind)

    is_zero = builder.icmp_unsigned('==', x, zero, name="is_zero")
    builder.ret(builder.select(is_zero, zero, bit, name="result"))


def generate_kind_functions(module: ir.Module, kind: IntKind) -> None:
    """Generate every width primitive for one kind."""
    generate_bitwise_functions(module, kind)
    generate_is_power_of_two_function(module, kind)
    generate_backfill_function(module, kind)
    generate_shift_functions(module, kind)
    generate_find_lsb_function(module, kind)
    generate_find_msb_function(module, kind)


def generate_module_ir(kinds: Optional[Iterable[IntKind]] = None) -> ir.Module:
    """Build the LLVM module holding the width primitives for `kinds` (default: all)."""
    module = ir.Module(name=MODULE_NAME)
    for kind in (IntKind if kinds is None else kinds):
        generate_kind_functions(module, kind)
    return module
