"""
Native width primitives: JIT-compile the generated IR once per process and
bind each function through ctypes.

The MCJIT engine, its module and the ctypes prototypes live for the lifetime
of the process; rows keep a reference to the library so nothing is collected
while a bound function can still be called.
"""
from __future__ import annotations

import ctypes
import logging
import threading
from typing import Dict, Optional

import llvmlite.binding as llvm

from enumkit.backend import codegen
from enumkit.backend.width_ops import WidthOps
from enumkit.internals.errors import ERR, raise_error, BackendError
from enumkit.semantics.typesys import IntKind

logger = logging.getLogger(__name__)

CTYPES_OF_KIND: Dict[IntKind, type] = {
    IntKind.I8: ctypes.c_int8,
    IntKind.I16: ctypes.c_int16,
    IntKind.I32: ctypes.c_int32,
    IntKind.I64: ctypes.c_int64,
    IntKind.U8: ctypes.c_uint8,
    IntKind.U16: ctypes.c_uint16,
    IntKind.U32: ctypes.c_uint32,
    IntKind.U64: ctypes.c_uint64,
}

SHIFT_COUNT_CTYPE = ctypes.c_int32
BOOL_RESULT_CTYPE = ctypes.c_uint8


def init_llvm() -> None:
    """Initialize LLVM binding."""
    # llvm.initialize() is deprecated and handled automatically
    llvm.initialize_native_target()
    llvm.initialize_native_asmprinter()


class NativeLibrary:
    """A compiled copy of the width primitives module."""

    def __init__(self, opt_level: int = 2) -> None:
        init_llvm()
        self.ir_module = codegen.generate_module_ir()

        target = llvm.Target.from_default_triple()
        self.target_machine = target.create_target_machine(opt=opt_level, jit=True)

        try:
            self.llvm_module = llvm.parse_assembly(str(self.ir_module))
            self.llvm_module.verify()
        except RuntimeError as e:
            raise_error(ERR.EK3001, BackendError, message=str(e).strip())
        self.llvm_module.triple = self.target_machine.triple

        backing = llvm.parse_assembly("")
        self.engine = llvm.create_mcjit_compiler(backing, self.target_machine)
        self.engine.add_module(self.llvm_module)
        self.engine.finalize_object()
        self.engine.run_static_constructors()
        logger.debug("compiled %d width primitives (opt=%d, triple=%s)",
                     len(self.ir_module.functions), opt_level, self.target_machine.triple)

    def bind(self, op: str, kind: IntKind):
        """Return a ctypes callable for `enumkit_<op>_<kind>`."""
        name = codegen.function_name(op, kind)
        address = self.engine.get_function_address(name)
        if not address:
            raise_error(ERR.EK3002, BackendError, name=name)

        value_type = CTYPES_OF_KIND[kind]
        if op in (codegen.OP_OR, codegen.OP_AND_NOT, codegen.OP_XOR):
            prototype = ctypes.CFUNCTYPE(value_type, value_type, value_type)
        elif op in (codegen.OP_SHL, codegen.OP_LSHR):
            prototype = ctypes.CFUNCTYPE(value_type, value_type, SHIFT_COUNT_CTYPE)
        elif op == codegen.OP_IS_POW2:
            prototype = ctypes.CFUNCTYPE(BOOL_RESULT_CTYPE, value_type)
        else:
            prototype = ctypes.CFUNCTYPE(value_type, value_type)
        return prototype(address)


_library: Optional[NativeLibrary] = None
_library_lock = threading.Lock()


def get_library(opt_level: int = 2) -> NativeLibrary:
    """The process-wide NativeLibrary; exactly one thread compiles it.

    The opt level only matters for the first call.
    """
    global _library
    if _library is None:
        with _library_lock:
            if _library is None:
                _library = NativeLibrary(opt_level)
    return _library


class NativeWidthOps(WidthOps):
    """Width primitives backed by JIT-compiled LLVM functions."""

    backend_name = "native"

    def __init__(self, kind: IntKind, library: NativeLibrary) -> None:
        super().__init__(kind)
        self.library = library
        self._or_fn = library.bind(codegen.OP_OR, kind)
        self._and_not_fn = library.bind(codegen.OP_AND_NOT, kind)
        self._xor_fn = library.bind(codegen.OP_XOR, kind)
        self._is_pow2_fn = library.bind(codegen.OP_IS_POW2, kind)
        self._backfill_fn = library.bind(codegen.OP_BACKFILL, kind)
        self._shl_fn = library.bind(codegen.OP_SHL, kind)
        self._lshr_fn = library.bind(codegen.OP_LSHR, kind)
        self._find_lsb_fn = library.bind(codegen.OP_FIND_LSB, kind)
        self._find_msb_fn = library.bind(codegen.OP_FIND_MSB, kind)

    def _or(self, a: int, b: int) -> int:
        return self._or_fn(a, b)

    def _and_not(self, a: int, b: int) -> int:
        return self._and_not_fn(a, b)

    def _xor(self, a: int, b: int) -> int:
        return self._xor_fn(a, b)

    def _is_power_of_two(self, x: int) -> bool:
        return bool(self._is_pow2_fn(x))

    def _backfill_below_msb(self, x: int) -> int:
        return self._backfill_fn(x)

    def _shift_left(self, x: int, n: int) -> int:
        # Any count >= width behaves the same; keep it inside i32
        return self._shl_fn(x, min(n, self.kind.width))

    def _shift_right(self, x: int, n: int) -> int:
        return self._lshr_fn(x, min(n, self.kind.width))

    def _find_lsb(self, x: int) -> int:
        return self._find_lsb_fn(x)

    def _find_msb(self, x: int) -> int:
        return self._find_msb_fn(x)


def build_native_table(opt_level: int = 2) -> Dict[IntKind, NativeWidthOps]:
    library = get_library(opt_level)
    return {kind: NativeWidthOps(kind, library) for kind in IntKind}
