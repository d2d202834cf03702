"""
Tests for the LLVM IR generator and the JIT loader.
"""

import pytest
import llvmlite.binding as llvm

from enumkit import IntKind, BackendError
from enumkit.backend import codegen, jit


@pytest.fixture(scope="module")
def full_module():
    return codegen.generate_module_ir()


class TestFunctionNames:

    def test_naming(self):
        assert codegen.function_name(codegen.OP_FIND_MSB, IntKind.U8) == "enumkit_find_msb_u8"
        assert codegen.function_name(codegen.OP_SHL, IntKind.I64) == "enumkit_shl_i64"

    def test_signed_and_unsigned_share_ir_type(self):
        assert codegen.int_type_of(IntKind.I16) == codegen.int_type_of(IntKind.U16)
        assert codegen.int_type_of(IntKind.U64).width == 64


class TestModuleIR:

    def test_one_function_per_op_and_kind(self, full_module):
        names = {func.name for func in full_module.functions}
        assert len(names) == len(codegen.ALL_OPS) * len(IntKind)
        for kind in IntKind:
            for op in codegen.ALL_OPS:
                assert codegen.function_name(op, kind) in names

    def test_kind_subset(self):
        module = codegen.generate_module_ir([IntKind.U8])
        names = [func.name for func in module.functions]
        assert len(names) == len(codegen.ALL_OPS)
        assert all(name.endswith("_u8") for name in names)

    def test_signatures(self, full_module):
        text = str(full_module)
        assert 'define i8 @"enumkit_is_pow2_u32"(i32 %"x")' in text
        assert 'define i16 @"enumkit_lshr_i16"(i16 %"x", i32 %"n")' in text
        assert 'define i64 @"enumkit_or_u64"(i64 %"a", i64 %"b")' in text

    def test_shifts_are_logical(self, full_module):
        text = str(full_module)
        assert "ashr" not in text
        assert "lshr" in text

    def test_de_bruijn_table_is_inlined(self, full_module):
        text = str(full_module)
        assert "<64 x i8>" in text
        assert "extractelement" in text

    def test_module_verifies(self, full_module):
        jit.init_llvm()
        parsed = llvm.parse_assembly(str(full_module))
        parsed.verify()


class TestNativeLibrary:

    def test_library_is_shared(self):
        assert jit.get_library() is jit.get_library()

    def test_bind_unknown_function(self):
        library = jit.get_library()
        with pytest.raises(BackendError) as info:
            library.bind("popcount", IntKind.U8)
        assert info.value.code == "EK3002"

    def test_rows_keep_the_library(self):
        table = jit.build_native_table()
        assert set(table) == set(IntKind)
        assert table[IntKind.U8].library is jit.get_library()
        assert table[IntKind.U8].backend_name == "native"
