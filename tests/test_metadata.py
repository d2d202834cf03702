"""
Tests for the metadata cache: value and name sequences, bounds, the flags
mask and the per-enumeration registry.
"""

import threading

import pytest

from enumkit import EnumInfo, enum_info, EmptyTypeError
from sample_enums import Perm, Level, Color, Offset, Wide, Empty, PERMISSIONS


class TestSequences:

    def test_values_ascending_and_descending(self):
        info = EnumInfo(Level)
        assert info.values == (1, 5, 10)
        assert info.values_descending == (10, 5, 1)

    def test_aliases_collapse_in_values_not_names(self):
        info = EnumInfo(Color)
        assert info.values == (1, 2, 3)
        assert info.names == ("CRIMSON", "GREEN", "RED", "blue")
        assert info.names_descending == tuple(reversed(info.names))

    def test_signed_values_sort_numerically(self):
        assert EnumInfo(Offset).values == (-128, -6, -1, 0, 127)

    def test_values_are_plain_ints(self):
        assert all(type(v) is int for v in EnumInfo(Perm).values)

    @pytest.mark.parametrize("enum_type", [Perm, Level, Color, Offset, Wide, Empty, PERMISSIONS])
    def test_sequences_are_exact_reverses(self, enum_type):
        info = EnumInfo(enum_type)
        assert info.values_descending[::-1] == info.values
        assert info.names_descending[::-1] == info.names
        assert len(set(info.values)) == len(info.values)

    def test_memoized(self):
        info = EnumInfo(Level)
        assert info.values is info.values
        assert info.names is info.names


class TestBounds:

    def test_min_max(self):
        info = EnumInfo(Level)
        assert (info.min_value, info.max_value) == (1, 10)

    def test_signed_min_max(self):
        info = EnumInfo(Offset)
        assert (info.min_value, info.max_value) == (-128, 127)

    def test_zero(self):
        assert EnumInfo(Level).zero == 0
        assert EnumInfo(Empty).zero == 0

    @pytest.mark.parametrize("attr", ["min_value", "max_value", "flags_mask"])
    def test_empty_type(self, attr):
        info = EnumInfo(Empty)
        assert info.values == ()
        with pytest.raises(EmptyTypeError) as err:
            getattr(info, attr)
        assert err.value.code == "EK2005"


class TestFlagsMask:

    def test_flag_scenario(self, backend):
        info = EnumInfo(PERMISSIONS, backend=backend)
        assert info.has_flags
        assert info.flags_mask == 7

    def test_top_bit_of_u64(self, backend):
        assert EnumInfo(Wide, backend=backend).flags_mask == (1 << 63) | 1

    def test_signed_flags(self, backend):
        from enumkit import EnumKind
        kind = EnumKind.of("SignedBits", {"LOW": 1, "SIGN": -128}, "i8", is_flags=True)
        assert EnumInfo(kind, backend=backend).flags_mask == -127

    def test_not_computed_eagerly(self):
        info = EnumInfo(Level)
        info.values
        assert "flags_mask" not in vars(info)
        info.flags_mask
        assert "flags_mask" in vars(info)


class TestBitwiseBinding:

    def test_resolved_once(self, backend):
        info = EnumInfo(Perm, backend=backend)
        assert info.bitwise is info.bitwise
        assert info.bitwise.kind is info.representation

    def test_follows_representation(self, backend):
        assert EnumInfo(Wide, backend=backend).bitwise.kind.width == 64
        assert EnumInfo(Offset, backend=backend).bitwise.kind.signed


class TestRegistry:

    def test_one_info_per_enumeration(self):
        assert enum_info(Level) is enum_info(Level)
        assert enum_info(Perm) is not enum_info(Level)

    def test_backends_get_separate_infos(self):
        assert enum_info(Level, backend="python") is not enum_info(Level, backend="native")

    def test_concurrent_first_access_converges(self):
        from enumkit import EnumKind

        kind = EnumKind.of("Raced", {"A": 1, "B": 2, "C": 4}, "u16", is_flags=True)
        barrier = threading.Barrier(8)
        seen = []

        def worker():
            barrier.wait()
            info = enum_info(kind, backend="python")
            seen.append((info, info.values, info.flags_mask))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len({id(info) for info, _, _ in seen}) == 1
        assert {values for _, values, _ in seen} == {(1, 2, 4)}
        assert {mask for _, _, mask in seen} == {7}
