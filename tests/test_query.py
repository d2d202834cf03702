"""
Tests for the query layer: clamping, membership, flag composition, random
draws, display attributes and formatting.
"""

import random

import pytest

from enumkit import (
    EnumInfo,
    EmptyTypeError,
    RepresentationOverflowError,
    StaticAttributeLookup,
)
from sample_enums import Perm, Level, Color, Offset, Wide, Empty, PERMISSIONS


@pytest.fixture
def perms(backend):
    return EnumInfo(PERMISSIONS, backend=backend)


@pytest.fixture
def levels():
    return EnumInfo(Level)


class TestClamp:

    @pytest.mark.parametrize("x,expected", [(-5, 0), (0, 0), (3, 3), (9, 9), (12, 9)])
    def test_three_orderings(self, levels, x, expected):
        assert levels.clamp(x, 0, 9) == expected

    def test_defined_range_scenario(self, levels):
        assert levels.clamp_to_defined_range(0) == 1
        assert levels.clamp_to_defined_range(11) == 10
        # Raw numeric bounds, not membership: 7 lies inside [1, 10]
        assert levels.clamp_to_defined_range(7) == 7
        assert not levels.is_defined(7)

    def test_members_are_accepted(self, levels):
        assert levels.clamp(Level.High, Level.Low, Level.Mid) == 5

    def test_operands_must_fit(self):
        info = EnumInfo(Perm)
        with pytest.raises(RepresentationOverflowError):
            info.clamp(300, 0, 7)

    def test_empty_type(self):
        with pytest.raises(EmptyTypeError):
            EnumInfo(Empty).clamp_to_defined_range(3)


class TestIsDefined:

    def test_non_flags_is_exact_membership(self, levels):
        assert levels.is_defined(5)
        assert not levels.is_defined(7)
        assert not levels.is_defined(0)
        assert levels.is_defined(Level.Mid)

    def test_flag_scenario(self, perms):
        assert perms.is_defined(3)
        assert perms.is_defined(7)
        assert perms.is_defined(0)
        assert not perms.is_defined(8)
        assert not perms.is_defined(9)

    def test_combinations_of_declared_flags(self, perms):
        for a in perms.values:
            for b in perms.values:
                assert perms.is_defined(perms.with_flags(a, b))

    def test_out_of_range_is_not_defined(self, perms):
        assert not perms.is_defined(256)
        assert not perms.is_defined(-1)

    def test_names(self, levels):
        assert levels.is_defined("Mid")
        assert not levels.is_defined("mid")
        assert levels.is_name_defined("mid", ignore_case=True)
        assert not levels.is_name_defined("Medium", ignore_case=True)

    def test_ignore_case_on_mixed_case_names(self):
        info = EnumInfo(Color)
        assert info.is_name_defined("BLUE", ignore_case=True)
        assert info.is_name_defined("crimson", ignore_case=True)
        assert not info.is_name_defined("BLUE")

    def test_empty_type(self):
        info = EnumInfo(Empty)
        assert not info.is_defined(0)
        assert not info.is_name_defined("anything")


class TestFlagComposition:

    def test_with_without_toggle(self, perms):
        assert perms.with_flags(1, 2) == 3
        assert perms.without_flags(7, 2) == 5
        assert perms.with_flags_toggled(5, 1) == 4
        assert perms.with_flags_toggled(4, 1) == 5

    def test_members(self, backend):
        info = EnumInfo(Perm, backend=backend)
        assert info.with_flags(Perm.READ, Perm.EXECUTE) == 5
        assert info.without_flags(Perm.READ | Perm.WRITE, Perm.READ) == 2

    def test_flag_scenario_bit_queries(self, perms):
        assert perms.bitwise.find_msb(6) == 4
        assert perms.bitwise.find_lsb(6) == 2
        assert not perms.bitwise.is_power_of_two(3)

    def test_u64_top_bit(self, backend):
        info = EnumInfo(Wide, backend=backend)
        both = info.with_flags(Wide.LOW, Wide.HIGH)
        assert both == (1 << 63) | 1
        assert info.is_defined(both)
        assert info.without_flags(both, Wide.LOW) == 1 << 63


class TestRandomValue:

    def test_draws_only_defined_values(self, levels):
        rng = random.Random(1234)
        draws = {levels.random_value(rng) for _ in range(200)}
        assert draws == {1, 5, 10}

    def test_never_a_combination(self, perms):
        rng = random.Random(7)
        for _ in range(100):
            assert perms.random_value(rng) in perms.values

    def test_instance_rng(self):
        info = EnumInfo(Level, rng=random.Random(99))
        again = EnumInfo(Level, rng=random.Random(99))
        assert [info.random_value() for _ in range(10)] == [again.random_value() for _ in range(10)]

    def test_empty_type(self):
        with pytest.raises(EmptyTypeError):
            EnumInfo(Empty).random_value()


class TestAttributes:

    def test_declared_display_names(self):
        info = EnumInfo(Perm)
        assert info.display_name(Perm.READ) == "Read access"
        assert info.display_name(2) == "Write access"
        assert info.display_name(4) is None
        assert info.description(Perm.EXECUTE) == "May run the file"

    def test_alias_text(self):
        assert EnumInfo(Color).display_name(1) == "Crimson red"

    def test_injected_lookup(self):
        lookup = StaticAttributeLookup({5: "Medium"}, {10: "Highest level"})
        info = EnumInfo(Level, attributes=lookup)
        assert info.display_name(5) == "Medium"
        assert info.description(10) == "Highest level"
        assert info.display_name(1) is None


class TestFormatting:

    def test_name_of(self):
        info = EnumInfo(Color)
        assert info.name_of(1) == "RED"
        assert info.name_of(3) == "blue"
        assert info.name_of(4) is None

    def test_declared_values_format_as_names(self, levels):
        assert levels.format_value(5) == "Mid"
        assert levels.format_value(7) == "7"

    def test_flag_combinations(self, perms):
        assert perms.format_value(0) == "None"
        assert perms.format_value(3) == "Read, Write"
        assert perms.format_value(7) == "Read, Write, Execute"
        assert perms.format_value(9) == "9"

    def test_signed(self):
        info = EnumInfo(Offset)
        assert info.format_value(-128) == "MIN"
        assert info.format_value(-7) == "-7"

    @pytest.mark.parametrize("enum_type", [Perm, Level, Color, Offset, Wide, PERMISSIONS])
    def test_round_trip(self, enum_type, backend):
        info = EnumInfo(enum_type, backend=backend)
        for value in info.values:
            assert info.parse(info.format_value(value)) == value
