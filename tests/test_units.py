"""Tests for decimal <-> base unit conversion."""

from decimal import Decimal

import pytest

from models.errors import InvalidAmount
from units import (
    MAX_UINT256,
    format_ether,
    format_gwei,
    format_wei,
    parse_ether,
    parse_gwei,
    parse_wei,
    to_base_units,
    to_display_units,
)


class TestToBaseUnits:
    """Human amount -> integer base units."""

    def test_token_amount(self):
        assert to_base_units("0.1", 6) == 100000

    def test_ether_amount_has_no_float_drift(self):
        assert to_base_units("0.005", 18) == 5_000_000_000_000_000
        assert to_base_units(0.1, 18) == 10**17

    def test_integer_and_decimal_inputs(self):
        assert to_base_units(3, 6) == 3_000_000
        assert to_base_units(Decimal("1.5"), 9) == 1_500_000_000

    def test_rounds_half_up(self):
        assert to_base_units("0.0000005", 6) == 1
        assert to_base_units("0.0000004", 6) == 0
        assert to_base_units("2.5", 0) == 3

    def test_uint256_scale(self):
        assert to_base_units("115792089237316195423570985008687907853269984665640564039457", 18) == (
            115792089237316195423570985008687907853269984665640564039457 * 10**18
        )

    @pytest.mark.parametrize("bad", ["abc", "", "-1", "NaN", "Infinity", "1e", None, True, [1]])
    def test_rejects_invalid_amounts(self, bad):
        with pytest.raises(InvalidAmount):
            to_base_units(bad, 18)

    @pytest.mark.parametrize("huge", ["1e200", "1e999999", Decimal("9" * 130)])
    def test_out_of_range_is_invalid_amount(self, huge):
        with pytest.raises(InvalidAmount):
            to_base_units(huge, 18)

    def test_rejects_values_above_uint256(self):
        assert to_base_units(str(MAX_UINT256), 0) == MAX_UINT256
        with pytest.raises(InvalidAmount):
            to_base_units(str(MAX_UINT256 + 1), 0)
        with pytest.raises(InvalidAmount):
            to_base_units("1e60", 18)

    def test_rejects_negative_decimals(self):
        with pytest.raises(InvalidAmount):
            to_base_units("1", -1)


class TestToDisplayUnits:
    """Integer base units -> Decimal."""

    def test_token_amount(self):
        assert to_display_units(100000, 6) == Decimal("0.1")

    def test_zero_decimals(self):
        assert to_display_units(42, 0) == Decimal(42)

    @pytest.mark.parametrize("amount,decimals", [
        ("0", 18),
        ("0.1", 6),
        ("123.456789", 6),
        ("0.000000000000000001", 18),
        ("987654321.123456789012345678", 18),
    ])
    def test_round_trip(self, amount, decimals):
        assert to_display_units(to_base_units(amount, decimals), decimals) == Decimal(amount)


class TestEvmShortcuts:

    def test_ether(self):
        assert parse_ether("1") == 10**18
        assert format_ether(10**18) == Decimal(1)

    def test_gwei(self):
        assert parse_gwei("16.5") == 16_500_000_000
        assert format_gwei(100 * 10**9) == Decimal(100)

    def test_wei(self):
        assert parse_wei("21000") == 21000
        assert format_wei(21000) == Decimal(21000)

    def test_zero(self):
        assert parse_gwei("0") == 0
        assert format_ether(0) == Decimal(0)

    def test_rounds_half_up_to_unit_precision(self):
        assert parse_gwei("0.0000000005") == 1
        assert parse_gwei("0.0000000004") == 0
        assert parse_ether(0.1) == 10**17

    @pytest.mark.parametrize("bad", ["-1", "abc", "1e200", str(2**256)])
    def test_parse_rejects_invalid(self, bad):
        with pytest.raises(InvalidAmount):
            parse_ether(bad)

    def test_format_rejects_out_of_range(self):
        with pytest.raises(InvalidAmount):
            format_gwei(-1)
