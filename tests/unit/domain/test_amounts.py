"""Unit tests for the fixed-point amount helpers."""

from decimal import Decimal, getcontext

import pytest

from burnpay.domain.amounts import (
    AMOUNT_QUANTUM,
    MAX_INTEGER_DIGITS,
    amount_context,
    quantize,
    to_decimal,
)
from burnpay.domain.errors import InvalidAmountError


class TestToDecimal:
    def test_float_uses_decimal_repr(self) -> None:
        assert to_decimal(0.02) == Decimal("0.02")

    def test_int_and_string(self) -> None:
        assert to_decimal(5) == Decimal("5")
        assert to_decimal("1.25") == Decimal("1.25")

    @pytest.mark.parametrize("value", [True, False, "abc", None, "nan", "-inf"])
    def test_rejects_non_numbers(self, value: object) -> None:
        with pytest.raises(ValueError):
            to_decimal(value)  # type: ignore[arg-type]

    def test_raises_requested_error_type(self) -> None:
        with pytest.raises(InvalidAmountError, match="Expected a number"):
            to_decimal("ten", InvalidAmountError)


class TestQuantize:
    def test_rounds_to_ledger_precision(self) -> None:
        assert quantize(Decimal(1) / Decimal(3)) == Decimal("0.333333333333333333")

    def test_exponent_is_fixed(self) -> None:
        assert quantize(Decimal("2")).as_tuple().exponent == AMOUNT_QUANTUM.as_tuple().exponent

    def test_large_values_keep_full_precision(self) -> None:
        value = Decimal("123456789012345678.123456789012345678")
        assert quantize(value) == value

    def test_widest_integer_part_fits(self) -> None:
        value = Decimal("9" * MAX_INTEGER_DIGITS)
        assert quantize(value) == value

    def test_too_many_integer_digits_raises_requested_error(self) -> None:
        with pytest.raises(InvalidAmountError, match="too large"):
            quantize(Decimal("1" + "0" * MAX_INTEGER_DIGITS), InvalidAmountError)

    def test_too_many_integer_digits_defaults_to_value_error(self) -> None:
        with pytest.raises(ValueError):
            quantize(Decimal("1e45"))


def test_amount_context_does_not_leak() -> None:
    outer = getcontext().prec
    with amount_context() as ctx:
        assert ctx.prec == 60
    assert getcontext().prec == outer
