"""Fixed-point amount helpers shared by the fee split and the ledger.

Amounts are ``Decimal`` values quantized to ``AMOUNT_DECIMALS`` places. All
arithmetic runs under a wide context so adding and subtracting quantized
amounts never rounds.
"""

from __future__ import annotations

from contextlib import contextmanager
from decimal import Context, Decimal, InvalidOperation, ROUND_HALF_EVEN, localcontext
from typing import Iterator, Type, Union

AMOUNT_DECIMALS = 18
AMOUNT_QUANTUM = Decimal(1).scaleb(-AMOUNT_DECIMALS)

_CONTEXT = Context(prec=60, rounding=ROUND_HALF_EVEN)

# Largest number of digits before the point that still fits at full precision.
MAX_INTEGER_DIGITS = _CONTEXT.prec - AMOUNT_DECIMALS

Numeric = Union[Decimal, int, float, str]


@contextmanager
def amount_context() -> Iterator[Context]:
    """Run a block of amount arithmetic under the shared wide context."""
    with localcontext(_CONTEXT) as ctx:
        yield ctx


def to_decimal(value: Numeric, error: Type[ValueError] = ValueError) -> Decimal:
    """Convert ``value`` to a finite Decimal or raise ``error``.

    Floats go through ``str`` so ``0.02`` becomes ``Decimal("0.02")`` rather
    than its binary expansion.
    """
    if isinstance(value, bool):
        raise error(f"Expected a number, got {value!r}")
    try:
        if isinstance(value, float):
            result = Decimal(str(value))
        else:
            result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise error(f"Expected a number, got {value!r}")
    if not result.is_finite():
        raise error(f"Expected a finite number, got {value!r}")
    return result


def quantize(value: Decimal, error: Type[ValueError] = ValueError) -> Decimal:
    """Round ``value`` to the ledger's fixed-point precision.

    Raises ``error`` when ``value`` has more than ``MAX_INTEGER_DIGITS``
    integer digits.
    """
    with amount_context():
        try:
            return value.quantize(AMOUNT_QUANTUM)
        except InvalidOperation:
            raise error(
                f"Amount {value} is too large; at most {MAX_INTEGER_DIGITS} "
                "integer digits are supported"
            )
