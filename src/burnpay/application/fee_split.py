"""Pure burn / merchant split functions.

The payer is charged a gross-up so that after the burn the merchant receives
exactly the requested stable amount at the quoted rate. These functions hold
no state and can be tested without the ledger or the oracle.
"""

from __future__ import annotations

from decimal import Decimal

from ..domain.amounts import Numeric, amount_context, quantize, to_decimal
from ..domain.entities import PaymentSplit
from ..domain.errors import (
    InvalidAmountError,
    InvalidBurnPercentageError,
    InvalidRateError,
)


def validate_burn_percentage(burn_percentage: Numeric) -> Decimal:
    """Return ``burn_percentage`` as a Decimal in [0, 1).

    Raises:
        InvalidBurnPercentageError: If the value is not a number in [0, 1).
    """
    value = to_decimal(burn_percentage, InvalidBurnPercentageError)
    if value < 0 or value >= 1:
        raise InvalidBurnPercentageError(
            f"Burn percentage must be in [0, 1), got {value}"
        )
    return value


def compute_split(
    target_stable_amount: Numeric,
    rate: Numeric,
    burn_percentage: Numeric,
) -> PaymentSplit:
    """Compute what the payer must send for the merchant to net ``target_stable_amount``.

    Args:
        target_stable_amount: Amount the merchant should receive, in stable units
        rate: Stable units per one channel unit
        burn_percentage: Fraction of the gross amount that is burned

    Returns:
        The gross channel amount with its burn and merchant parts. The burn and
        total are quantized before the merchant part is derived, so
        ``burn_amount == total_channel_amount - merchant_channel_amount``.

    Raises:
        InvalidAmountError: If the target is not positive or is too large.
        InvalidRateError: If the rate is not positive, or so small that the
            channel amount exceeds ledger precision.
        InvalidBurnPercentageError: If the burn percentage is outside [0, 1).
    """
    target = to_decimal(target_stable_amount, InvalidAmountError)
    if target <= 0:
        raise InvalidAmountError(f"Amount must be positive, got {target}")
    quantize(target, InvalidAmountError)
    rate_value = to_decimal(rate, InvalidRateError)
    if rate_value <= 0:
        raise InvalidRateError(f"Rate must be positive, got {rate_value}")
    burn = validate_burn_percentage(burn_percentage)

    with amount_context():
        base_channel_amount = target / rate_value
        # A tiny rate can push the gross amount past ledger precision.
        total_channel_amount = quantize(
            base_channel_amount / (1 - burn), InvalidRateError
        )
        burn_amount = quantize(total_channel_amount * burn)
        merchant_channel_amount = total_channel_amount - burn_amount
        merchant_stable_amount = merchant_channel_amount * rate_value

    return PaymentSplit(
        target_stable_amount=target,
        base_channel_amount=quantize(base_channel_amount),
        total_channel_amount=total_channel_amount,
        burn_amount=burn_amount,
        merchant_channel_amount=merchant_channel_amount,
        merchant_stable_amount=merchant_stable_amount,
        rate_used=rate_value,
        burn_percentage=burn,
    )


def compute_settlement(
    payee_balance: Decimal, burn_percentage: Numeric
) -> tuple[Decimal, Decimal]:
    """Split a closing payee balance into ``(burn_amount, settled_amount)``.

    Only value that actually moved to the payee is burned; the payer's unspent
    remainder is returned untouched and is not an input here.
    """
    burn = validate_burn_percentage(burn_percentage)
    with amount_context():
        burn_amount = quantize(payee_balance * burn)
        settled_amount = payee_balance - burn_amount
    return burn_amount, settled_amount
