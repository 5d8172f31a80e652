"""Balance reconciliation - how transactions move a card balance

A card balance is stored on the card and recomputed on every transaction
create/delete. These functions are the only place the direction of a
transaction is interpreted:

- purchase: balance + amount
- payment:  balance - amount

Both directions are guarded by the same invariant: a committed balance is
never negative. Balances are not reconciled against the full transaction
history, so deleting transactions out of chronological order can leave a
balance that differs from the sum of the remaining rows (but is never
negative).
"""

from decimal import Decimal

from card_tracker.domain.exceptions import InvalidPayment, InvalidState, ValidationError
from card_tracker.domain.models import TransactionType
from card_tracker.domain.validation import MAX_MONEY


def signed_amount(amount: Decimal, txn_type: TransactionType) -> Decimal:
    """Effect of a transaction on the balance (positive for purchases)"""
    if txn_type == TransactionType.PURCHASE:
        return amount
    return -amount


def apply_transaction(balance: Decimal, amount: Decimal, txn_type: TransactionType) -> Decimal:
    """
    Balance after recording a new transaction.

    Raises:
        InvalidPayment: If the resulting balance would be negative
        ValidationError: If a purchase would push the balance past MAX_MONEY
    """
    candidate = balance + signed_amount(amount, txn_type)
    if candidate < 0:
        raise InvalidPayment()
    if candidate > MAX_MONEY:
        raise ValidationError(f"Balance must not exceed {MAX_MONEY}")
    return candidate


def reverse_transaction(balance: Decimal, amount: Decimal, txn_type: TransactionType) -> Decimal:
    """
    Balance after removing a previously recorded transaction.

    Raises:
        InvalidState: If the resulting balance would be negative, which can
            happen when later payments consumed the purchase being removed,
            or when restoring a payment would push the balance past MAX_MONEY
    """
    candidate = balance - signed_amount(amount, txn_type)
    if candidate < 0:
        raise InvalidState()
    if candidate > MAX_MONEY:
        raise InvalidState(f"Cannot delete transaction: balance would exceed {MAX_MONEY}")
    return candidate
