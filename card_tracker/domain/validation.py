"""Input validation rules for users, cards and transactions"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Tuple

from card_tracker.domain.exceptions import ValidationError
from card_tracker.domain.models import CardFields, TransactionType
from card_tracker.utils.date_utils import parse_date

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
MAX_INTEREST_RATE = Decimal("100")
# Numeric(12,2) columns: ten integer digits and cents
MONEY_DECIMAL_PLACES = 2
MAX_MONEY = Decimal("9999999999.99")

REQUIRED_CARD_FIELDS = {
    "name": "name",
    "balance": "balance",
    "interest_rate": "interestRate",
    "due_date": "dueDate",
}


def to_decimal(value: Any, message: str) -> Decimal:
    """Convert a JSON number to Decimal, rejecting booleans and non-finite values"""
    if isinstance(value, bool) or value is None:
        raise ValidationError(message)
    try:
        # str() keeps floats like 0.1 from expanding to their binary value
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(message) from e
    if not number.is_finite():
        raise ValidationError(message)
    return number


def to_money(value: Any, message: str, label: str) -> Decimal:
    """
    Convert a JSON number to a Decimal that fits a money column unchanged.

    Values with fractions of a cent or above MAX_MONEY are rejected rather
    than rounded, so what is returned is exactly what gets stored.
    """
    number = to_decimal(value, message)
    if number > MAX_MONEY:
        raise ValidationError(f"{label} must not exceed {MAX_MONEY}")
    check_decimal_places(number, label)
    return number


def check_decimal_places(number: Decimal, label: str) -> None:
    if number.normalize().as_tuple().exponent < -MONEY_DECIMAL_PLACES:
        raise ValidationError(f"{label} must have at most {MONEY_DECIMAL_PLACES} decimal places")


def validate_email(email: Any) -> str:
    if not isinstance(email, str) or not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format")
    return email


def validate_registration(email: Any, name: Any, password: Any) -> Tuple[str, str, str]:
    """Check the fields required to create a login-capable user"""
    if not email or not name or not password:
        raise ValidationError("Please provide email, name, and password")
    validate_email(email)
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    return email, str(name), password


def validate_card_fields(data: Mapping[str, Any], partial: bool = False) -> CardFields:
    """
    Validate card attributes for create (all required) or update (partial).

    Keys are snake_case attribute names. On create, minimum_payment defaults
    to 0 when omitted. On update, only keys present in `data` are validated
    and returned; the rest stay None.

    Raises:
        ValidationError: On any missing or out-of-range field
    """
    if not partial:
        missing = [label for key, label in REQUIRED_CARD_FIELDS.items() if data.get(key) in (None, "")]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    fields = CardFields()

    if data.get("name") is not None:
        name = data["name"]
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Card name must not be empty")
        fields.name = name.strip()

    if data.get("balance") is not None:
        balance = to_money(data["balance"], "Balance must be a positive number", "Balance")
        if balance < 0:
            raise ValidationError("Balance must be a positive number")
        fields.balance = balance

    if data.get("interest_rate") is not None:
        rate = to_decimal(data["interest_rate"], "Interest rate must be between 0 and 100")
        if rate < 0 or rate > MAX_INTEREST_RATE:
            raise ValidationError("Interest rate must be between 0 and 100")
        check_decimal_places(rate, "Interest rate")
        fields.interest_rate = rate

    if data.get("due_date") is not None:
        try:
            fields.due_date = parse_date(data["due_date"])
        except ValueError as e:
            raise ValidationError("Due date must be a valid date") from e

    if data.get("minimum_payment") is not None:
        minimum = to_money(data["minimum_payment"], "Minimum payment must be a positive number", "Minimum payment")
        if minimum < 0:
            raise ValidationError("Minimum payment must be a positive number")
        fields.minimum_payment = minimum
    elif not partial:
        fields.minimum_payment = Decimal("0")

    return fields


def validate_transaction(amount: Any, txn_type: Any) -> Tuple[Decimal, TransactionType]:
    """Check a transaction's amount and type before touching the card"""
    try:
        parsed_type = TransactionType(txn_type)
    except ValueError as e:
        raise ValidationError('Transaction type must be either "payment" or "purchase"') from e

    parsed_amount = to_money(amount, "Amount must be a positive number", "Amount")
    if parsed_amount <= 0:
        raise ValidationError("Amount must be a positive number")

    return parsed_amount, parsed_type
