"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List
import uuid


class TransactionType(str, Enum):
    """Direction of a transaction's effect on the card balance"""

    PURCHASE = "purchase"  # increases balance
    PAYMENT = "payment"  # decreases balance


@dataclass
class CardFields:
    """Validated card attributes; None means "not provided" on partial updates"""

    name: str | None = None
    balance: Decimal | None = None
    interest_rate: Decimal | None = None
    due_date: date | None = None
    minimum_payment: Decimal | None = None

    def provided(self) -> dict:
        return {key: value for key, value in self.__dict__.items() if value is not None}


@dataclass
class UpcomingDue:
    """Card due date entry for the dashboard summary"""

    card_id: uuid.UUID
    name: str
    due_date: date
    days_until_due: int
    balance: Decimal
    minimum_payment: Decimal


@dataclass
class PortfolioSummary:
    """Aggregated view over all of a user's cards"""

    card_count: int
    total_balance: Decimal
    total_minimum_payment: Decimal
    upcoming: List[UpcomingDue] = field(default_factory=list)


@dataclass
class AuthenticatedUser:
    """Caller identity resolved from a session token (no password hash)"""

    id: uuid.UUID
    email: str
    name: str
    created_at: datetime
    updated_at: datetime | None = None
