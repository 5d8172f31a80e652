"""Dashboard aggregation over a user's cards"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Protocol
import uuid

from card_tracker.domain.models import PortfolioSummary, UpcomingDue
from card_tracker.utils.date_utils import days_between


class CardLike(Protocol):
    id: uuid.UUID
    name: str
    balance: Decimal
    minimum_payment: Decimal
    due_date: date


def summarize_cards(cards: Iterable[CardLike], today: date | None = None) -> PortfolioSummary:
    """
    Total balance and minimum payment across cards, plus due dates in order.

    Upcoming entries are sorted by due date, earliest first; overdue cards
    keep a negative days_until_due so the UI can flag them.
    """
    today = today or date.today()
    cards = list(cards)

    upcoming = sorted(
        (
            UpcomingDue(
                card_id=card.id,
                name=card.name,
                due_date=card.due_date,
                days_until_due=days_between(today, card.due_date),
                balance=Decimal(card.balance),
                minimum_payment=Decimal(card.minimum_payment),
            )
            for card in cards
        ),
        key=lambda entry: (entry.due_date, entry.name),
    )

    return PortfolioSummary(
        card_count=len(cards),
        total_balance=sum((Decimal(card.balance) for card in cards), Decimal("0")),
        total_minimum_payment=sum((Decimal(card.minimum_payment) for card in cards), Decimal("0")),
        upcoming=upcoming,
    )
