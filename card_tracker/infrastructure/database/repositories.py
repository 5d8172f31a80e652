"""Data access layer for users and credit cards

Every card lookup is filtered by id AND owner id; an empty result is
reported as NotFound whether the card is missing or belongs to someone
else.
"""

import uuid
from datetime import date
from typing import Any, List, Mapping, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from card_tracker.domain.exceptions import AlreadyExists, NotFound
from card_tracker.domain.models import PortfolioSummary
from card_tracker.domain.summary import summarize_cards
from card_tracker.domain.validation import validate_card_fields
from card_tracker.infrastructure.database.models import CreditCard, Transaction, User

CARD_NOT_FOUND = "Card not found"


def parse_id(raw: Any, message: str) -> uuid.UUID:
    """Path ids that are not UUIDs cannot exist, so they are reported as not found"""
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except ValueError as e:
        raise NotFound(message) from e


class UserRepository:
    """Repository for users"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.scalars(select(User).where(User.email == email)).first()

    def create(self, email: str, name: str, password_hash: str | None = None) -> User:
        """Insert a new user; raises AlreadyExists when the email is taken"""
        if self.get_by_email(email) is not None:
            raise AlreadyExists("User with this email already exists")

        user = User(email=email, name=name, password_hash=password_hash)
        self.db.add(user)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user

    def get_or_create(self, email: str, name: str) -> Tuple[User, bool]:
        """Return (user, created); an existing user is returned as stored"""
        existing = self.get_by_email(email)
        if existing is not None:
            return existing, False
        return self.create(email=email, name=name), True


class CardRepository:
    """Repository for credit cards scoped to an owning user"""

    def __init__(self, db: Session):
        self.db = db

    def _get_owned(self, owner_id: uuid.UUID, card_id: Any, for_update: bool = False) -> CreditCard:
        card_uuid = parse_id(card_id, CARD_NOT_FOUND)
        stmt = select(CreditCard).where(CreditCard.id == card_uuid, CreditCard.user_id == owner_id)
        if for_update:
            stmt = stmt.with_for_update()
        card = self.db.scalars(stmt).first()
        if card is None:
            raise NotFound(CARD_NOT_FOUND)
        return card

    def create(self, owner_id: uuid.UUID, fields: Mapping[str, Any]) -> CreditCard:
        """Validate and persist a new card owned by owner_id"""
        validated = validate_card_fields(fields)
        card = CreditCard(user_id=owner_id, **validated.provided())
        self.db.add(card)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(card)
        return card

    def list(self, owner_id: uuid.UUID) -> List[CreditCard]:
        """All cards of a user, newest first"""
        return list(
            self.db.scalars(
                select(CreditCard)
                .where(CreditCard.user_id == owner_id)
                .order_by(CreditCard.created_at.desc())
            )
        )

    def get(self, owner_id: uuid.UUID, card_id: Any) -> CreditCard:
        return self._get_owned(owner_id, card_id)

    def get_with_transactions(self, owner_id: uuid.UUID, card_id: Any) -> Tuple[CreditCard, List[Transaction]]:
        """Card plus its transactions, newest first by transaction date"""
        card = self._get_owned(owner_id, card_id)
        transactions = list(
            self.db.scalars(
                select(Transaction)
                .where(Transaction.card_id == card.id)
                .order_by(Transaction.date.desc(), Transaction.created_at.desc())
            )
        )
        return card, transactions

    def update(self, owner_id: uuid.UUID, card_id: Any, partial_fields: Mapping[str, Any]) -> CreditCard:
        """Apply only the provided fields, validated with the create rules"""
        card = self._get_owned(owner_id, card_id, for_update=True)
        validated = validate_card_fields(partial_fields, partial=True)

        for attr, value in validated.provided().items():
            setattr(card, attr, value)

        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(card)
        return card

    def delete(self, owner_id: uuid.UUID, card_id: Any) -> None:
        """Remove a card and all of its transactions in one commit"""
        card = self._get_owned(owner_id, card_id, for_update=True)
        try:
            self.db.execute(delete(Transaction).where(Transaction.card_id == card.id))
            self.db.delete(card)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def summarize(self, owner_id: uuid.UUID, today: date | None = None) -> PortfolioSummary:
        return summarize_cards(self.list(owner_id), today=today)
