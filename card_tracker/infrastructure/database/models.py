"""SQLAlchemy ORM models for users, credit cards and transactions"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

MONEY = Numeric(12, 2)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Account owner; password_hash is never serialized"""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(320), nullable=False, unique=True, index=True)
    name = Column(Text, nullable=False)
    # Null for users created through get-or-create; they cannot log in
    password_hash = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    cards = relationship("CreditCard", back_populates="user")


class CreditCard(Base):
    """Tracked credit account with a denormalized balance"""

    __tablename__ = "credit_cards"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_credit_cards_balance_non_negative"),
        CheckConstraint("interest_rate >= 0 AND interest_rate <= 100", name="ck_credit_cards_interest_rate_range"),
        CheckConstraint("minimum_payment >= 0", name="ck_credit_cards_minimum_payment_non_negative"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    balance = Column(MONEY, nullable=False, default=0)
    interest_rate = Column(Numeric(5, 2), nullable=False)
    due_date = Column(Date, nullable=False)
    minimum_payment = Column(MONEY, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="cards")
    transactions = relationship("Transaction", back_populates="card")


class Transaction(Base):
    """Purchase or payment recorded against a card"""

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_positive_amount"),
        CheckConstraint("type IN ('purchase', 'payment')", name="ck_transactions_type"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    card_id = Column(Uuid, ForeignKey("credit_cards.id"), nullable=False, index=True)
    amount = Column(MONEY, nullable=False)
    type = Column(String(16), nullable=False)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    card = relationship("CreditCard", back_populates="transactions")
