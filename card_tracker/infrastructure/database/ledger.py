"""Transaction ledger - records transactions and keeps card balances in step"""

import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from card_tracker.domain.exceptions import DomainException, Forbidden, NotFound, ValidationError
from card_tracker.domain.models import TransactionType
from card_tracker.domain.reconciliation import apply_transaction, reverse_transaction
from card_tracker.domain.validation import validate_transaction
from card_tracker.infrastructure.database.models import CreditCard, Transaction
from card_tracker.infrastructure.database.repositories import CARD_NOT_FOUND, parse_id
from card_tracker.infrastructure.observability.logging import log_reconciliation
from card_tracker.infrastructure.observability.metrics import record_transaction

TRANSACTION_NOT_FOUND = "Transaction not found"


@dataclass
class LedgerEntry:
    """Outcome of a create: the stored row and the card's new balance"""

    transaction: Transaction
    new_balance: Decimal


class TransactionLedger:
    """
    Creates and deletes transactions, recomputing the owning card's balance.

    The card row is read with SELECT ... FOR UPDATE, so two concurrent
    writers against the same card serialize on the row lock instead of both
    reading the old balance. The transaction row and the new balance are
    written in the same commit; when the balance guard rejects the change,
    nothing is written.
    """

    def __init__(self, db: Session):
        self.db = db

    def _lock_card(self, owner_id: uuid.UUID, card_id: Any) -> CreditCard:
        card_uuid = parse_id(card_id, CARD_NOT_FOUND)
        card = self.db.scalars(
            select(CreditCard)
            .where(CreditCard.id == card_uuid, CreditCard.user_id == owner_id)
            .with_for_update()
        ).first()
        if card is None:
            raise NotFound("Card not found or you do not have permission")
        return card

    def create(
        self,
        owner_id: uuid.UUID,
        amount: Any,
        txn_type: Any,
        card_id: Any,
        txn_date: date | None = None,
        description: str | None = None,
    ) -> LedgerEntry:
        """
        Record a purchase or payment and move the card balance.

        Raises:
            ValidationError: Non-positive amount or unknown type
            NotFound: Card missing or owned by someone else
            InvalidPayment: Payment larger than the current balance
        """
        missing = [label for label, value in (("amount", amount), ("type", txn_type), ("cardId", card_id)) if value in (None, "")]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        parsed_amount, parsed_type = validate_transaction(amount, txn_type)

        try:
            card = self._lock_card(owner_id, card_id)
            previous_balance = Decimal(card.balance)
            new_balance = apply_transaction(previous_balance, parsed_amount, parsed_type)

            transaction = Transaction(
                card_id=card.id,
                amount=parsed_amount,
                type=parsed_type.value,
                date=txn_date or date.today(),
                description=description or "",
            )
            self.db.add(transaction)
            card.balance = new_balance
            self.db.commit()
        except DomainException as e:
            self.db.rollback()
            record_transaction("create", parsed_type.value, outcome="rejected")
            log_reconciliation("create", owner_id, card_id, parsed_type.value, parsed_amount, None, rejected=e.message)
            raise
        except SQLAlchemyError:
            self.db.rollback()
            raise

        self.db.refresh(transaction)
        record_transaction("create", parsed_type.value, outcome="applied")
        log_reconciliation("create", owner_id, card.id, parsed_type.value, parsed_amount, new_balance)
        return LedgerEntry(transaction=transaction, new_balance=new_balance)

    def delete(self, requester_id: uuid.UUID, transaction_id: Any) -> Decimal:
        """
        Remove a transaction and undo its effect on the card balance.

        Returns the card's new balance.

        Raises:
            NotFound: Transaction does not exist
            Forbidden: Transaction belongs to another user's card
            InvalidState: Undoing it would make the balance negative
        """
        type_label = "unknown"
        try:
            txn_uuid = parse_id(transaction_id, TRANSACTION_NOT_FOUND)
            transaction = self.db.get(Transaction, txn_uuid)
            if transaction is None:
                raise NotFound(TRANSACTION_NOT_FOUND)
            type_label = transaction.type

            card = self.db.scalars(
                select(CreditCard).where(CreditCard.id == transaction.card_id).with_for_update()
            ).first()
            if card is None:
                raise NotFound(TRANSACTION_NOT_FOUND)
            if card.user_id != requester_id:
                raise Forbidden("You do not have permission to delete this transaction")

            txn_type = TransactionType(transaction.type)
            amount = Decimal(transaction.amount)
            new_balance = reverse_transaction(Decimal(card.balance), amount, txn_type)

            card.balance = new_balance
            self.db.delete(transaction)
            self.db.commit()
        except DomainException as e:
            self.db.rollback()
            record_transaction("delete", type_label, outcome="rejected")
            log_reconciliation("delete", requester_id, None, type_label, None, None, rejected=e.message)
            raise
        except SQLAlchemyError:
            self.db.rollback()
            raise

        record_transaction("delete", txn_type.value, outcome="applied")
        log_reconciliation("delete", requester_id, card.id, txn_type.value, amount, new_balance)
        return new_balance

    def get(self, owner_id: uuid.UUID, transaction_id: Any) -> Transaction:
        txn_uuid = parse_id(transaction_id, TRANSACTION_NOT_FOUND)
        transaction = self.db.scalars(
            select(Transaction)
            .join(CreditCard, Transaction.card_id == CreditCard.id)
            .where(Transaction.id == txn_uuid, CreditCard.user_id == owner_id)
            .options(joinedload(Transaction.card))
        ).first()
        if transaction is None:
            raise NotFound(TRANSACTION_NOT_FOUND)
        return transaction

    def list_for_user(self, owner_id: uuid.UUID) -> List[Transaction]:
        """Transactions across all of the user's cards, newest first, with card loaded"""
        return list(
            self.db.scalars(
                select(Transaction)
                .join(CreditCard, Transaction.card_id == CreditCard.id)
                .where(CreditCard.user_id == owner_id)
                .options(joinedload(Transaction.card))
                .order_by(Transaction.date.desc(), Transaction.created_at.desc())
            )
        )

    def list_for_card(self, owner_id: uuid.UUID, card_id: Any) -> List[Transaction]:
        card_uuid = parse_id(card_id, CARD_NOT_FOUND)
        card = self.db.scalars(
            select(CreditCard).where(CreditCard.id == card_uuid, CreditCard.user_id == owner_id)
        ).first()
        if card is None:
            raise NotFound("Card not found or you do not have permission")

        return list(
            self.db.scalars(
                select(Transaction)
                .where(Transaction.card_id == card.id)
                .order_by(Transaction.date.desc(), Transaction.created_at.desc())
            )
        )
