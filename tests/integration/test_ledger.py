"""Integration tests for the card repository and transaction ledger against SQLite"""

import pytest
import uuid
from datetime import date
from decimal import Decimal
from prometheus_client import REGISTRY
from sqlalchemy import func, select
from sqlalchemy.orm import Session
from card_tracker.domain.exceptions import Forbidden, InvalidPayment, InvalidState, NotFound, ValidationError
from card_tracker.infrastructure.database.ledger import TransactionLedger
from card_tracker.infrastructure.database.models import CreditCard, Transaction, User
from card_tracker.infrastructure.database.repositories import CardRepository


def make_card(db: Session, owner: User, balance: str = "0", **overrides) -> CreditCard:
    fields = {
        "name": "Visa",
        "balance": Decimal(balance),
        "interest_rate": Decimal("20"),
        "due_date": "2025-01-01",
    }
    fields.update(overrides)
    return CardRepository(db).create(owner.id, fields)


def transaction_count(db: Session) -> int:
    return db.scalar(select(func.count()).select_from(Transaction))


def test_purchase_then_oversized_payment(db: Session, owner: User):
    """Purchase 100 then pay 150: the payment is rejected and nothing changes"""
    card = make_card(db, owner)
    ledger = TransactionLedger(db)

    entry = ledger.create(owner.id, Decimal("100"), "purchase", card.id)
    assert entry.new_balance == Decimal("100")

    with pytest.raises(InvalidPayment):
        ledger.create(owner.id, Decimal("150"), "payment", card.id)

    db.refresh(card)
    assert card.balance == Decimal("100")
    assert transaction_count(db) == 1


def test_payment_reduces_balance(db: Session, owner: User):
    card = make_card(db, owner, balance="500")

    entry = TransactionLedger(db).create(owner.id, Decimal("120.25"), "payment", card.id, description="Autopay")

    assert entry.new_balance == Decimal("379.75")
    assert entry.transaction.description == "Autopay"
    assert entry.transaction.date == date.today()
    db.refresh(card)
    assert card.balance == Decimal("379.75")


def test_create_on_someone_elses_card_is_not_found(db: Session, owner: User, stranger: User):
    card = make_card(db, owner)

    with pytest.raises(NotFound):
        TransactionLedger(db).create(stranger.id, Decimal("10"), "purchase", card.id)

    assert transaction_count(db) == 0


def test_create_validates_before_touching_card(db: Session, owner: User):
    card = make_card(db, owner)
    ledger = TransactionLedger(db)

    with pytest.raises(ValidationError, match="Missing required fields: type"):
        ledger.create(owner.id, Decimal("10"), None, card.id)
    with pytest.raises(ValidationError):
        ledger.create(owner.id, Decimal("0"), "purchase", card.id)
    with pytest.raises(NotFound):
        ledger.create(owner.id, Decimal("10"), "purchase", "not-a-uuid")


def test_delete_round_trip_restores_balance(db: Session, owner: User):
    card = make_card(db, owner, balance="200")
    ledger = TransactionLedger(db)

    payment = ledger.create(owner.id, Decimal("50"), "payment", card.id)
    assert payment.new_balance == Decimal("150")

    assert ledger.delete(owner.id, payment.transaction.id) == Decimal("200")

    recreated = ledger.create(owner.id, Decimal("50"), "payment", card.id)
    assert recreated.new_balance == Decimal("150")


def test_delete_purchase_already_paid_is_invalid_state(db: Session, owner: User):
    """Deleting out of order can be blocked by the non-negative guard"""
    card = make_card(db, owner)
    ledger = TransactionLedger(db)

    purchase = ledger.create(owner.id, Decimal("100"), "purchase", card.id)
    ledger.create(owner.id, Decimal("100"), "payment", card.id)

    with pytest.raises(InvalidState):
        ledger.delete(owner.id, purchase.transaction.id)

    db.refresh(card)
    assert card.balance == Decimal("0")
    assert transaction_count(db) == 2


def test_delete_by_other_user_is_forbidden(db: Session, owner: User, stranger: User):
    card = make_card(db, owner)
    entry = TransactionLedger(db).create(owner.id, Decimal("10"), "purchase", card.id)

    with pytest.raises(Forbidden):
        TransactionLedger(db).delete(stranger.id, entry.transaction.id)

    assert transaction_count(db) == 1


def test_delete_missing_transaction(db: Session, owner: User):
    with pytest.raises(NotFound):
        TransactionLedger(db).delete(owner.id, uuid.uuid4())


def rejected_deletes(txn_type: str) -> float:
    labels = {"action": "delete", "type": txn_type, "outcome": "rejected"}
    return REGISTRY.get_sample_value("card_tracker_transactions_total", labels) or 0.0


def test_rejected_deletes_are_counted(db: Session, owner: User, stranger: User):
    card = make_card(db, owner)
    entry = TransactionLedger(db).create(owner.id, Decimal("10"), "purchase", card.id)
    purchases_before = rejected_deletes("purchase")
    unknown_before = rejected_deletes("unknown")

    with pytest.raises(Forbidden):
        TransactionLedger(db).delete(stranger.id, entry.transaction.id)
    with pytest.raises(NotFound):
        TransactionLedger(db).delete(owner.id, uuid.uuid4())
    with pytest.raises(NotFound):
        TransactionLedger(db).delete(owner.id, "not-a-uuid")

    assert rejected_deletes("purchase") == purchases_before + 1
    assert rejected_deletes("unknown") == unknown_before + 2


def test_sub_cent_amount_leaves_balance_untouched(db: Session, owner: User):
    card = make_card(db, owner, balance="100")

    with pytest.raises(ValidationError):
        TransactionLedger(db).create(owner.id, Decimal("0.004"), "purchase", card.id)

    db.refresh(card)
    assert card.balance == Decimal("100")
    assert transaction_count(db) == 0


def test_card_delete_cascades(db: Session, owner: User):
    card = make_card(db, owner)
    other_card = make_card(db, owner, name="Amex")
    ledger = TransactionLedger(db)
    ledger.create(owner.id, Decimal("10"), "purchase", card.id)
    ledger.create(owner.id, Decimal("20"), "purchase", card.id)
    ledger.create(owner.id, Decimal("30"), "purchase", other_card.id)

    CardRepository(db).delete(owner.id, card.id)

    assert db.get(CreditCard, card.id) is None
    assert transaction_count(db) == 1


def test_card_access_scoped_to_owner(db: Session, owner: User, stranger: User):
    card = make_card(db, owner)
    repo = CardRepository(db)

    with pytest.raises(NotFound):
        repo.get_with_transactions(stranger.id, card.id)
    with pytest.raises(NotFound):
        repo.update(stranger.id, card.id, {"name": "Mine now"})
    with pytest.raises(NotFound):
        repo.delete(stranger.id, card.id)
    assert repo.list(stranger.id) == []


def test_card_update_applies_only_given_fields(db: Session, owner: User):
    card = make_card(db, owner, balance="75", minimum_payment=Decimal("10"))

    updated = CardRepository(db).update(owner.id, card.id, {"interest_rate": Decimal("18.5")})

    assert updated.interest_rate == Decimal("18.5")
    assert updated.balance == Decimal("75")
    assert updated.minimum_payment == Decimal("10")
    assert updated.name == "Visa"


def test_card_transactions_newest_first(db: Session, owner: User):
    card = make_card(db, owner)
    ledger = TransactionLedger(db)
    ledger.create(owner.id, Decimal("1"), "purchase", card.id, txn_date=date(2025, 1, 1))
    ledger.create(owner.id, Decimal("2"), "purchase", card.id, txn_date=date(2025, 3, 1))
    ledger.create(owner.id, Decimal("3"), "purchase", card.id, txn_date=date(2025, 2, 1))

    _, transactions = CardRepository(db).get_with_transactions(owner.id, card.id)

    assert [txn.date for txn in transactions] == [date(2025, 3, 1), date(2025, 2, 1), date(2025, 1, 1)]


def test_list_for_user_spans_cards(db: Session, owner: User, stranger: User):
    mine = make_card(db, owner)
    theirs = make_card(db, stranger, name="Theirs")
    ledger = TransactionLedger(db)
    ledger.create(owner.id, Decimal("5"), "purchase", mine.id)
    ledger.create(stranger.id, Decimal("7"), "purchase", theirs.id)

    transactions = ledger.list_for_user(owner.id)

    assert len(transactions) == 1
    assert transactions[0].card.name == "Visa"
