"""Transaction endpoints - creating or deleting a transaction moves the card balance"""

from fastapi import APIRouter, Depends, status
from typing import List
from sqlalchemy.orm import Session

from card_tracker.api.dependencies import get_current_user
from card_tracker.api.routing import SanitizedRoute
from card_tracker.api.v1.schemas import (
    TransactionCreateRequest,
    TransactionCreateResponse,
    TransactionDeleteResponse,
    TransactionResponse,
    TransactionWithCardResponse,
)
from card_tracker.domain.models import AuthenticatedUser
from card_tracker.infrastructure.database.ledger import TransactionLedger
from card_tracker.infrastructure.database.session import get_db

router = APIRouter(prefix="/transactions", route_class=SanitizedRoute)


@router.post("", response_model=TransactionCreateResponse, status_code=status.HTTP_201_CREATED)
def create_transaction(
    body: TransactionCreateRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Record a purchase or payment.

    Flow:
    1. Validate amount and type
    2. Lock the caller's card row
    3. Compute the new balance (payments may not take it below zero)
    4. Commit the transaction row and the balance together
    """
    entry = TransactionLedger(db).create(
        owner_id=current_user.id,
        amount=body.amount,
        txn_type=body.type,
        card_id=body.card_id,
        txn_date=body.date,
        description=body.description,
    )
    return TransactionCreateResponse(
        transaction=TransactionResponse.model_validate(entry.transaction),
        new_balance=entry.new_balance,
    )


@router.get("", response_model=List[TransactionWithCardResponse])
def list_transactions(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Transactions across all of the caller's cards, newest first"""
    return [TransactionWithCardResponse.model_validate(txn) for txn in TransactionLedger(db).list_for_user(current_user.id)]


@router.get("/card/{card_id}", response_model=List[TransactionResponse])
def list_card_transactions(
    card_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    transactions = TransactionLedger(db).list_for_card(current_user.id, card_id)
    return [TransactionResponse.model_validate(txn) for txn in transactions]


@router.get("/{transaction_id}", response_model=TransactionWithCardResponse)
def get_transaction(
    transaction_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return TransactionWithCardResponse.model_validate(TransactionLedger(db).get(current_user.id, transaction_id))


@router.delete("/{transaction_id}", response_model=TransactionDeleteResponse)
def delete_transaction(
    transaction_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Remove a transaction and reverse its effect on the card balance"""
    new_balance = TransactionLedger(db).delete(current_user.id, transaction_id)
    return TransactionDeleteResponse(new_balance=new_balance)
