"""Credit card endpoints - every route is scoped to the authenticated user"""

from fastapi import APIRouter, Depends, status
from typing import List
from sqlalchemy.orm import Session

from card_tracker.api.dependencies import get_current_user
from card_tracker.api.routing import SanitizedRoute
from card_tracker.api.v1.schemas import (
    CardCreateRequest,
    CardDetailResponse,
    CardResponse,
    CardSummaryResponse,
    CardUpdateRequest,
    DeleteCardResponse,
    TransactionResponse,
)
from card_tracker.domain.models import AuthenticatedUser
from card_tracker.infrastructure.database.repositories import CardRepository
from card_tracker.infrastructure.database.session import get_db

router = APIRouter(prefix="/cards", route_class=SanitizedRoute)


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
def create_card(
    body: CardCreateRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    card = CardRepository(db).create(current_user.id, body.model_dump(exclude_unset=True))
    return CardResponse.model_validate(card)


@router.get("", response_model=List[CardResponse])
def list_cards(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """All cards of the caller, newest first"""
    return [CardResponse.model_validate(card) for card in CardRepository(db).list(current_user.id)]


@router.get("/summary", response_model=CardSummaryResponse)
def get_summary(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Aggregated dashboard view.

    Returns:
        Total balance and minimum payment across cards, and every card's
        due date ordered earliest first
    """
    return CardSummaryResponse.model_validate(CardRepository(db).summarize(current_user.id))


@router.get("/{card_id}", response_model=CardDetailResponse)
def get_card(
    card_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Card with its transactions; 404 for cards that are missing or not the caller's"""
    card, transactions = CardRepository(db).get_with_transactions(current_user.id, card_id)
    return CardDetailResponse(
        **CardResponse.model_validate(card).model_dump(),
        transactions=[TransactionResponse.model_validate(txn) for txn in transactions],
    )


@router.put("/{card_id}", response_model=CardResponse)
def update_card(
    card_id: str,
    body: CardUpdateRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    card = CardRepository(db).update(current_user.id, card_id, body.model_dump(exclude_unset=True))
    return CardResponse.model_validate(card)


@router.delete("/{card_id}", response_model=DeleteCardResponse)
def delete_card(
    card_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete the card together with all of its transactions"""
    CardRepository(db).delete(current_user.id, card_id)
    return DeleteCardResponse()
