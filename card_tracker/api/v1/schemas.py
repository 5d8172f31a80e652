"""Pydantic schemas for API request/response validation

Request fields are deliberately lax (mostly optional); range and presence
rules live in card_tracker.domain.validation so they apply the same way to
every caller. JSON uses camelCase names.
"""

import datetime as dt
import uuid
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RegisterRequest(CamelModel):
    """Request body for POST /auth/register"""

    email: Optional[str] = None
    name: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(CamelModel):
    """Request body for POST /auth/login"""

    email: Optional[str] = None
    password: Optional[str] = None


class GetOrCreateUserRequest(CamelModel):
    """Request body for POST /users"""

    email: Optional[str] = None
    name: Optional[str] = None


class UserResponse(CamelModel):
    id: uuid.UUID
    email: str
    name: str
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None


class AuthResponse(CamelModel):
    """Response for register and login"""

    success: bool = True
    token: str
    user: UserResponse


class MeResponse(CamelModel):
    success: bool = True
    user: UserResponse


class CardCreateRequest(CamelModel):
    """Request body for POST /cards"""

    name: Optional[str] = None
    balance: Optional[Decimal] = None
    interest_rate: Optional[Decimal] = None
    due_date: Optional[dt.date] = None
    minimum_payment: Optional[Decimal] = None


class CardUpdateRequest(CardCreateRequest):
    """Request body for PUT /cards/{id}; only fields present are changed"""


class TransactionResponse(CamelModel):
    id: uuid.UUID
    amount: float
    type: str
    date: dt.date
    description: str
    card_id: uuid.UUID
    created_at: dt.datetime


class CardRef(CamelModel):
    id: uuid.UUID
    name: str


class TransactionWithCardResponse(TransactionResponse):
    card: CardRef


class CardResponse(CamelModel):
    id: uuid.UUID
    name: str
    balance: float
    interest_rate: float
    due_date: dt.date
    minimum_payment: float
    user_id: uuid.UUID
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None


class CardDetailResponse(CardResponse):
    """Card with its transactions, newest first"""

    transactions: List[TransactionResponse]


class DeleteCardResponse(CamelModel):
    success: bool = True
    message: str = "Card and associated transactions deleted successfully"


class UpcomingDueSchema(CamelModel):
    card_id: uuid.UUID
    name: str
    due_date: dt.date
    days_until_due: int
    balance: float
    minimum_payment: float


class CardSummaryResponse(CamelModel):
    """Response for GET /cards/summary"""

    card_count: int
    total_balance: float
    total_minimum_payment: float
    upcoming: List[UpcomingDueSchema]


class TransactionCreateRequest(CamelModel):
    """Request body for POST /transactions"""

    amount: Optional[Decimal] = None
    type: Optional[str] = None
    date: Optional[dt.date] = None
    description: Optional[str] = None
    card_id: Optional[str] = None


class TransactionCreateResponse(CamelModel):
    transaction: TransactionResponse
    new_balance: float


class TransactionDeleteResponse(CamelModel):
    success: bool = True
    message: str = "Transaction deleted and balance updated successfully"
    new_balance: float
