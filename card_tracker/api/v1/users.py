"""POST /users - get-or-create a user by email"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from card_tracker.api.routing import SanitizedRoute
from card_tracker.api.v1.schemas import GetOrCreateUserRequest, UserResponse
from card_tracker.domain.exceptions import ValidationError
from card_tracker.domain.validation import validate_email
from card_tracker.infrastructure.database.repositories import UserRepository
from card_tracker.infrastructure.database.session import get_db

router = APIRouter(prefix="/users", route_class=SanitizedRoute)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def get_or_create_user(body: GetOrCreateUserRequest, response: Response, db: Session = Depends(get_db)):
    """
    Return the user registered under an email, creating it on first touch.

    Users created here have no password, so they cannot log in.
    """
    if not body.email or not body.name:
        raise ValidationError("Email and name are required")
    validate_email(body.email)

    user, created = UserRepository(db).get_or_create(email=body.email, name=body.name)
    if not created:
        response.status_code = status.HTTP_200_OK
    return UserResponse.model_validate(user)
