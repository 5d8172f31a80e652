"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from card_tracker.domain.exceptions import TokenError, Unauthenticated, UserNotFound
from card_tracker.domain.models import AuthenticatedUser
from card_tracker.infrastructure.database.repositories import UserRepository
from card_tracker.infrastructure.database.session import get_db
from card_tracker.infrastructure.security.credentials import CredentialService

bearer_scheme = HTTPBearer(auto_error=False, description="Session token from /auth/login or /auth/register")


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_credential_service(request: Request) -> CredentialService:
    """Provide the credential service built at startup"""
    return request.app.state.credentials


def get_current_user(
    request: Request,
    authorization: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    credentials: CredentialService = Depends(get_credential_service),
) -> AuthenticatedUser:
    """
    Authentication gate for every per-user route.

    Raises:
        Unauthenticated: No bearer token, or the token is invalid/expired
        UserNotFound: Token is valid but the user no longer exists
    """
    if authorization is None or not authorization.credentials:
        raise Unauthenticated()

    try:
        user_id = credentials.verify_token(authorization.credentials)
    except TokenError as e:
        raise Unauthenticated(e.message) from e

    user = UserRepository(db).get_by_id(user_id)
    if user is None:
        raise UserNotFound()

    request.state.user_id = str(user.id)
    return AuthenticatedUser(
        id=user.id,
        email=user.email,
        name=user.name,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )
