"""POST /auth/register, POST /auth/login, GET /auth/me"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from card_tracker.api.dependencies import get_credential_service, get_current_user
from card_tracker.api.routing import SanitizedRoute
from card_tracker.api.v1.schemas import AuthResponse, LoginRequest, MeResponse, RegisterRequest, UserResponse
from card_tracker.domain.exceptions import AlreadyExists, Unauthenticated, ValidationError
from card_tracker.domain.models import AuthenticatedUser
from card_tracker.domain.validation import validate_registration
from card_tracker.infrastructure.database.repositories import UserRepository
from card_tracker.infrastructure.database.session import get_db
from card_tracker.infrastructure.observability.metrics import record_auth_attempt
from card_tracker.infrastructure.security.credentials import CredentialService

router = APIRouter(prefix="/auth", route_class=SanitizedRoute)

# Same message for unknown email and wrong password
INVALID_CREDENTIALS = "Invalid email or password"


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: Session = Depends(get_db),
    credentials: CredentialService = Depends(get_credential_service),
):
    """Create a user and return a session token"""
    email, name, password = validate_registration(body.email, body.name, body.password)

    try:
        user = UserRepository(db).create(email=email, name=name, password_hash=credentials.hash_password(password))
    except AlreadyExists:
        record_auth_attempt("register", success=False)
        raise

    record_auth_attempt("register", success=True)
    return AuthResponse(token=credentials.issue_token(user.id), user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    credentials: CredentialService = Depends(get_credential_service),
):
    """Exchange email and password for a session token"""
    if not body.email or not body.password:
        raise ValidationError("Please provide email and password")

    user = UserRepository(db).get_by_email(body.email)
    password_hash = user.password_hash if user is not None else None

    verified = credentials.verify_password(body.password, password_hash)
    if user is None or not verified:
        record_auth_attempt("login", success=False)
        raise Unauthenticated(INVALID_CREDENTIALS)

    record_auth_attempt("login", success=True)
    return AuthResponse(token=credentials.issue_token(user.id), user=UserResponse.model_validate(user))


@router.get("/me", response_model=MeResponse)
def get_me(current_user: AuthenticatedUser = Depends(get_current_user)):
    """Return the authenticated caller"""
    return MeResponse(user=UserResponse.model_validate(current_user))
