"""
Authentication routes for sign-up, login and token management.
"""
from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from ..database import get_db
from ..datastore import AuthClient, AuthSession, DataStore
from ..datastore.errors import USER_ALREADY_EXISTS
from ..models.user import User
from ..schemas.auth import LoginRequest, RefreshRequest, SignupRequest, SignupResponse, TokenResponse, UserResponse
from ..auth import get_required_user
from ..config import get_settings
from ..limiter import limiter
from ..logging_config import api_logger
from ..responses import conflict, store_error

settings = get_settings()

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _tokens(session: AuthSession) -> TokenResponse:
    return TokenResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_at=session.expires_at,
    )


def _sign_in(db: Session, email: str, password: str) -> TokenResponse:
    result = AuthClient(DataStore(db)).sign_in_with_password(email, password)
    if result.error:
        api_logger.info("login rejected", code=result.error.code)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _tokens(result.data["session"])


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.signup_rate_limit)
def signup(request: Request, payload: SignupRequest, db: Session = Depends(get_db)):
    """Create an account together with its profile and sign it in."""
    nickname = payload.nickname.strip()
    if not nickname:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Nickname is required")

    result = AuthClient(DataStore(db)).sign_up(
        payload.email,
        payload.password,
        {"nickname": nickname, "bio": (payload.bio or "").strip()},
    )
    if result.error:
        if result.error.code == USER_ALREADY_EXISTS:
            conflict("Email already registered")
        store_error(result.error, "create the account", "Account")

    user = db.query(User).filter(User.id == result.data["user"]["id"]).first()
    return SignupResponse(user=UserResponse.model_validate(user), tokens=_tokens(result.data["session"]))


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.login_rate_limit)
def login(request: Request, form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """Login with OAuth2 form (username/password)."""
    return _sign_in(db, form_data.username, form_data.password)


@router.post("/login/json", response_model=TokenResponse)
@limiter.limit(settings.login_rate_limit)
def login_json(request: Request, credentials: LoginRequest, db: Session = Depends(get_db)):
    """Login with JSON body (email/password)."""
    return _sign_in(db, credentials.email, credentials.password)


@router.post("/refresh", response_model=TokenResponse)
@limiter.limit(settings.refresh_rate_limit)
def refresh_tokens(request: Request, refresh_request: RefreshRequest, db: Session = Depends(get_db)):
    """Get new access and refresh tokens using a valid refresh token."""
    result = AuthClient(DataStore(db)).refresh_session(refresh_request.refresh_token)
    if result.error:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )
    return _tokens(result.data)


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_required_user)):
    """Get current authenticated user."""
    return current_user


@router.post("/logout")
def logout(current_user: User = Depends(get_required_user)):
    """
    Logout the current user.

    Tokens are stateless, so the client drops them. Nothing is revoked here.
    """
    return {"message": "Successfully logged out"}
