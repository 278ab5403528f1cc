"""
Account and session management for the data store.

Mirrors the auth surface of a hosted backend: sign-up creates the account
and its profile together, sign-in hands back a token session, and
listeners are told about every session change.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..auth import create_tokens, get_password_hash, refresh_access_token, verify_password, verify_token
from ..config import get_settings
from ..logging_config import store_logger
from ..models import Profile, User
from .errors import (
    INTERNAL_ERROR,
    INVALID_CREDENTIALS,
    NOT_AUTHENTICATED,
    SESSION_EXPIRED,
    USER_ALREADY_EXISTS,
    Result,
    StoreError,
)
from .store import DataStore

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"

AuthListener = Callable[[str, Optional["AuthSession"]], None]


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    refresh_token: str
    user: Dict[str, Any]
    expires_at: datetime
    token_type: str = "bearer"

    @property
    def user_id(self) -> int:
        return self.user["id"]


@dataclass
class Subscription:
    """Handle returned by on_auth_state_change."""
    _client: "AuthClient"
    _callback: AuthListener
    active: bool = field(default=True)

    def unsubscribe(self) -> None:
        if self.active:
            self._client._listeners.remove(self._callback)
            self.active = False


def _user_dict(user: User) -> Dict[str, Any]:
    return {"id": user.id, "email": user.email, "created_at": user.created_at}


class AuthClient:
    """Auth sub-interface of the data store."""

    def __init__(self, store: DataStore):
        self.store = store
        self._session: Optional[AuthSession] = None
        self._listeners: List[AuthListener] = []

    @property
    def db(self):
        return self.store.session

    def _issue_session(self, user_id: int, email: str, tokens=None) -> AuthSession:
        access_token, refresh_token = tokens or create_tokens(user_id)
        minutes = get_settings().access_token_expire_minutes
        return AuthSession(
            access_token=access_token,
            refresh_token=refresh_token,
            user={"id": user_id, "email": email},
            expires_at=datetime.now(timezone.utc) + timedelta(minutes=minutes),
        )

    def _emit(self, event: str, session: Optional[AuthSession]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception as e:
                store_logger.error("auth listener failed", error=e, auth_event=event)

    def _set_session(self, event: str, session: Optional[AuthSession]) -> None:
        self._session = session
        self._emit(event, session)

    # ------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------

    def sign_up(self, email: str, password: str, profile_seed: Mapping[str, Any]) -> Result:
        """Create an account plus its profile and sign it in."""
        email = email.strip().lower()
        if self.db.query(User).filter(User.email == email).first():
            return Result.failure(USER_ALREADY_EXISTS, "User already registered")

        user = User(email=email, hashed_password=get_password_hash(password))
        user.profile = Profile(
            email=email,
            nickname=profile_seed.get("nickname") or email.split("@")[0],
            bio=profile_seed.get("bio") or None,
            email_public=bool(profile_seed.get("email_public", False)),
        )
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError:
            self.db.rollback()
            return Result.failure(USER_ALREADY_EXISTS, "User already registered")
        except SQLAlchemyError as e:
            self.db.rollback()
            store_logger.error("sign up failed", error=e)
            return Result.failure(INTERNAL_ERROR, "Sign up failed")

        store_logger.info("account created", user_id=user.id)
        session = self._issue_session(user.id, user.email)
        self._set_session(SIGNED_IN, session)
        return Result(data={"user": _user_dict(user), "session": session})

    def sign_in_with_password(self, email: str, password: str) -> Result:
        user = self.db.query(User).filter(User.email == email.strip().lower()).first()
        if not user or not user.is_active or not verify_password(password, user.hashed_password):
            return Result.failure(INVALID_CREDENTIALS, "Invalid login credentials")

        session = self._issue_session(user.id, user.email)
        self._set_session(SIGNED_IN, session)
        return Result(data={"user": _user_dict(user), "session": session})

    def sign_out(self) -> Result:
        if self._session is None:
            return Result(data=None)
        self._set_session(SIGNED_OUT, None)
        return Result(data=None)

    def get_session(self) -> Result:
        session = self._session
        if session is not None and session.expires_at <= datetime.now(timezone.utc):
            refreshed = self.refresh_session()
            if refreshed.error:
                return Result(data=None)
            session = refreshed.data
        return Result(data=session)

    def refresh_session(self, refresh_token: Optional[str] = None) -> Result:
        token = refresh_token or (self._session.refresh_token if self._session else None)
        if not token:
            return Result.failure(NOT_AUTHENTICATED, "No session to refresh")

        tokens = refresh_access_token(token, self.db)
        if not tokens:
            if self._session is not None:
                self._set_session(SIGNED_OUT, None)
            return Result(error=StoreError(SESSION_EXPIRED, "Invalid or expired refresh token"))

        payload = verify_token(tokens[0], "access")
        user = self.db.query(User).filter(User.id == int(payload["sub"])).first()
        session = self._issue_session(user.id, user.email, tokens=tokens)
        self._set_session(TOKEN_REFRESHED, session)
        return Result(data=session)

    def on_auth_state_change(self, callback: AuthListener) -> Subscription:
        self._listeners.append(callback)
        return Subscription(self, callback)
