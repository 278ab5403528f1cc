"""
Explicit auth state for client code.

``AuthState`` is an immutable snapshot handed to whatever needs to know who
is signed in. ``AuthController`` is the only thing that changes it.
"""
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional

from starlette.concurrency import run_in_threadpool

from ..datastore import AsyncDataStore, AuthClient, AuthSession
from ..datastore.auth_client import SIGNED_OUT
from ..logging_config import client_logger
from .safe_storage import SafeStorage

REMEMBER_ME_KEY = "myblog-remember-me"
SESSION_ACTIVE_KEY = "myblog-session-active"

StateListener = Callable[["AuthState"], None]


@dataclass(frozen=True)
class AuthState:
    user: Optional[Dict[str, Any]] = None
    session: Optional[AuthSession] = None
    profile: Optional[Dict[str, Any]] = None
    loading: bool = True

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    @property
    def user_id(self) -> Optional[int]:
        return self.user["id"] if self.user else None


class AuthError(Exception):
    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code
        super().__init__(message)


class AuthController:
    """Owns the auth state and the sign-in/out flows around it."""

    def __init__(
        self,
        auth: AuthClient,
        store: AsyncDataStore,
        local_storage: SafeStorage,
        session_storage: SafeStorage,
    ):
        self.auth = auth
        self.store = store
        self.local_storage = local_storage
        self.session_storage = session_storage
        self._state = AuthState()
        self._listeners: List[StateListener] = []
        self._subscription = auth.on_auth_state_change(self._on_auth_event)

    @property
    def state(self) -> AuthState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state: AuthState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                client_logger.error("auth state listener failed", error=e)

    def _on_auth_event(self, event: str, session: Optional[AuthSession]) -> None:
        if event == SIGNED_OUT or session is None:
            self._publish(replace(self._state, user=None, session=None, profile=None))
            return
        self._publish(replace(self._state, user=session.user, session=session))

    async def _fetch_profile(self, user_id: int) -> Optional[Dict[str, Any]]:
        result = await self.store.select_single("profiles", {"id": user_id}, required=False)
        if result.error:
            client_logger.warning("profile load failed", user_id=user_id, code=result.error.code)
            return None
        return result.data

    async def initialize(self) -> AuthState:
        """Restore the stored session, honouring an earlier "don't remember me"."""
        result = await run_in_threadpool(self.auth.get_session)
        session = result.data

        remember_me = self.local_storage.get_item(REMEMBER_ME_KEY)
        session_active = self.session_storage.get_item(SESSION_ACTIVE_KEY)
        if session is not None and remember_me == "false" and not session_active:
            client_logger.info("discarding session from a previous browser session")
            await run_in_threadpool(self.auth.sign_out)
            self._publish(AuthState(loading=False))
            return self._state

        profile = await self._fetch_profile(session.user_id) if session else None
        self._publish(AuthState(
            user=session.user if session else None,
            session=session,
            profile=profile,
            loading=False,
        ))
        return self._state

    async def sign_up(self, email: str, password: str, nickname: str, bio: Optional[str] = None) -> AuthState:
        result = await run_in_threadpool(
            self.auth.sign_up, email, password, {"nickname": nickname, "bio": bio or ""}
        )
        if result.error:
            raise AuthError(result.error.message, result.error.code)
        await self.refresh_profile()
        return self._state

    async def sign_in(self, email: str, password: str, remember_me: bool = False) -> AuthState:
        result = await run_in_threadpool(self.auth.sign_in_with_password, email, password)
        if result.error:
            raise AuthError(result.error.message, result.error.code)

        if remember_me:
            self.local_storage.set_item(REMEMBER_ME_KEY, "true")
        else:
            self.local_storage.set_item(REMEMBER_ME_KEY, "false")
            self.session_storage.set_item(SESSION_ACTIVE_KEY, "true")

        await self.refresh_profile()
        return self._state

    async def sign_out(self) -> AuthState:
        result = await run_in_threadpool(self.auth.sign_out)
        if result.error:
            raise AuthError(result.error.message, result.error.code)
        self.session_storage.remove_item(SESSION_ACTIVE_KEY)
        self._publish(AuthState(loading=False))
        return self._state

    async def refresh_profile(self) -> Optional[Dict[str, Any]]:
        user_id = self._state.user_id
        if user_id is None:
            return None
        profile = await self._fetch_profile(user_id)
        self._publish(replace(self._state, profile=profile, loading=False))
        return profile

    def close(self) -> None:
        self._subscription.unsubscribe()
        self._listeners.clear()
