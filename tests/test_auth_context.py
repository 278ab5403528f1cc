"""
Tests for the auth client and the auth state controller.
"""
import asyncio

import pytest

from myblog.datastore import AuthClient
from myblog.datastore.auth_client import SIGNED_IN, SIGNED_OUT
from myblog.datastore.errors import INVALID_CREDENTIALS, USER_ALREADY_EXISTS
from myblog.services.auth_context import (
    REMEMBER_ME_KEY,
    SESSION_ACTIVE_KEY,
    AuthController,
    AuthError,
    AuthState,
)
from myblog.services.safe_storage import SafeStorage


class TestAuthClient:
    def test_sign_up_creates_profile_and_session(self, store):
        client = AuthClient(store)
        events = []
        client.on_auth_state_change(lambda event, session: events.append(event))

        result = client.sign_up("Writer@Example.com", "secret123", {"nickname": "writer"})
        assert result.ok
        assert result.data["user"]["email"] == "writer@example.com"
        assert events == [SIGNED_IN]

        profile = store.select_single("profiles", {"id": result.data["user"]["id"]}).data
        assert profile["nickname"] == "writer"

    def test_duplicate_sign_up(self, store, test_user):
        result = AuthClient(store).sign_up("test@example.com", "secret123", {"nickname": "x"})
        assert result.error.code == USER_ALREADY_EXISTS

    def test_bad_password(self, store, test_user):
        result = AuthClient(store).sign_in_with_password("test@example.com", "nope")
        assert result.error.code == INVALID_CREDENTIALS

    def test_unsubscribe(self, store, test_user):
        client = AuthClient(store)
        events = []
        subscription = client.on_auth_state_change(lambda event, session: events.append(event))
        client.sign_in_with_password("test@example.com", "testpassword123")
        subscription.unsubscribe()
        subscription.unsubscribe()
        client.sign_out()
        assert events == [SIGNED_IN]

    def test_refresh_session(self, store, test_user):
        client = AuthClient(store)
        client.sign_in_with_password("test@example.com", "testpassword123")
        refreshed = client.refresh_session()
        assert refreshed.ok
        assert refreshed.data.user_id == test_user.id


@pytest.fixture
def storages():
    return SafeStorage(name="localStorage"), SafeStorage(name="sessionStorage")


@pytest.fixture
def controller(store, async_store, storages):
    local, session = storages
    ctl = AuthController(AuthClient(store), async_store, local, session)
    yield ctl
    ctl.close()


class TestAuthController:
    def test_initial_state_is_loading(self, controller):
        assert controller.state == AuthState()
        assert controller.state.loading
        assert not controller.state.is_authenticated

    def test_initialize_without_session(self, controller):
        state = asyncio.run(controller.initialize())
        assert not state.loading
        assert state.user is None

    def test_sign_in_loads_profile(self, controller, test_user, storages):
        local, session = storages
        seen = []
        controller.subscribe(seen.append)

        state = asyncio.run(controller.sign_in("test@example.com", "testpassword123", remember_me=True))
        assert state.is_authenticated
        assert state.user_id == test_user.id
        assert state.profile["nickname"] == "tester"
        assert local.get_item(REMEMBER_ME_KEY) == "true"
        assert session.get_item(SESSION_ACTIVE_KEY) is None
        assert seen[-1] is state

    def test_sign_in_without_remember_me(self, controller, test_user, storages):
        local, session = storages
        asyncio.run(controller.sign_in("test@example.com", "testpassword123"))
        assert local.get_item(REMEMBER_ME_KEY) == "false"
        assert session.get_item(SESSION_ACTIVE_KEY) == "true"

    def test_sign_in_failure(self, controller, test_user):
        with pytest.raises(AuthError) as exc_info:
            asyncio.run(controller.sign_in("test@example.com", "wrong"))
        assert exc_info.value.code == INVALID_CREDENTIALS
        assert not controller.state.is_authenticated

    def test_sign_up(self, controller):
        state = asyncio.run(controller.sign_up("new@example.com", "secret123", "newbie", "hi"))
        assert state.is_authenticated
        assert state.profile["nickname"] == "newbie"
        assert state.profile["bio"] == "hi"

    def test_sign_out_clears_state(self, controller, test_user, storages):
        _, session = storages
        asyncio.run(controller.sign_in("test@example.com", "testpassword123"))
        state = asyncio.run(controller.sign_out())
        assert not state.is_authenticated
        assert state.profile is None
        assert session.get_item(SESSION_ACTIVE_KEY) is None

    def test_new_browser_session_drops_unremembered_login(self, store, async_store, test_user, storages):
        local, session = storages
        auth = AuthClient(store)
        first = AuthController(auth, async_store, local, session)
        asyncio.run(first.sign_in("test@example.com", "testpassword123", remember_me=False))
        first.close()

        events = []
        auth.on_auth_state_change(lambda event, s: events.append(event))
        reopened = AuthController(auth, async_store, local, SafeStorage(name="sessionStorage"))
        state = asyncio.run(reopened.initialize())
        assert not state.is_authenticated
        assert events == [SIGNED_OUT]
        reopened.close()

    def test_remembered_login_survives(self, store, async_store, test_user, storages):
        local, session = storages
        auth = AuthClient(store)
        first = AuthController(auth, async_store, local, session)
        asyncio.run(first.sign_in("test@example.com", "testpassword123", remember_me=True))
        first.close()

        reopened = AuthController(auth, async_store, local, SafeStorage(name="sessionStorage"))
        state = asyncio.run(reopened.initialize())
        assert state.is_authenticated
        assert state.profile["id"] == test_user.id
        reopened.close()

    def test_unsubscribe_listener(self, controller, test_user):
        seen = []
        unsubscribe = controller.subscribe(seen.append)
        unsubscribe()
        asyncio.run(controller.sign_in("test@example.com", "testpassword123"))
        assert seen == []

    def test_failing_listener_does_not_break_others(self, controller, test_user):
        seen = []

        def broken(state):
            raise RuntimeError("boom")

        controller.subscribe(broken)
        controller.subscribe(seen.append)
        asyncio.run(controller.sign_in("test@example.com", "testpassword123"))
        assert seen
