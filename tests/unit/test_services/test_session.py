"""Tests for SessionContext and AuthGateway."""

import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from field_catalog.models.field_agent import FieldAgent
from field_catalog.services.session import AuthGateway, SessionContext
from field_catalog.utils.errors import FetchFailed, NotAuthenticated, NotAuthorized
from tests.utils.factories import create_agent_data


def _auth_user(user_id: str = "user-1", email: str = "agent@example.com"):
    return SimpleNamespace(id=user_id, email=email, phone=None, user_metadata={"full_name": "Agent One"})


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sign_in_binds_agent(fake_supabase, principal):
    session = SessionContext()

    agent = await session.sign_in(principal)

    assert session.agent is agent
    assert session.principal == principal
    assert session.require_agent() is agent
    assert session.is_admin is False


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sign_in_failure_leaves_session_unbound(fake_supabase, principal):
    fake_supabase.failures[("field_agents", "select")] = RuntimeError("timeout")
    session = SessionContext(agent=FieldAgent(**create_agent_data()))

    with pytest.raises(FetchFailed):
        await session.sign_in(principal)

    assert session.agent is None
    with pytest.raises(NotAuthorized):
        session.require_agent()


@pytest.mark.unit
def test_sign_out_clears_session():
    session = SessionContext(agent=FieldAgent(**create_agent_data()))

    session.sign_out()

    assert session.agent is None
    assert session.principal is None


@pytest.mark.unit
def test_require_admin():
    with pytest.raises(NotAuthorized):
        SessionContext().require_admin()
    with pytest.raises(NotAuthorized):
        SessionContext(agent=FieldAgent(**create_agent_data(role="supervisor"))).require_admin()

    admin = FieldAgent(**create_agent_data(role="admin"))
    assert SessionContext(agent=admin).require_admin() is admin


@pytest.mark.unit
def test_current_principal():
    client = MagicMock()
    client.auth.get_session.return_value = SimpleNamespace(user=_auth_user())

    principal = AuthGateway(client).current_principal()

    assert principal.id == "user-1"
    assert principal.display_name == "Agent One"


@pytest.mark.unit
def test_current_principal_signed_out():
    client = MagicMock()
    client.auth.get_session.return_value = None

    assert AuthGateway(client).current_principal() is None


@pytest.mark.unit
def test_principal_for_invalid_token():
    client = MagicMock()
    client.auth.get_user.side_effect = RuntimeError("invalid JWT")

    with pytest.raises(NotAuthenticated):
        AuthGateway(client).principal_for_token("bad")


@pytest.mark.unit
def test_sign_in_url_uses_provider_and_redirect():
    client = MagicMock()
    client.auth.sign_in_with_oauth.return_value = SimpleNamespace(url="https://accounts.example/auth")

    url = AuthGateway(client).sign_in_url(redirect_to="https://app.example/auth/callback")

    assert url == "https://accounts.example/auth"
    credentials = client.auth.sign_in_with_oauth.call_args[0][0]
    assert credentials["provider"] == "google"
    assert credentials["options"]["redirect_to"] == "https://app.example/auth/callback"


@pytest.mark.unit
def test_gateway_sign_out_clears_session_even_on_error():
    client = MagicMock()
    client.auth.sign_out.side_effect = RuntimeError("network down")
    session = SessionContext(agent=FieldAgent(**create_agent_data()))

    with pytest.raises(RuntimeError):
        AuthGateway(client).sign_out(session)

    assert session.agent is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_watch_binds_on_sign_in_and_clears_on_sign_out(fake_supabase):
    client = MagicMock()
    session = SessionContext()

    AuthGateway(client).watch(session)
    callback = client.auth.on_auth_state_change.call_args[0][0]

    callback("SIGNED_IN", SimpleNamespace(user=_auth_user()))
    for _ in range(20):
        if session.agent is not None:
            break
        await asyncio.sleep(0.01)

    assert session.agent is not None
    assert session.agent.user_id == "user-1"
    assert len(fake_supabase.rows("field_agents")) == 1

    callback("SIGNED_OUT", None)

    assert session.agent is None
    assert session.principal is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_watch_keeps_sign_in_failure(fake_supabase):
    fake_supabase.failures[("field_agents", "select")] = RuntimeError("permission denied")
    client = MagicMock()
    session = SessionContext()

    AuthGateway(client).watch(session, asyncio.get_running_loop())
    callback = client.auth.on_auth_state_change.call_args[0][0]
    callback("SIGNED_IN", SimpleNamespace(user=_auth_user()))

    with pytest.raises(FetchFailed, match="permission denied"):
        await asyncio.wrap_future(session.pending_sign_in)

    assert isinstance(session.sign_in_error, FetchFailed)
    assert session.agent is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sign_in_success_clears_previous_error(fake_supabase, principal):
    session = SessionContext()
    session.sign_in_error = FetchFailed("earlier failure")

    await session.sign_in(principal)

    assert session.sign_in_error is None
