"""Explicit session context and auth provider gateway."""

import asyncio
import concurrent.futures
from functools import partial
from typing import Any, Optional

from field_catalog.models.field_agent import FieldAgent, Principal
from field_catalog.services.agents import resolve_field_agent
from field_catalog.services.supabase_client import get_supabase_client
from field_catalog.utils.config import AuthConfig
from field_catalog.utils.errors import NotAuthenticated, NotAuthorized, SupabaseError
from field_catalog.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)


class SessionContext:
    """
    The acting principal and its bound field agent.

    Created per user session and passed to whichever operation needs the
    acting agent. ``sign_in`` binds the profile, ``sign_out`` clears it.
    """

    def __init__(self, principal: Optional[Principal] = None, agent: Optional[FieldAgent] = None):
        self.principal = principal
        self.agent = agent
        # Last sign-in failure, and the sign-in scheduled by AuthGateway.watch
        self.sign_in_error: Optional[Exception] = None
        self.pending_sign_in: Optional[concurrent.futures.Future] = None

    @property
    def is_admin(self) -> bool:
        return self.agent is not None and self.agent.is_admin

    async def sign_in(self, principal: Principal) -> FieldAgent:
        """Bind the principal and resolve (or provision) its agent profile."""
        self.principal = principal
        self.agent = None
        self.sign_in_error = None
        try:
            self.agent = await resolve_field_agent(principal)
        except Exception as e:
            self.sign_in_error = e
            logger.error(
                "Failed to bind field agent for session",
                user_id=mask_user_id(principal.id),
                error=str(e),
            )
            raise
        return self.agent

    def sign_out(self) -> None:
        self.principal = None
        self.agent = None

    def require_agent(self) -> FieldAgent:
        if self.agent is None:
            raise NotAuthorized("No field agent is bound to this session")
        return self.agent

    def require_admin(self) -> FieldAgent:
        agent = self.require_agent()
        if not agent.is_admin:
            raise NotAuthorized(f"Agent {agent.id} is not an admin")
        return agent


def _sign_in_done(session: SessionContext, future: concurrent.futures.Future) -> None:
    if future.cancelled():
        session.sign_in_error = concurrent.futures.CancelledError("Sign-in was cancelled")
        logger.warning("Scheduled sign-in cancelled")
    elif future.exception() is not None:
        session.sign_in_error = future.exception()


class AuthGateway:
    """Thin wrapper over ``supabase.auth`` for session retrieval and sign-in/out."""

    def __init__(self, client: Any = None):
        self.client = client or get_supabase_client()

    def current_principal(self) -> Optional[Principal]:
        """Principal of the stored session, or None when signed out."""
        try:
            session = self.client.auth.get_session()
        except Exception as e:
            raise SupabaseError(f"Failed to retrieve auth session: {e}") from e
        if session is None or session.user is None:
            return None
        return Principal.from_auth_user(session.user)

    def principal_for_token(self, access_token: str) -> Principal:
        """Validate a bearer token with the auth server."""
        try:
            response = self.client.auth.get_user(access_token)
        except Exception as e:
            raise NotAuthenticated(f"Invalid access token: {e}") from e
        if response is None or response.user is None:
            raise NotAuthenticated("Invalid access token")
        return Principal.from_auth_user(response.user)

    def sign_in_url(self, provider: Optional[str] = None, redirect_to: Optional[str] = None) -> str:
        """Start an OAuth sign-in and return the provider redirect URL."""
        try:
            response = self.client.auth.sign_in_with_oauth({
                "provider": provider or AuthConfig.AUTH_PROVIDER,
                "options": {"redirect_to": redirect_to or AuthConfig.AUTH_REDIRECT_URL},
            })
        except Exception as e:
            raise SupabaseError(f"Failed to start OAuth sign-in: {e}") from e
        return response.url

    def sign_out(self, session: SessionContext) -> None:
        try:
            self.client.auth.sign_out()
        finally:
            session.sign_out()

    def watch(self, session: SessionContext, loop: Optional[asyncio.AbstractEventLoop] = None) -> Any:
        """
        Keep ``session`` in step with auth state changes.

        Sign-in events resolve the agent profile on ``loop`` (the running
        loop by default) and leave the scheduled future on
        ``session.pending_sign_in``; a failure is also kept on
        ``session.sign_in_error``. Sign-out clears the session. Returns the
        subscription (call ``unsubscribe``).
        """
        loop = loop or asyncio.get_running_loop()

        def _on_change(event: str, auth_session: Any) -> None:
            user = getattr(auth_session, "user", None) if auth_session else None
            if user is None:
                session.sign_out()
                logger.info("Auth session cleared", auth_event=str(event))
                return

            principal = Principal.from_auth_user(user)
            if session.agent is not None and session.principal and session.principal.id == principal.id:
                return
            future = asyncio.run_coroutine_threadsafe(session.sign_in(principal), loop)
            future.add_done_callback(partial(_sign_in_done, session))
            session.pending_sign_in = future

        return self.client.auth.on_auth_state_change(_on_change)
