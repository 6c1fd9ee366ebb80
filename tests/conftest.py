"""Shared pytest fixtures and configuration."""

import os
import pytest
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("LOG_FORMAT", "text")

from field_catalog.models.field_agent import FieldAgent, Principal
from field_catalog.services import supabase_client
from field_catalog.services.session import SessionContext
from tests.utils.factories import create_agent_data
from tests.utils.fake_supabase import FakeSupabase


@pytest.fixture
def fake_supabase(monkeypatch):
    """In-memory backing store installed as the client singleton."""
    fake = FakeSupabase()
    monkeypatch.setattr(supabase_client, "_client", fake)
    return fake


def _session_for(fake: FakeSupabase, role: str) -> SessionContext:
    row = create_agent_data(role=role)
    fake.tables.setdefault("field_agents", []).append(row)
    principal = Principal(id=row["user_id"], email=row["email"])
    return SessionContext(principal=principal, agent=FieldAgent(**row))


@pytest.fixture
def agent_session(fake_supabase):
    """Session bound to an ordinary field agent stored in the fake backend."""
    return _session_for(fake_supabase, "agent")


@pytest.fixture
def other_agent_session(fake_supabase):
    return _session_for(fake_supabase, "agent")


@pytest.fixture
def admin_session(fake_supabase):
    """Session bound to an admin profile stored in the fake backend."""
    return _session_for(fake_supabase, "admin")


@pytest.fixture
def principal():
    return Principal(
        id="5f0c3a52-6b7e-4d1a-9a43-2f8e1c0d9b11",
        email="aminata.diallo@example.com",
        phone="+224620000000",
        user_metadata={"full_name": "Aminata Diallo"},
    )


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2024-12-09 12:00:00") as frozen_time:
        yield frozen_time
