"""Field agent resolution - map an auth principal to its field_agents profile."""

from datetime import datetime, timezone

from ulid import ULID

from field_catalog.models.field_agent import AgentRole, AgentStatus, FieldAgent, Principal
from field_catalog.services.supabase_client import count_rows, insert_row, select_one
from field_catalog.utils.errors import NotFound
from field_catalog.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)

AGENTS_TABLE = "field_agents"


def generate_agent_id() -> str:
    """Generate a text-based agent ID (ULID format)."""
    return str(ULID())


async def get_agent_by_user_id(user_id: str) -> FieldAgent:
    """Fetch the profile linked to a principal; NotFound when absent."""
    row = await select_one(AGENTS_TABLE, user_id, key="user_id")
    return FieldAgent(**row)


async def resolve_field_agent(principal: Principal) -> FieldAgent:
    """
    Resolve an authenticated principal to its FieldAgent profile.

    Auto-creates an active ``agent`` profile on first sign-in. Only the
    no-rows condition triggers creation; any other lookup or insert failure
    propagates to the caller.
    """
    try:
        agent = await get_agent_by_user_id(principal.id)
        logger.info(
            "Resolved principal to existing field agent",
            user_id=mask_user_id(principal.id),
            agent_id=agent.id,
            role=agent.role.value,
        )
        return agent
    except NotFound:
        pass

    new_agent = {
        "id": generate_agent_id(),
        "user_id": principal.id,
        "full_name": principal.display_name,
        "email": principal.email,
        "phone_number": principal.phone,
        "role": AgentRole.AGENT.value,
        "status": AgentStatus.ACTIVE.value,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }

    row = await insert_row(AGENTS_TABLE, new_agent)
    agent = FieldAgent(**row)
    logger.info(
        "Created field agent profile on first sign-in",
        user_id=mask_user_id(principal.id),
        agent_id=agent.id,
    )
    return agent


async def count_active_agents() -> int:
    return await count_rows(AGENTS_TABLE, filters={"status": AgentStatus.ACTIVE.value})
