"""FieldAgent model - the operator profile bound to an authenticated principal."""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field


class AgentRole(str, Enum):
    """Roles stored on the field agent profile."""
    AGENT = "agent"
    ADMIN = "admin"
    SUPERVISOR = "supervisor"


class AgentStatus(str, Enum):
    """Profile status values."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class FieldAgent(BaseModel):
    """Field agent profile (field_agents table)."""
    id: str = Field(..., description="Agent ID (text)")
    user_id: str = Field(..., description="Auth principal ID")
    full_name: str = Field(..., description="Display name")
    email: Optional[str] = Field(None, description="Contact email")
    phone_number: Optional[str] = Field(None, description="Phone number")
    role: AgentRole = Field(default=AgentRole.AGENT, description="Role: agent, admin, supervisor")
    status: AgentStatus = Field(default=AgentStatus.ACTIVE, description="Status: active, inactive")
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == AgentRole.ADMIN


class Principal(BaseModel):
    """Authenticated identity as reported by the auth provider."""
    id: str = Field(..., description="Auth user ID")
    email: Optional[str] = None
    phone: Optional[str] = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_auth_user(cls, user: Any) -> "Principal":
        """Build from a supabase auth ``User`` object."""
        return cls(
            id=str(user.id),
            email=getattr(user, "email", None),
            phone=getattr(user, "phone", None) or None,
            user_metadata=getattr(user, "user_metadata", None) or {},
        )

    @property
    def display_name(self) -> str:
        """Profile name, else contact address, else a generic placeholder."""
        full_name = self.user_metadata.get("full_name")
        if full_name:
            return full_name
        if self.email:
            return self.email
        return "Field Agent"
