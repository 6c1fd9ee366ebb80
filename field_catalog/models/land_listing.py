"""Land listing models."""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator

from field_catalog.models.status import SubmissionStatus
from field_catalog.services.pricing import price_per_unit


class LandSizeUnit(str, Enum):
    """Units a land size can be captured in."""
    HECTARES = "HECTARES"
    ACRES = "ACRES"
    SQUARE_METERS = "SQUARE_METERS"
    SQUARE_FEET = "SQUARE_FEET"


class AgentSummary(BaseModel):
    """Owning agent's display identity joined from field_agents."""
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None


class OwnerInfo(BaseModel):
    """Land owner or seller contact captured in the field."""
    business_name: Optional[str] = Field(None, description="Owner or business name")
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class LandListing(BaseModel):
    """Land listing collected by a field agent (land_listings table)."""
    id: Optional[str] = Field(None, description="Listing ID (text)")
    title: str = Field(..., description="Listing title")
    description: Optional[str] = None

    # Location
    country_code: str = Field(default="GN", description="ISO country code")
    region: Optional[str] = None
    city: Optional[str] = None
    neighborhood: Optional[str] = None
    address: Optional[str] = None
    coordinates_lat: Optional[float] = Field(None, ge=-90, le=90)
    coordinates_lng: Optional[float] = Field(None, ge=-180, le=180)

    # Land attributes
    land_size_value: Optional[float] = Field(None, gt=0, description="Land size in land_size_unit")
    land_size_unit: LandSizeUnit = Field(default=LandSizeUnit.HECTARES)
    land_type: Optional[str] = None
    topography: Optional[str] = None
    soil_type: Optional[str] = None
    zoning: Optional[str] = None
    title_status: Optional[str] = Field(None, description="Title deed status")
    boundary_description: Optional[str] = None
    access_road: bool = False
    utilities_available: list[str] = Field(default_factory=list, description="Utilities present on site")

    # Pricing
    total_price: Optional[float] = Field(None, ge=0)
    currency_code: str = Field(default="GNF")
    price_negotiable: bool = True
    price_per_unit: Optional[float] = Field(None, description="Derived: total_price / land_size_value")

    status: SubmissionStatus = Field(default=SubmissionStatus.DRAFT)
    rejection_reason: Optional[str] = None
    photos: list[str] = Field(default_factory=list, description="Ordered image data URLs")
    agent_id: Optional[str] = Field(None, description="Owning field agent ID")
    owner: Optional[OwnerInfo] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    field_agents: Optional[AgentSummary] = Field(None, description="Joined agent identity (read-only)")

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value

    @field_validator("utilities_available")
    @classmethod
    def _unique_utilities(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(item.strip() for item in value if item and item.strip()))

    def model_post_init(self, __context: Any) -> None:
        """The derived price is never taken from input."""
        self.recompute_price_per_unit()

    def recompute_price_per_unit(self) -> Optional[float]:
        """Overwrite price_per_unit from total price and size."""
        self.price_per_unit = price_per_unit(self.total_price, self.land_size_value)
        return self.price_per_unit
