"""Building-material product models."""

from enum import Enum
from typing import Iterable, Optional
from pydantic import BaseModel, Field, model_validator

from field_catalog.models.land_listing import AgentSummary
from field_catalog.models.status import SubmissionStatus


class AvailabilityStatus(str, Enum):
    """Stock availability of a product."""
    IN_STOCK = "in_stock"
    OUT_OF_STOCK = "out_of_stock"
    DISCONTINUED = "discontinued"


class UnitMeasure(str, Enum):
    """Units of measure a product is sold in."""
    BAG = "BAG"
    PC = "PC"
    BOX = "BOX"
    SHEET = "SHEET"
    BUNDLE = "BUNDLE"
    DOZEN = "DOZEN"
    PACK = "PACK"
    KG = "KG"
    G = "G"
    TON = "TON"
    LB = "LB"
    L = "L"
    GAL = "GAL"
    M3 = "M3"
    M = "M"
    CM = "CM"
    FT = "FT"
    M2 = "M2"
    SQ_FT = "SQ_FT"


class Vendor(BaseModel):
    """Supplier captured alongside a product."""
    business_name: str = Field(..., min_length=1, description="Vendor business name")
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    vendor_product_code: Optional[str] = Field(None, description="Vendor's own product code")
    price_per_unit: Optional[float] = Field(None, ge=0, description="Vendor price per unit")
    currency: str = Field(default="GNF")
    quantity_available: Optional[int] = Field(None, ge=0)
    minimum_order_quantity: Optional[int] = Field(None, ge=1)


def specifications_from_pairs(pairs: Iterable[tuple[str, str]]) -> dict[str, str]:
    """
    Build a specification map from user-entered key/value rows.

    Rows with a blank key or value are skipped. A key entered twice raises
    ValueError instead of silently overwriting the earlier value.
    """
    specs: dict[str, str] = {}
    for key, value in pairs:
        key = (key or "").strip()
        value = (value or "").strip()
        if not key or not value:
            continue
        if key in specs:
            raise ValueError(f"Duplicate specification key: {key}")
        specs[key] = value
    return specs


class Product(BaseModel):
    """Product collected by a field agent (products table)."""
    id: Optional[str] = Field(None, description="Product ID (text)")
    product_name: str = Field(..., min_length=1, description="Product name")
    description: Optional[str] = None
    category: Optional[str] = Field(None, description="e.g. Cement & Concrete, Roofing Materials")
    brand: Optional[str] = None
    unit_measure: Optional[UnitMeasure] = None
    quantity_available: Optional[int] = Field(None, ge=0)

    buy_price: Optional[float] = Field(None, ge=0)
    sell_price: Optional[float] = Field(None, ge=0)
    currency: str = Field(default="GNF")
    minimum_order_quantity: Optional[int] = Field(None, ge=1)
    maximum_order_quantity: Optional[int] = Field(None, ge=1)

    status: SubmissionStatus = Field(default=SubmissionStatus.DRAFT)
    availability_status: AvailabilityStatus = Field(default=AvailabilityStatus.IN_STOCK)
    rejection_reason: Optional[str] = None

    sku: Optional[str] = None
    barcode: Optional[str] = None
    quality_grade: Optional[str] = None
    origin_country: Optional[str] = None
    certifications: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    specifications: dict[str, str] = Field(default_factory=dict, description="Free-form specification map")

    photos: list[str] = Field(default_factory=list, description="Ordered image data URLs")
    agent_id: Optional[str] = Field(None, description="Owning field agent ID")
    vendor: Optional[Vendor] = Field(None, description="Denormalized vendor captured at creation")
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    field_agents: Optional[AgentSummary] = Field(None, description="Joined agent identity (read-only)")

    @model_validator(mode="after")
    def _order_bounds(self) -> "Product":
        low, high = self.minimum_order_quantity, self.maximum_order_quantity
        if low is not None and high is not None and high < low:
            raise ValueError("maximum_order_quantity must not be below minimum_order_quantity")
        return self
