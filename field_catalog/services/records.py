"""Land listing and product persistence and queries."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from ulid import ULID

from field_catalog.models.land_listing import LandListing
from field_catalog.models.product import Product
from field_catalog.models.status import StatusFilter, SubmissionStatus
from field_catalog.services.agents import count_active_agents
from field_catalog.services.session import SessionContext
from field_catalog.services.supabase_client import count_rows, insert_row, select_one, select_rows
from field_catalog.utils.config import PhotoConfig
from field_catalog.utils.errors import LimitExceeded
from field_catalog.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

# Owning agent's display identity, joined by agent_id foreign key
AGENT_JOIN = "*, field_agents(full_name, email, phone_number)"


class RecordKind(str, Enum):
    """The two record types subject to the submission workflow."""
    LAND_LISTING = "land_listing"
    PRODUCT = "product"

    @property
    def table(self) -> str:
        return _TABLES[self]

    @property
    def model(self) -> type:
        return _MODELS[self]


_TABLES = {
    RecordKind.LAND_LISTING: "land_listings",
    RecordKind.PRODUCT: "products",
}

_MODELS = {
    RecordKind.LAND_LISTING: LandListing,
    RecordKind.PRODUCT: Product,
}


# Dashboard label -> status counted
_STAT_STATUSES = {
    "draft": SubmissionStatus.DRAFT,
    "pending": SubmissionStatus.SUBMITTED,
    "approved": SubmissionStatus.APPROVED,
    "rejected": SubmissionStatus.REJECTED,
}


def generate_record_id() -> str:
    """Generate a text-based record ID (ULID format)."""
    return str(ULID())


async def list_records(
    kind: RecordKind,
    status_filter: Union[StatusFilter, str] = StatusFilter.ALL,
    agent_id: Optional[str] = None,
) -> list[Union[LandListing, Product]]:
    """
    List records of one kind, newest first.

    ``status_filter`` of ``all`` applies no status predicate. Pass
    ``agent_id`` for an agent's own view. Backend failures surface as
    FetchFailed.
    """
    kind = RecordKind(kind)
    status_filter = StatusFilter(status_filter)

    filters = {}
    if status_filter != StatusFilter.ALL:
        filters["status"] = status_filter.value
    if agent_id:
        filters["agent_id"] = agent_id

    rows = await select_rows(
        kind.table,
        columns=AGENT_JOIN,
        filters=filters,
        order_by="created_at",
        descending=True,
    )
    logger.debug("Listed records", kind=kind.value, status_filter=status_filter.value, count=len(rows))
    return [kind.model(**row) for row in rows]


async def get_record(kind: RecordKind, record_id: str) -> Union[LandListing, Product]:
    """Fetch one record by id; NotFound when zero rows match."""
    kind = RecordKind(kind)
    row = await select_one(kind.table, record_id, columns=AGENT_JOIN)
    return kind.model(**row)


def _new_record_fields(record: Union[LandListing, Product], agent_id: str) -> dict:
    if len(record.photos) > PhotoConfig.MAX_PHOTOS:
        raise LimitExceeded(PhotoConfig.MAX_PHOTOS, len(record.photos))

    fields = record.model_dump(mode="json", exclude={"field_agents"})
    fields.update({
        "id": generate_record_id(),
        "agent_id": agent_id,
        "status": SubmissionStatus.DRAFT.value,
        "rejection_reason": None,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "updated_at": None,
    })
    return fields


async def create_land_listing(session: SessionContext, listing: LandListing) -> LandListing:
    """Save a new listing as a draft owned by the acting agent."""
    agent = session.require_agent()
    listing.recompute_price_per_unit()

    row = await insert_row(RecordKind.LAND_LISTING.table, _new_record_fields(listing, agent.id))
    logger.info("Created land listing draft", record_id=row.get("id"), agent_id=agent.id)
    return LandListing(**row)


async def create_product(session: SessionContext, product: Product) -> Product:
    """
    Save a new product as a draft owned by the acting agent.

    The vendor is stored denormalized on the product row, so creation is a
    single write and every product starts with exactly one vendor.
    """
    agent = session.require_agent()
    if product.vendor is None:
        raise ValueError("A product must be created with exactly one vendor")

    row = await insert_row(RecordKind.PRODUCT.table, _new_record_fields(product, agent.id))
    logger.info("Created product draft", record_id=row.get("id"), agent_id=agent.id)
    return Product(**row)


async def get_review_stats() -> dict:
    """
    Per-kind status counts and the number of active agents, for the admin dashboard.

    Every figure is an exact count query, so totals stay correct past the
    backend's row limit on plain selects.
    """
    stats = {}
    for kind in RecordKind:
        counts = {"total": await count_rows(kind.table)}
        for label, status in _STAT_STATUSES.items():
            counts[label] = await count_rows(kind.table, filters={"status": status.value})
        stats[kind.value] = counts
    stats["active_agents"] = await count_active_agents()
    return stats
