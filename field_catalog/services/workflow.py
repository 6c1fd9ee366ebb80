"""
Status workflow for land listings and products.

    draft --submit--> submitted
    submitted --approve--> approved
    submitted --reject--> rejected

approved and rejected are terminal. Every status write goes through this
module: the in-process check rejects illegal moves, and the update itself
is guarded on the expected source status so a row that changed since it
was read is never overwritten.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from field_catalog.models.land_listing import LandListing
from field_catalog.models.product import Product
from field_catalog.models.status import TERMINAL_STATUSES, SubmissionStatus
from field_catalog.services.records import RecordKind, get_record
from field_catalog.services.session import SessionContext
from field_catalog.services.supabase_client import update_row
from field_catalog.utils.errors import InvalidTransition, NotAuthorized
from field_catalog.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

Record = Union[LandListing, Product]


class Action(str, Enum):
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"


# action -> (required source status, target status)
TRANSITIONS: dict[Action, tuple[SubmissionStatus, SubmissionStatus]] = {
    Action.SUBMIT: (SubmissionStatus.DRAFT, SubmissionStatus.SUBMITTED),
    Action.APPROVE: (SubmissionStatus.SUBMITTED, SubmissionStatus.APPROVED),
    Action.REJECT: (SubmissionStatus.SUBMITTED, SubmissionStatus.REJECTED),
}


def check_transition(action: Action, record: Record) -> SubmissionStatus:
    """Return the target status, or raise InvalidTransition."""
    action = Action(action)
    source, target = TRANSITIONS[action]
    current = SubmissionStatus(record.status)
    if current != source:
        message = None
        if current in TERMINAL_STATUSES:
            message = f"Cannot {action.value} record {record.id or '<unsaved>'}: '{current.value}' is final"
        raise InvalidTransition(action.value, current.value, record.id, message=message)
    return target


def changes_for(action: Action, record: Record, reason: Optional[str] = None) -> dict:
    """Column updates written by a transition."""
    target = check_transition(action, record)
    changes = {
        "status": target.value,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    if action == Action.APPROVE:
        changes["rejection_reason"] = None
    elif action == Action.REJECT:
        changes["rejection_reason"] = reason
    return changes


def _apply(record: Record, changes: dict) -> Record:
    record.status = SubmissionStatus(changes["status"])
    record.updated_at = changes["updated_at"]
    if "rejection_reason" in changes:
        record.rejection_reason = changes["rejection_reason"]
    return record


def submit(record: Record) -> Record:
    """draft -> submitted."""
    return _apply(record, changes_for(Action.SUBMIT, record))


def approve(record: Record) -> Record:
    """submitted -> approved; clears any rejection reason."""
    return _apply(record, changes_for(Action.APPROVE, record))


def reject(record: Record, reason: Optional[str] = None) -> Record:
    """submitted -> rejected; stores ``reason`` verbatim (None when omitted)."""
    return _apply(record, changes_for(Action.REJECT, record, reason))


async def _transition(
    kind: RecordKind,
    record_id: str,
    action: Action,
    reason: Optional[str] = None,
    session: Optional[SessionContext] = None,
) -> Record:
    log = logger.bind(kind=kind.value, record_id=record_id, action=action.value)
    record = await get_record(kind, record_id)

    if action == Action.SUBMIT and session is not None:
        agent = session.require_agent()
        if record.agent_id != agent.id and not agent.is_admin:
            raise NotAuthorized(f"Agent {agent.id} does not own {kind.value} {record_id}")

    source = SubmissionStatus(record.status)
    changes = changes_for(action, record, reason)

    row = await update_row(
        kind.table,
        record_id,
        changes,
        expected={"status": source.value},
    )
    if row is None:
        # Guard matched nothing: someone moved the record since we read it
        log.warning("Status guard matched no rows", expected_status=source.value)
        raise InvalidTransition(
            action.value,
            source.value,
            record_id,
            message=f"Cannot {action.value} {kind.value} {record_id}: status changed concurrently",
        )

    log.info(
        "Record status changed",
        from_status=source.value,
        to_status=changes["status"],
        has_reason=bool(changes.get("rejection_reason")),
    )
    return kind.model(**row)


async def submit_record(session: SessionContext, kind: RecordKind, record_id: str) -> Record:
    """Finalize a draft. Only the owning agent (or an admin) may submit."""
    session.require_agent()
    return await _transition(kind, record_id, Action.SUBMIT, session=session)


async def approve_record(session: SessionContext, kind: RecordKind, record_id: str) -> Record:
    session.require_admin()
    return await _transition(kind, record_id, Action.APPROVE)


async def reject_record(
    session: SessionContext,
    kind: RecordKind,
    record_id: str,
    reason: Optional[str] = None,
) -> Record:
    session.require_admin()
    return await _transition(kind, record_id, Action.REJECT, reason=reason)
