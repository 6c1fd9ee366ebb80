"""Submission status endpoint for Vercel: submit, approve, or reject a record."""

from field_catalog.services.records import RecordKind
from field_catalog.services.session import SessionContext
from field_catalog.services.workflow import Action, approve_record, reject_record, submit_record

from api._common import parse_body, run_endpoint


def handler(request):
    """
    POST ``{"kind", "id", "action", "reason"?}``.

    The workflow is the only authority on transitions; a failed transition
    comes back as 409 and the record is left unchanged.
    """
    async def _review(session: SessionContext):
        body = parse_body(request)
        kind = RecordKind(body.get("kind"))
        action = Action(body.get("action"))
        record_id = body.get("id")
        if not record_id:
            raise ValueError("Record id is required")

        if action == Action.SUBMIT:
            record = await submit_record(session, kind, record_id)
        elif action == Action.APPROVE:
            record = await approve_record(session, kind, record_id)
        else:
            record = await reject_record(session, kind, record_id, reason=body.get("reason") or None)

        return {"ok": True, "id": record.id, "status": record.status.value}

    return run_endpoint(request, _review)
