"""Record capture, listing and detail endpoint for Vercel."""

from field_catalog.models.product import specifications_from_pairs
from field_catalog.models.status import StatusFilter
from field_catalog.services.photos import PhotoFile, add_photos, decode_data_url
from field_catalog.services.records import (
    RecordKind,
    create_land_listing,
    create_product,
    get_record,
    list_records,
)
from field_catalog.services.session import SessionContext

from api._common import json_response, parse_body, run_endpoint


def _photo_file(index: int, upload) -> PhotoFile:
    if not isinstance(upload, dict):
        raise ValueError(f"Upload {index} must be an object with a data_url")
    content_type, data = decode_data_url(upload.get("data_url") or "")
    return PhotoFile(
        filename=upload.get("filename") or f"upload-{index}",
        content_type=content_type,
        data=data,
    )


def handler(request):
    """
    GET records of one kind, or POST a new draft.

    GET query: ``kind`` (land_listing|product), then either ``id`` for a
    single record or ``status`` (default all) and ``mine=true`` for the
    caller's own submissions. Listing everyone's records requires an admin.

    POST body: ``{"kind", "record", "uploads"?, "specification_rows"?}``.
    ``record`` holds the form fields, ``uploads`` a list of
    ``{"filename", "data_url"}`` photos run through the capture pipeline,
    and ``specification_rows`` (products only) the raw key/value rows.
    Responds 201 with the stored draft.
    """
    method = (request.get("method") or "GET").upper()
    query = request.get("query", {}) or {}

    async def _fetch(session: SessionContext):
        agent = session.require_agent()
        kind = RecordKind(query.get("kind", RecordKind.LAND_LISTING.value))

        record_id = query.get("id")
        if record_id:
            record = await get_record(kind, record_id)
            if record.agent_id != agent.id:
                session.require_admin()
            return record.model_dump(mode="json")

        mine = str(query.get("mine", "false")).lower() == "true"
        if not mine:
            session.require_admin()

        records = await list_records(
            kind,
            query.get("status", StatusFilter.ALL.value),
            agent_id=agent.id if mine else None,
        )
        return {"records": [record.model_dump(mode="json") for record in records]}

    async def _create(session: SessionContext):
        session.require_agent()
        body = parse_body(request)
        kind = RecordKind(body.get("kind"))

        fields = body.get("record")
        if not isinstance(fields, dict):
            raise ValueError("record must be a JSON object")
        fields = dict(fields)

        rows = body.get("specification_rows")
        if rows is not None:
            if kind != RecordKind.PRODUCT or not isinstance(rows, list):
                raise ValueError("specification_rows must be a list and only applies to products")
            fields["specifications"] = specifications_from_pairs(rows)

        # Validate the form before any photo work
        record = kind.model(**fields)
        uploads = [_photo_file(i, upload) for i, upload in enumerate(body.get("uploads") or [])]
        record.photos = add_photos(record.photos, uploads)

        if kind == RecordKind.PRODUCT:
            created = await create_product(session, record)
        else:
            created = await create_land_listing(session, record)
        return created.model_dump(mode="json")

    if method == "GET":
        return run_endpoint(request, _fetch)
    if method == "POST":
        return run_endpoint(request, _create, success_status=201)
    return json_response(405, {"error": f"Method {method} not allowed"})
