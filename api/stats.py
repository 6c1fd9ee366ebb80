"""Admin dashboard counts endpoint for Vercel."""

from field_catalog.services.records import get_review_stats
from field_catalog.services.session import SessionContext

from api._common import run_endpoint


def handler(request):
    """GET per-kind status counts and the active agent count (admins only)."""
    async def _stats(session: SessionContext):
        session.require_admin()
        return await get_review_stats()

    return run_endpoint(request, _stats)
