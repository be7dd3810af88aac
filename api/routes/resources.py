"""
api/routes/resources.py -- Resource submission and the public directory listing.

Routes:
  POST /resources              -- submit a resource (session credential required)
  GET  /resources?type=<t|all> -- verified resources only, public

The session credential is extracted here but verified inside
directory.service.submit(), which checks it before looking at the body.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from api.models import ResourceCreate, ResourceCreatedResponse, ResourceSummaryRow
from auth.dependencies import get_session_token
from directory import service
from directory.store import ResourceStore

# Auth policy:
# - POST /resources: requires a valid session (checked first inside service.submit)
# - GET  /resources: public -- returns verified entries only
router = APIRouter()


@router.post("/resources", response_model=ResourceCreatedResponse, status_code=201)
def create_resource(
    request: Request,
    body: ResourceCreate,
    token: Optional[str] = Depends(get_session_token),
) -> ResourceCreatedResponse:
    """Submit a new resource. It stays pending until a moderator verifies it."""
    resource_store: ResourceStore = request.app.state.resource_store
    resource_id = service.submit(
        resource_store,
        token,
        resource_type=body.type,
        name=body.name,
        address=body.address,
        description=body.description,
        lat=body.lat,
        lng=body.lng,
    )
    return ResourceCreatedResponse(
        message="Resource successfully submitted and is pending review!",
        resource_id=resource_id,
    )


@router.get("/resources", response_model=list[ResourceSummaryRow])
def list_resources(request: Request, type: Optional[str] = None) -> list[ResourceSummaryRow]:
    """Return verified resources, optionally filtered by type ("all" = no filter)."""
    resource_store: ResourceStore = request.app.state.resource_store
    return [ResourceSummaryRow.from_summary(s) for s in service.list_verified(resource_store, type)]
