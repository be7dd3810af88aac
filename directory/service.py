"""
directory/service.py -- Submission, public listing, and moderation of resources.

submit() is the write path. Its checks run in a fixed order and the first
failure wins:
  1. session credential        -> Unauthorized
  2. required fields present   -> InvalidInput  (0 is present, None/"" is not)
  3. lat/lng numeric, in range -> InvalidInput
     type in the enumeration   -> InvalidInput
  4. GeoPoint(lng, lat) built longitude-first
  5. one INSERT with status="pending"

list_verified() is the read path; it only ever sees verified records.

moderate() is the privileged status transition. It is not reachable over
HTTP -- the operator CLI in main.py is its only caller, along with the
list_pending() and get_resource() review helpers.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from auth.tokens import verify_session
from core.errors import InternalError, InvalidInput
from directory.models import ALL_TYPES, RESOURCE_TYPES, GeoPoint, Resource, ResourceSummary
from directory.store import ResourceStore

logger = logging.getLogger("reliefmap.directory")

MODERATION_OUTCOMES = ("verified", "rejected")


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _coerce_coordinate(value: Any) -> float:
    """Turn a number or numeric string into a finite float, else InvalidInput."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise InvalidInput("Invalid latitude or longitude values.")
    # float() also accepts digit separators ("1_0"); plain decimal notation only.
    if isinstance(value, str) and "_" in value:
        raise InvalidInput("Invalid latitude or longitude values.")
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError) as exc:
        raise InvalidInput("Invalid latitude or longitude values.") from exc
    if not math.isfinite(number):
        raise InvalidInput("Invalid latitude or longitude values.")
    return number


def validate_location(lat: Any, lng: Any) -> GeoPoint:
    """Coerce and range-check a coordinate pair, returning it longitude-first."""
    latitude = _coerce_coordinate(lat)
    longitude = _coerce_coordinate(lng)
    if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
        raise InvalidInput("Invalid latitude or longitude values.")
    return GeoPoint(lng=longitude, lat=latitude)


def submit(
    store: ResourceStore,
    token: Optional[str],
    resource_type: Any,
    name: Any,
    address: Any,
    description: Any,
    lat: Any,
    lng: Any,
) -> str:
    """Validate a submission from an authenticated caller and store it as pending.

    Returns the new resource id.
    """
    session = verify_session(token)

    if any(_is_missing(v) for v in (name, address, resource_type, lat, lng)):
        raise InvalidInput("Missing required location or resource data.")
    if not all(isinstance(v, str) for v in (name, address, resource_type)):
        raise InvalidInput("Missing required location or resource data.")
    if description is not None and not isinstance(description, str):
        raise InvalidInput("Description must be a string.")

    location = validate_location(lat, lng)

    if resource_type not in RESOURCE_TYPES:
        raise InvalidInput(f"Unknown resource type {resource_type!r}.")

    resource = Resource(
        type=resource_type,
        name=name.strip(),
        address=address.strip(),
        description=(description or "").strip() or None,
        location=location,
        submitted_by=session.user_id,
        status="pending",
    )
    try:
        resource_id = store.create_resource(resource)
    except SQLAlchemyError as exc:
        logger.exception("Resource insert failed")
        raise InternalError() from exc
    logger.info("Resource %s submitted by %s (pending review)", resource_id, session.user_id)
    return resource_id


def list_verified(store: ResourceStore, type_filter: Optional[str] = None) -> list[ResourceSummary]:
    """Return verified resources, optionally restricted to one type.

    None, "" and "all" mean every type. An unknown type matches nothing.
    """
    resource_type = None if not type_filter or type_filter == ALL_TYPES else type_filter
    try:
        return store.list_verified(resource_type)
    except SQLAlchemyError as exc:
        logger.exception("Resource listing failed")
        raise InternalError() from exc


def moderate(store: ResourceStore, resource_id: str, status: str) -> Resource:
    """Set a resource's moderation outcome and return the updated record.

    Raises InvalidInput for an unknown resource id or a status other than
    "verified" / "rejected".
    """
    if status not in MODERATION_OUTCOMES:
        raise InvalidInput(f"Status must be one of {', '.join(MODERATION_OUTCOMES)}.")
    try:
        if not store.set_status(resource_id, status):
            raise InvalidInput(f"Unknown resource {resource_id!r}.")
        updated = store.get_resource(resource_id)
    except SQLAlchemyError as exc:
        logger.exception("Moderation update failed")
        raise InternalError() from exc
    logger.info("Resource %s marked %s", resource_id, status)
    return updated


def list_pending(store: ResourceStore) -> list[Resource]:
    """Full records awaiting review, oldest first. Moderator use only."""
    try:
        return store.list_by_status("pending")
    except SQLAlchemyError as exc:
        logger.exception("Pending listing failed")
        raise InternalError() from exc


def get_resource(store: ResourceStore, resource_id: str) -> Resource:
    """Full record for one resource. Raises InvalidInput for an unknown id."""
    try:
        resource = store.get_resource(resource_id)
    except SQLAlchemyError as exc:
        logger.exception("Resource lookup failed")
        raise InternalError() from exc
    if resource is None:
        raise InvalidInput(f"Unknown resource {resource_id!r}.")
    return resource
