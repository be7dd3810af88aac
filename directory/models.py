"""
directory/models.py -- Domain dataclasses for the resource directory.

These are pure data containers with zero logic. Validation lives in
directory/service.py; persistence lives in directory/store.py.

Axis order:
  GeoPoint is (lng, lat) -- longitude first -- matching the stored column
  order and the GeoJSON convention. ResourceSummary is the public shape and
  names both axes explicitly. Mapping between the two happens in exactly one
  place (directory/store._row_to_summary).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

RESOURCE_TYPES = ("shelter", "food", "medical", "safe", "sos", "other")
RESOURCE_STATUSES = ("pending", "verified", "rejected")

# Sentinel accepted by the read path meaning "no type restriction".
ALL_TYPES = "all"


@dataclass(frozen=True)
class GeoPoint:
    """A (longitude, latitude) coordinate pair in decimal degrees."""

    lng: float
    lat: float


@dataclass
class Resource:
    """A point of interest submitted to the directory.

    status starts as "pending" and only a moderator moves it to "verified"
    or "rejected". Only verified resources are ever served publicly.

    id is None before the record is written to the database.
    """

    type: str  # one of RESOURCE_TYPES
    name: str
    address: str
    location: GeoPoint
    submitted_by: str  # User.id of the submitter
    description: Optional[str] = None
    status: str = "pending"  # one of RESOURCE_STATUSES
    id: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""  # ISO 8601, set by store on insert and status change


@dataclass(frozen=True)
class ResourceSummary:
    """Public projection of a verified resource. No internal fields."""

    id: str
    type: str
    name: str
    address: str
    lat: float
    lng: float
