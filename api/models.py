"""
API request and response models for the ReliefMap HTTP contract.

These Pydantic v2 models define the transport shape only. They are kept
separate from the dataclasses in auth/models.py and directory/models.py,
which own the internal domain representation. Route handlers map between
the two.

Field names on the wire are fixed (userId, resourceId, lat, lng ...) for
compatibility with the existing map front end; camelCase names are exposed
through aliases so the Python side stays snake_case.

Request bodies are loose (everything optional, coordinates
untyped). Presence, coercion and range checks belong to the core services,
which run them in a fixed order after the session check.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from directory.models import ResourceSummary

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    email: Optional[str] = None
    password: Optional[str] = None


class ResourceCreate(BaseModel):
    """Request body for POST /resources.

    lat / lng accept numbers or numeric strings; 0 is a valid coordinate.
    """

    type: Optional[Any] = None
    name: Optional[Any] = None
    address: Optional[Any] = None
    description: Optional[Any] = None
    lat: Optional[Any] = None
    lng: Optional[Any] = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class _AliasedModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class RegisterResponse(_AliasedModel):
    message: str
    user_id: str = Field(alias="userId")


class LoginResponse(_AliasedModel):
    """Body of a successful login. The token itself travels only in the cookie."""

    message: str
    user_id: str = Field(alias="userId")


class MessageResponse(BaseModel):
    message: str


class MeResponse(_AliasedModel):
    user_id: str = Field(alias="userId")
    email: str
    name: str


class ResourceCreatedResponse(_AliasedModel):
    message: str
    resource_id: str = Field(alias="resourceId")


class ResourceSummaryRow(BaseModel):
    """One verified resource as shown on the public map."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    name: str
    address: str
    lat: float
    lng: float

    @classmethod
    def from_summary(cls, summary: ResourceSummary) -> "ResourceSummaryRow":
        return cls(
            id=summary.id,
            type=summary.type,
            name=summary.name,
            address=summary.address,
            lat=summary.lat,
            lng=summary.lng,
        )


class ErrorResponse(BaseModel):
    """Error envelope returned on every 4xx/5xx response."""

    model_config = ConfigDict(frozen=True)

    error: str


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
