"""
directory/store.py -- SQLAlchemy-backed persistence layer for the resource directory.

Uses SQLAlchemy Core (not ORM) so the dataclasses in directory/models.py
remain the authoritative domain representation. Swapping SQLite for
PostgreSQL is a connection string change, not a rewrite.

Pattern: Repository + Data Mapper. ResourceStore is the repository; the
_row_to_* functions are the mappers.

Geospatial point:
  Stored as two REAL columns in (longitude, latitude) order with a composite
  index in the same order. The read projection swaps them back into the
  public {lat, lng} shape in _row_to_summary and nowhere else.

Schema guards:
  CHECK constraints pin type, status and coordinate ranges. A violation
  raises IntegrityError, which create_resource() reports as InvalidInput.

Public visibility:
  list_verified() hardcodes status == 'verified'. No public read method
  takes a status argument.

Security: all queries use bound parameters. No f-strings in SQL except the
CHECK clauses, which are built from module constants only.

Usage:
    store = ResourceStore()                               # SQLite default
    store = ResourceStore("postgresql://user:pw@host/db") # PostgreSQL
    resource_id = store.create_resource(resource)
    store.set_status(resource_id, "verified")
    rows = store.list_verified("shelter")
    store.close()
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    Float,
    Index,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from core.config import get_settings
from core.errors import InvalidInput
from directory.models import RESOURCE_STATUSES, RESOURCE_TYPES, GeoPoint, Resource, ResourceSummary


def _in_clause(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_resources = Table(
    "resources",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("type", String(20), nullable=False),
    Column("name", String(255), nullable=False),
    Column("address", Text, nullable=False),
    Column("description", Text),
    Column("longitude", Float, nullable=False),
    Column("latitude", Float, nullable=False),
    Column("status", String(20), nullable=False, server_default="pending"),
    Column("submitted_by", String(32), nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    CheckConstraint(_in_clause("type", RESOURCE_TYPES), name="ck_resource_type"),
    CheckConstraint(_in_clause("status", RESOURCE_STATUSES), name="ck_resource_status"),
    CheckConstraint("longitude BETWEEN -180 AND 180", name="ck_resource_longitude"),
    CheckConstraint("latitude BETWEEN -90 AND 90", name="ck_resource_latitude"),
)

Index("ix_resources_location", _resources.c.longitude, _resources.c.latitude)
Index("ix_resources_status_type", _resources.c.status, _resources.c.type)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so public reads never wait on submissions."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ResourceStore:
    """Repository for Resource entities.

    One instance is created at application startup and shared by every
    request; close() disposes the connection pool on shutdown.
    """

    def __init__(self, db_url: Optional[str] = None) -> None:
        db_url = db_url or get_settings().database_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_resource(self, resource: Resource) -> str:
        """Insert a new resource and return its generated id.

        created_at and updated_at are always assigned here, never by callers.
        Raises InvalidInput when a CHECK or NOT NULL constraint rejects the row.
        """
        resource_id = uuid.uuid4().hex
        now = _now_iso()
        try:
            with self.engine.connect() as conn:
                conn.execute(
                    _resources.insert().values(
                        id=resource_id,
                        type=resource.type,
                        name=resource.name,
                        address=resource.address,
                        description=resource.description,
                        longitude=resource.location.lng,
                        latitude=resource.location.lat,
                        status=resource.status,
                        submitted_by=resource.submitted_by,
                        created_at=now,
                        updated_at=now,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            raise InvalidInput("Resource data failed validation.") from exc
        return resource_id

    def set_status(self, resource_id: str, status: str) -> bool:
        """Move a resource to a new moderation status in a single UPDATE.

        Returns True if a row was updated, False if resource_id was not found.
        Raises InvalidInput if status is not a known moderation status.
        """
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _resources.update()
                    .where(_resources.c.id == resource_id)
                    .values(status=status, updated_at=_now_iso())
                )
                conn.commit()
        except IntegrityError as exc:
            raise InvalidInput(f"Unknown status {status!r}.") from exc
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_resource(self, resource_id: str) -> Optional[Resource]:
        """Return the full internal record, or None. Not for public consumers."""
        with self.engine.connect() as conn:
            row = conn.execute(_resources.select().where(_resources.c.id == resource_id)).fetchone()
        return _row_to_resource(row) if row is not None else None

    def list_verified(self, resource_type: Optional[str] = None) -> list[ResourceSummary]:
        """Return the public projection of verified resources.

        The status filter is unconditional. resource_type, when given, adds an
        exact-match restriction. No ordering is guaranteed.
        """
        query = select(
            _resources.c.id,
            _resources.c.type,
            _resources.c.name,
            _resources.c.address,
            _resources.c.longitude,
            _resources.c.latitude,
        ).where(_resources.c.status == "verified")
        if resource_type is not None:
            query = query.where(_resources.c.type == resource_type)
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_summary(r) for r in rows]

    def list_by_status(self, status: str) -> list[Resource]:
        """Return full records in the given status, oldest first. Moderator use only."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _resources.select().where(_resources.c.status == status).order_by(_resources.c.created_at)
            ).fetchall()
        return [_row_to_resource(r) for r in rows]

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_resource(row) -> Resource:
    return Resource(
        id=row.id,
        type=row.type,
        name=row.name,
        address=row.address,
        description=row.description,
        location=GeoPoint(lng=row.longitude, lat=row.latitude),
        status=row.status,
        submitted_by=row.submitted_by,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_summary(row) -> ResourceSummary:
    # Stored (longitude, latitude) -> public {lat, lng}.
    return ResourceSummary(
        id=row.id,
        type=row.type,
        name=row.name,
        address=row.address,
        lat=row.latitude,
        lng=row.longitude,
    )
