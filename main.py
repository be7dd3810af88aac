#!/usr/bin/env python3
"""
ReliefMap -- moderation console.

Submissions arrive over HTTP as "pending" and stay invisible on the public
map until a moderator verifies them. There is no HTTP endpoint for that
step: moderation is done here, by an operator with shell access to the
server and its database.

Usage:
  python main.py pending
  python main.py show <resource-id>
  python main.py moderate <resource-id> verified
  python main.py moderate <resource-id> rejected
  python main.py --db sqlite:///other.db pending

Environment variables:
  DATABASE_URL  SQLAlchemy URL of the directory database (same one the API uses).
"""

import argparse
import sys
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from core.config import get_settings
from core.errors import ReliefMapError
from directory.models import Resource
from directory.service import MODERATION_OUTCOMES, get_resource, list_pending, moderate
from directory.store import ResourceStore


def _describe(resource: Resource) -> str:
    """One block of human-readable text per resource."""
    lines = [
        f"  {resource.id}  [{resource.type}]  {resource.name}",
        f"      address:   {resource.address}",
        f"      location:  lat={resource.location.lat} lng={resource.location.lng}",
        f"      status:    {resource.status}",
        f"      submitted: {resource.created_at} by {resource.submitted_by}",
    ]
    if resource.description:
        lines.append(f"      notes:     {resource.description}")
    return "\n".join(lines)


def _cmd_pending(store: ResourceStore) -> int:
    try:
        pending = list_pending(store)
    except ReliefMapError as exc:
        print(f"  [!] {exc.message}")
        return 1
    if not pending:
        print("  No submissions awaiting review.")
        return 0
    print(f"  {len(pending)} submission(s) awaiting review:\n")
    for resource in pending:
        print(_describe(resource))
        print()
    return 0


def _cmd_show(store: ResourceStore, resource_id: str) -> int:
    try:
        resource = get_resource(store, resource_id)
    except ReliefMapError as exc:
        print(f"  [!] {exc.message}")
        return 1
    print(_describe(resource))
    return 0


def _cmd_moderate(store: ResourceStore, resource_id: str, status: str) -> int:
    try:
        updated = moderate(store, resource_id, status)
    except ReliefMapError as exc:
        print(f"  [!] {exc.message}")
        return 1
    print(f"  Marked {updated.id} ({updated.name}) as {updated.status}.")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="reliefmap",
        description="Review and moderate submitted relief resources.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py pending
  python main.py moderate 3f2c9a... verified
  DATABASE_URL=postgresql://user:pw@host/reliefmap python main.py pending
        """,
    )
    parser.add_argument(
        "--db",
        metavar="URL",
        default=None,
        help="SQLAlchemy database URL (default: DATABASE_URL from the environment)",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.add_parser("pending", help="List submissions awaiting review")
    show = sub.add_parser("show", help="Show one resource in full")
    show.add_argument("resource_id", metavar="RESOURCE-ID")
    mod = sub.add_parser("moderate", help="Verify or reject a submission")
    mod.add_argument("resource_id", metavar="RESOURCE-ID")
    mod.add_argument("status", choices=MODERATION_OUTCOMES)
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        store = ResourceStore(args.db or get_settings().database_url)
    except SQLAlchemyError as exc:
        print(f"  [!] Could not open the directory database: {exc}")
        return 1
    try:
        if args.command == "pending":
            return _cmd_pending(store)
        if args.command == "show":
            return _cmd_show(store, args.resource_id)
        return _cmd_moderate(store, args.resource_id, args.status)
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
