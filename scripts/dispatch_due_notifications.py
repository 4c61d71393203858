"""Dispatch scheduled notifications whose delivery time has arrived.

Meant to be run periodically (cron, a container job, ...). Overlapping runs
are safe: every notification is claimed before it is dispatched.
"""

from __future__ import annotations

import argparse
import logging
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError

from notifyhub.bootstrap import build_services
from notifyhub.config import get_settings
from notifyhub.infrastructure.database import initialize_database
from notifyhub.utils import now_in_app_timezone

logger = logging.getLogger("notifyhub.scripts.dispatch_due")


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the dispatch run."""

    parser = argparse.ArgumentParser(
        description="Dispatch due scheduled notifications.",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=100,
        help="Maximum number of notifications dispatched in this run (default: 100)",
    )
    parser.add_argument(
        "--cleanup-days",
        type=int,
        default=None,
        help=(
            "Also delete read notifications older than this many days, "
            "and every expired notification (optional)"
        ),
    )
    return parser.parse_args()


def main() -> None:
    """Run one dispatch pass using the provided command line arguments."""

    args = parse_args()
    if args.limit < 1:
        raise SystemExit("--limit must be a positive number.")
    if args.cleanup_days is not None and args.cleanup_days < 1:
        raise SystemExit("--cleanup-days must be a positive number.")

    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    services = build_services(settings)
    initialize_database(services.engine)
    try:
        dispatched = services.service.dispatch_due(limit=args.limit)
        removed = expired = 0
        if args.cleanup_days is not None:
            now = now_in_app_timezone()
            cutoff = now - timedelta(days=args.cleanup_days)
            removed = services.notifications.delete_read_older_than(cutoff)
            expired = services.notifications.delete_expired(now)
    except SQLAlchemyError as exc:
        logger.exception("Dispatch run failed")
        raise SystemExit(f"Database error while dispatching notifications: {exc}") from exc
    finally:
        services.engine.dispose()

    print(f"Dispatched: {dispatched}")
    if args.cleanup_days is not None:
        print(f"Removed read notifications: {removed}")
        print(f"Removed expired notifications: {expired}")


if __name__ == "__main__":
    main()
