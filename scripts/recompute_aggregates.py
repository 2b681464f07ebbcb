#!/usr/bin/env python3
"""
Backfill / repair the daily summary tables.

Recomputes every summary key from the log tables: keys with entries get a
fresh row, keys without entries lose their row. Safe to run repeatedly.

    python scripts/recompute_aggregates.py                     # everything
    python scripts/recompute_aggregates.py --user-id <uuid>    # one user
    python scripts/recompute_aggregates.py --user-id <uuid> --start 2025-01-01 --end 2025-01-31
"""

import argparse
import sys
import logging
from datetime import date
from pathlib import Path
from uuid import UUID

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("recompute_aggregates")


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Recompute daily summaries (idempotent).")
    p.add_argument("--user-id", type=UUID, default=None, help="Only this user")
    p.add_argument("--start", type=date.fromisoformat, default=None, help="YYYY-MM-DD")
    p.add_argument("--end", type=date.fromisoformat, default=None, help="YYYY-MM-DD")
    args = p.parse_args(argv)
    if (args.start is None) != (args.end is None):
        p.error("--start and --end must be given together")
    if args.start is not None and args.user_id is None:
        p.error("--start/--end require --user-id")
    return args


def main(argv=None, session_factory=None):
    args = parse_args(argv)

    from domain.models import SessionLocal
    from services.aggregate_service import AggregateService
    from app.exceptions import NutriLogError

    db = (session_factory or SessionLocal)()
    try:
        if args.start is not None:
            keys, present = AggregateService.recompute_range(
                db, args.user_id, args.start, args.end
            )
        else:
            keys, present = AggregateService.backfill(db, args.user_id)
    except NutriLogError as e:
        logger.error(f"✗ {e}")
        return 1
    except Exception as e:
        logger.exception(f"✗ Recompute failed: {e}")
        return 1
    finally:
        db.close()

    logger.info(f"✓ Recomputed {keys} key(s); {present} summary row(s) present")
    return 0


if __name__ == "__main__":
    sys.exit(main())
