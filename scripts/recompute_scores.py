#!/usr/bin/env python3
"""Recompute scores for one application from its stored answers.

Usage:
    python scripts/recompute_scores.py --application-id 42 --user-id u-123
    python scripts/recompute_scores.py --application-id 42 --user-id u-123 --dry-run

Writes a new score audit event (and upserts the certification when the tier
qualifies) without changing the application's status. --dry-run only prints.
Exits 0 on success, 1 on error.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from certify.catalog.loader import get_catalog
from certify.db.session import SessionLocal
from certify.services.errors import ReconcileError
from certify.services.reconciler import (
    get_owned_application,
    rescore_application,
    scorables_from_rows,
)
from certify.services.scoring.engine import compute_scores


def main() -> int:
    parser = argparse.ArgumentParser(description="Recompute application scores")
    parser.add_argument("--application-id", type=int, required=True)
    parser.add_argument("--user-id", required=True, help="Owner of the application")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print computed scores without writing a score audit",
    )
    args = parser.parse_args()

    catalog = get_catalog()
    db = SessionLocal()
    try:
        if args.dry_run:
            application = get_owned_application(db, args.application_id, args.user_id)
            result = compute_scores(scorables_from_rows(application.indicator_responses), catalog)
            written = False
        else:
            outcome = rescore_application(db, args.application_id, args.user_id, catalog)
            result = outcome.scores
            written = outcome.scores_written

        print(f"Application id={args.application_id}")
        print(f"  overall={result.overall_score:.2f} level={result.certification_level.value}")
        for pid, pillar in sorted(result.pillar_scores.items()):
            print(f"  pillar {pid}: score={pillar.score:.2f} completion={pillar.completion:.2f}%")
        print(f"  score audit written={written}")
        return 0
    except ReconcileError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
