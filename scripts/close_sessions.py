#!/usr/bin/env python3
"""Force-close every open activity of an operator.

Usage:
  python3 scripts/close_sessions.py --registration OP001
  python3 scripts/close_sessions.py --registration OP001 --dry-run
"""
import sys
from pathlib import Path
import argparse

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from timekeeping.db import session_scope
from timekeeping import crud
from timekeeping.core.lifecycle import ActivityEngine


def main():
    parser = argparse.ArgumentParser(description='Force-close open activities of an operator')
    parser.add_argument("--registration", required=True)
    parser.add_argument("--dry-run", action="store_true", help="Only list the open activities")
    args = parser.parse_args()

    with session_scope() as db:
        operator = crud.get_operator_by_registration(db, args.registration)
        if not operator:
            print(f"Operator {args.registration} not found")
            sys.exit(1)

        open_activities = crud.list_unclosed_activities(db, operator.id)
        print(f"Open activities for {operator.registration}: {len(open_activities)}")
        for activity in open_activities:
            print(f"  {activity.id} status={activity.status} in_progress={activity.in_progress} start={activity.start_ts}")

        if args.dry_run or not open_activities:
            return

        closed = ActivityEngine(db).force_close_all(operator.id)
        print(f"Closed {len(closed)} activities")


if __name__ == '__main__':
    main()
