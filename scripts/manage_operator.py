#!/usr/bin/env python3
"""Create an operator or reset an existing operator's PIN.

Usage:
  # create or update operator 'OP001' with the given PIN
  python3 scripts/manage_operator.py --registration OP001 --pin 123456 --name "Maria Silva"
  # deactivate an operator
  python3 scripts/manage_operator.py --registration OP001 --deactivate

This script will create DB tables if missing.
"""
import sys
from pathlib import Path
import argparse

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from timekeeping.db import Base, engine, session_scope
from timekeeping import crud, schemas


def main():
    parser = argparse.ArgumentParser(description='Create an operator or reset its PIN')
    parser.add_argument("--registration", required=True)
    parser.add_argument("--pin", help="6-digit PIN")
    parser.add_argument("--name", default=None)
    parser.add_argument("--role", choices=["admin", "manager", "operator"], default=None)
    parser.add_argument("--deactivate", action="store_true")
    args = parser.parse_args()

    try:
        Base.metadata.create_all(bind=engine)
    except Exception as exc:
        print("Warning: could not create tables on startup:", exc)

    with session_scope() as db:
        operator = crud.get_operator_by_registration(db, args.registration)
        if operator:
            if args.deactivate:
                crud.set_operator_active(db, operator.id, False)
                print(f"Operator {operator.registration} deactivated")
                return
            if args.pin:
                print(f"Updating PIN for existing operator: {operator.registration}")
                crud.update_operator_pin(db, operator.id, args.pin)
            if args.name or args.role:
                operator.name = args.name or operator.name
                operator.role = args.role or operator.role
                db.commit()
            print("Operator updated")
        else:
            if not args.pin:
                parser.error("--pin is required to create an operator")
            print(f"Creating operator: {args.registration}")
            crud.create_operator(db, schemas.OperatorCreate(
                registration=args.registration,
                name=args.name or args.registration,
                role=args.role or "operator",
                pin=args.pin,
            ))
            print("Operator created")


if __name__ == '__main__':
    main()
