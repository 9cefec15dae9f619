#!/usr/bin/env python3
"""Seed default processes, a sample work order, an embroidery machine and an admin account.

This script is runnable directly (python scripts/seed_demo.py) and also import-safe.
If you see `ModuleNotFoundError: No module named 'timekeeping'`, run from the project root or set PYTHONPATH=. before running.
"""
import sys
from pathlib import Path

# Ensure project root is on sys.path when running the script directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from timekeeping.db import Base, engine, session_scope
from timekeeping import crud, schemas


import argparse

DEFAULT_PROCESSES = [
    "Costura",
    "Acabamento",
    "Revisão",
    "Embalagem",
    "Bordado",
]


def main():
    parser = argparse.ArgumentParser(description='Seed processes, a sample work order, a machine and optionally an admin account.')
    parser.add_argument('--no-processes', action='store_true', help='Skip seeding default processes')
    parser.add_argument('--no-machine', action='store_true', help='Skip seeding the embroidery machine')
    parser.add_argument('--admin', action='store_true', help='Create admin operator with provided --registration/--pin')
    parser.add_argument('--registration', default='ADMIN', help='Admin registration to create')
    parser.add_argument('--pin', default='000000', help='Admin PIN to set')
    args = parser.parse_args()

    try:
        Base.metadata.create_all(bind=engine)
    except Exception as exc:
        print("Warning: could not create tables on startup:", exc)

    with session_scope() as db:
        if not args.no_processes:
            for name in DEFAULT_PROCESSES:
                if crud.get_process_by_name(db, name):
                    print(f"Process {name} already exists")
                else:
                    crud.create_process(db, schemas.ProcessCreate(name=name))
                    print(f"Created process {name}")

        if not crud.list_work_orders(db):
            crud.create_work_order(db, schemas.WorkOrderCreate(code="OF-0001", quantity=100, reference="DEMO"))
            print("Created work order OF-0001")

        if not args.no_machine and not crud.list_machines(db):
            crud.create_machine(db, schemas.MachineCreate(name="Bordadeira 1", kind="embroidery", head_count=6))
            print("Created embroidery machine with 6 heads")

        if args.admin:
            if crud.get_operator_by_registration(db, args.registration):
                print("Admin already exists")
            else:
                crud.create_operator(db, schemas.OperatorCreate(
                    registration=args.registration, name="Administrator", role="admin", pin=args.pin,
                ))
                print("Admin created")


if __name__ == '__main__':
    main()
