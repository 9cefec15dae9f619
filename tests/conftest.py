import os
import sys
from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace
import pytest

# Ensure project root is on sys.path so tests can import 'timekeeping' package
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Tests run against a throwaway sqlite file
os.environ["DATABASE_URL"] = "sqlite:///./test_timekeeping.db"

from timekeeping.db import Base, engine, SessionLocal
from timekeeping import crud, schemas
from timekeeping.auth import create_access_token
from timekeeping.main import app
from timekeeping.api.v1.activities import get_clock


class FakeClock:
    """可手动推进的时钟"""

    def __init__(self, start=datetime(2025, 3, 10, 8, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def reset_db():
    # Drop all and re-create so the test DB matches the current models exactly
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    fake = FakeClock()
    app.dependency_overrides[get_clock] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_clock, None)


@pytest.fixture
def seed(db):
    """两个操作员、一个主管、一道工序、一张生产订单"""
    operator = crud.create_operator(db, schemas.OperatorCreate(registration="op001", name="Ana", pin="123456"))
    other = crud.create_operator(db, schemas.OperatorCreate(registration="op002", name="Bruno", pin="654321"))
    manager = crud.create_operator(
        db, schemas.OperatorCreate(registration="ger01", name="Carla", pin="111111", role="manager")
    )
    process = crud.create_process(db, schemas.ProcessCreate(name="Costura"))
    work_order = crud.create_work_order(db, schemas.WorkOrderCreate(code="OF-100", quantity=50))
    return SimpleNamespace(
        operator_id=operator.id,
        other_id=other.id,
        manager_id=manager.id,
        process_id=process.id,
        work_order_id=work_order.id,
    )


def auth_headers(operator_id):
    return {"Authorization": f"Bearer {create_access_token({'sub': operator_id})}"}


@pytest.fixture
def headers(seed):
    return SimpleNamespace(
        operator=auth_headers(seed.operator_id),
        other=auth_headers(seed.other_id),
        manager=auth_headers(seed.manager_id),
    )
