from datetime import datetime
from fastapi.testclient import TestClient
from timekeeping import crud, schemas
from timekeeping.main import app

client = TestClient(app)


def run_shift(seed, headers, db, clock):
    """周六一条已结束的活动（Bruno），今天一条暂停中的活动（Ana）"""
    completed = crud.create_work_order(db, schemas.WorkOrderCreate(code="OF-200", quantity=10))
    completed.status = "completed"
    db.commit()

    clock.now = datetime(2025, 3, 8, 9, 0)
    bruno = client.post("/api/v1/activities/start", json={
        "operator_id": seed.other_id,
        "process_id": seed.process_id,
        "work_order_id": seed.work_order_id,
        "planned_qty": 2,
    }, headers=headers.other).json()
    clock.advance(seconds=1200)
    r = client.post(f"/api/v1/activities/{bruno['id']}/finish", json={"realized_qty": 2}, headers=headers.other)
    assert r.status_code == 200

    clock.now = datetime(2025, 3, 10, 8, 0)
    ana = client.post("/api/v1/activities/start", json={
        "operator_id": seed.operator_id,
        "process_id": seed.process_id,
        "work_order_id": seed.work_order_id,
        "planned_qty": 5,
    }, headers=headers.operator).json()
    clock.advance(seconds=600)
    client.post(f"/api/v1/activities/{ana['id']}/pause", headers=headers.operator)
    clock.advance(seconds=300)
    return ana


def test_dashboard_stats(seed, headers, db, clock):
    run_shift(seed, headers, db, clock)

    r = client.get("/api/v1/dashboard/stats", headers=headers.manager)
    assert r.status_code == 200
    body = r.json()
    assert body["stats"] == {
        "total_work_orders": 2,
        "work_orders_open": 0,
        "work_orders_in_progress": 1,
        "work_orders_completed": 1,
        "total_activities": 2,
        "activities_today": 1,
        "active_operators": 2,
        "mean_activity_minutes": 20,
    }
    assert body["work_order_status"] == [
        {"status": "open", "count": 0},
        {"status": "in_progress", "count": 1},
        {"status": "completed", "count": 1},
    ]

    per_day = {item["day"]: item["count"] for item in body["activities_per_day"]}
    assert len(body["activities_per_day"]) == 7
    assert body["activities_per_day"][-1]["day"] == "10/03"
    assert per_day["08/03"] == 1
    assert per_day["10/03"] == 1
    assert per_day["09/03"] == 0

    assert body["top_operators"] == [{"name": "Bruno", "activities": 1}]
    assert body["process_times"] == [{"process": "Costura", "mean_minutes": 20}]


def test_dashboard_empty(seed, headers, clock):
    r = client.get("/api/v1/dashboard/stats", headers=headers.manager)
    assert r.status_code == 200
    assert r.json()["stats"]["total_work_orders"] == 1
    assert r.json()["stats"]["mean_activity_minutes"] == 0
    assert r.json()["top_operators"] == []

    r = client.get("/api/v1/dashboard/live", headers=headers.manager)
    assert r.json() == []


def test_live_activities_count_open_pause_until_now(seed, headers, db, clock):
    ana = run_shift(seed, headers, db, clock)

    r = client.get("/api/v1/dashboard/live", headers=headers.manager)
    assert r.status_code == 200
    assert len(r.json()) == 1
    live = r.json()[0]
    assert live["id"] == ana["id"]
    assert live["status"] == "paused"
    assert live["operator_name"] == "Ana"
    assert live["elapsed_s"] == 600


def test_dashboard_requires_manager(seed, headers):
    r = client.get("/api/v1/dashboard/stats", headers=headers.operator)
    assert r.status_code == 403
    r = client.get("/api/v1/dashboard/live", headers=headers.other)
    assert r.status_code == 403
    r = client.get("/api/v1/dashboard/stats")
    assert r.status_code == 401
