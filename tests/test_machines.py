from fastapi.testclient import TestClient
from timekeeping.main import app

client = TestClient(app)


def create_embroidery(headers, head_count=6):
    r = client.post("/api/v1/machines/", json={"name": "Tajima", "kind": "embroidery", "head_count": head_count},
                    headers=headers.manager)
    assert r.status_code == 201
    return r.json()


def test_create_machine_generates_heads(seed, headers):
    machine = create_embroidery(headers)
    assert [h["number"] for h in machine["heads"]] == [1, 2, 3, 4, 5, 6]
    assert all(h["status"] == "ok" for h in machine["heads"])

    r = client.get(f"/api/v1/machines/{machine['id']}", headers=headers.operator)
    assert r.status_code == 200
    assert r.json()["head_count"] == 6

    r = client.get("/api/v1/machines/", headers=headers.operator)
    assert [m["name"] for m in r.json()] == ["Tajima"]

    r = client.get("/api/v1/machines/999", headers=headers.operator)
    assert r.status_code == 404


def test_operator_cannot_create_machine(seed, headers):
    r = client.post("/api/v1/machines/", json={"name": "X"}, headers=headers.operator)
    assert r.status_code == 403


def test_head_problem_blocks_start(seed, headers, clock):
    machine = create_embroidery(headers, head_count=4)
    r = client.put(f"/api/v1/machines/{machine['id']}/heads/2",
                   json={"status": "problem", "last_problem": "agulha quebrada"}, headers=headers.operator)
    assert r.status_code == 200
    assert r.json()["status"] == "problem"

    payload = {
        "operator_id": seed.operator_id,
        "process_id": seed.process_id,
        "work_order_id": seed.work_order_id,
        "planned_qty": 10,
        "machine_id": machine["id"],
        "heads_in_use": [1, 2],
    }
    r = client.post("/api/v1/activities/start", json=payload, headers=headers.operator)
    assert r.status_code == 409
    assert r.json()["heads_with_problem"] == [{"number": 2, "last_problem": "agulha quebrada"}]

    client.put(f"/api/v1/machines/{machine['id']}/heads/2", json={"status": "ok"}, headers=headers.operator)
    r = client.post("/api/v1/activities/start", json=payload, headers=headers.operator)
    assert r.status_code == 201
    assert r.json()["head_efficiency_pct"] == 50
    assert r.json()["heads_in_use"] == [1, 2]


def test_update_unknown_head(seed, headers):
    machine = create_embroidery(headers, head_count=2)
    r = client.put(f"/api/v1/machines/{machine['id']}/heads/9", json={"status": "ok"}, headers=headers.operator)
    assert r.status_code == 404

    r = client.put(f"/api/v1/machines/{machine['id']}/heads/1", json={"status": "broken"}, headers=headers.operator)
    assert r.status_code == 422


def test_duplicate_machine_name_is_a_conflict(seed, headers):
    create_embroidery(headers)
    r = client.post("/api/v1/machines/", json={"name": "Tajima", "kind": "embroidery", "head_count": 2},
                    headers=headers.manager)
    assert r.status_code == 409
    assert r.json()["name"] == "Tajima"

    r = client.get("/api/v1/machines/", headers=headers.operator)
    assert len(r.json()) == 1
