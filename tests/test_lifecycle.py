import pytest
from sqlalchemy.exc import OperationalError
from timekeeping import crud, models, schemas
from timekeeping.core.errors import Conflict, Forbidden, InvalidArgument, InvalidState, NotFound, StoreError
from timekeeping.core.lifecycle import ActivityEngine


@pytest.fixture
def engine(db, clock):
    return ActivityEngine(db, clock=clock)


def start(engine, seed, operator_id=None, planned=5, **kwargs):
    return engine.start(schemas.StartActivity(
        operator_id=operator_id or seed.operator_id,
        process_id=seed.process_id,
        work_order_id=seed.work_order_id,
        planned_qty=planned,
        **kwargs
    ))


def piece(engine, activity_id, sequence, cumulative):
    return engine.register_piece(activity_id, schemas.RegisterPiece(sequence=sequence, cumulative_elapsed_s=cumulative))


def finish(engine, activity_id, **kwargs):
    return engine.finish(activity_id, schemas.FinishActivity(**kwargs))


def test_start_creates_active_activity(engine, seed, clock, db):
    activity = start(engine, seed, device_id="tablet-3")
    assert activity.status == "active"
    assert activity.in_progress is True
    assert activity.pieces_done == 0
    assert activity.start_ts == clock.now
    assert activity.pauses == []
    assert activity.origin_device == "tablet-3"
    assert activity.operator_name == "Ana"
    assert activity.process_name == "Costura"
    assert activity.work_order_code == "OF-100"
    assert crud.get_work_order(db, seed.work_order_id).status == "in_progress"


def test_second_start_for_same_operator_conflicts(engine, seed, db):
    first = start(engine, seed, planned=3)
    with pytest.raises(Conflict) as exc:
        start(engine, seed, planned=2)
    assert exc.value.details["active_activity_id"] == first.id
    assert db.query(models.Activity).count() == 1
    untouched = crud.get_activity(db, first.id)
    assert untouched.status == "active"
    assert untouched.planned_qty == 3


def test_other_operators_are_independent(engine, seed):
    start(engine, seed)
    other = start(engine, seed, operator_id=seed.other_id)
    assert other.status == "active"


def test_start_validations(engine, seed, db):
    with pytest.raises(NotFound):
        start(engine, seed, operator_id="missing")

    crud.set_operator_active(db, seed.other_id, False)
    with pytest.raises(Forbidden):
        start(engine, seed, operator_id=seed.other_id)

    with pytest.raises(NotFound):
        engine.start(schemas.StartActivity(
            operator_id=seed.operator_id, process_id="missing", work_order_id=seed.work_order_id, planned_qty=1
        ))

    process = crud.get_process(db, seed.process_id)
    process.active = False
    db.commit()
    with pytest.raises(Forbidden):
        start(engine, seed)
    process.active = True
    db.commit()

    with pytest.raises(NotFound):
        engine.start(schemas.StartActivity(
            operator_id=seed.operator_id, process_id=seed.process_id, work_order_id="missing", planned_qty=1
        ))

    work_order = crud.get_work_order(db, seed.work_order_id)
    work_order.status = "completed"
    db.commit()
    with pytest.raises(Conflict):
        start(engine, seed)
    assert db.query(models.Activity).count() == 0


def test_store_constraint_blocks_second_open_session(engine, seed, db, monkeypatch):
    first = start(engine, seed)
    # simulate a concurrent request that passed the pre-check
    monkeypatch.setattr(crud, "get_open_activity", lambda db, operator_id: None)
    with pytest.raises(Conflict) as exc_info:
        start(engine, seed)
    assert exc_info.value.details["active_activity_id"] == first.id
    assert db.query(models.Activity).count() == 1


def test_register_pieces_returns_individual_durations(engine, seed):
    activity = start(engine, seed, planned=3)
    results = [piece(engine, activity.id, n, c) for n, c in [(1, 10), (2, 25), (3, 33)]]
    assert [r.individual_s for r in results] == [10, 15, 8]
    assert results[-1].pieces_done == 3
    assert results[-1].planned_qty == 3


def test_duplicate_piece_is_rejected_once(engine, seed, db):
    activity = start(engine, seed)
    piece(engine, activity.id, 1, 10)
    piece(engine, activity.id, 2, 20)
    with pytest.raises(Conflict):
        piece(engine, activity.id, 2, 30)
    assert crud.get_activity(db, activity.id).pieces_done == 2
    assert crud.count_pieces(db, activity.id) == 2


def test_duplicate_piece_caught_by_store_constraint(engine, seed, db, monkeypatch):
    activity = start(engine, seed)
    piece(engine, activity.id, 1, 10)
    monkeypatch.setattr(crud, "get_piece", lambda db, activity_id, sequence: None)
    with pytest.raises(Conflict):
        piece(engine, activity.id, 1, 12)
    assert crud.get_activity(db, activity.id).pieces_done == 1


def test_register_piece_validations(engine, seed):
    activity = start(engine, seed, planned=2)
    with pytest.raises(InvalidArgument):
        piece(engine, activity.id, 3, 10)
    with pytest.raises(NotFound):
        piece(engine, "missing", 1, 10)

    engine.pause(activity.id)
    with pytest.raises(InvalidState):
        piece(engine, activity.id, 1, 10)
    engine.resume(activity.id)

    finish(engine, activity.id, realized_qty=1)
    with pytest.raises(InvalidState):
        piece(engine, activity.id, 1, 10)


def test_negative_individual_time_is_accepted(engine, seed):
    activity = start(engine, seed)
    piece(engine, activity.id, 1, 30)
    result = piece(engine, activity.id, 2, 20)
    assert result.individual_s == -10


def test_pause_and_resume(engine, seed, clock):
    activity = start(engine, seed)
    clock.advance(seconds=30)
    paused = engine.pause(activity.id, schemas.PauseActivity(reason="almoço"))
    assert paused.status == "paused"
    assert paused.in_progress is True
    assert len(paused.pauses) == 1
    assert paused.pauses[0]["end"] is None
    assert paused.pauses[0]["reason"] == "almoço"

    with pytest.raises(InvalidState):
        engine.pause(activity.id)

    clock.advance(seconds=60)
    resumed = engine.resume(activity.id)
    assert resumed.status == "active"
    assert resumed.pauses[0]["end"] == clock.now.isoformat()

    with pytest.raises(InvalidState):
        engine.resume(activity.id)


def test_pause_records_pairing(engine, seed, clock):
    activity = start(engine, seed)
    for _ in range(3):
        clock.advance(seconds=10)
        engine.pause(activity.id)
        clock.advance(seconds=5)
        activity = engine.resume(activity.id)
    assert len(activity.pauses) == 3
    assert all(p["end"] is not None for p in activity.pauses)

    activity = engine.pause(activity.id)
    assert sum(1 for p in activity.pauses if p["end"] is None) == 1


def test_finish_subtracts_pauses_exactly(engine, seed, clock, db):
    activity = start(engine, seed, planned=4)
    clock.advance(seconds=100)
    engine.pause(activity.id)
    clock.advance(seconds=60)
    engine.resume(activity.id)
    clock.advance(seconds=240)

    finished, metrics = finish(engine, activity.id, realized_qty=4)
    assert metrics.total_elapsed_seconds == 400 - 60
    assert finished.total_elapsed_s == 340
    assert finished.time_per_unit_s == pytest.approx(340 / 4)
    assert finished.status == "finished"
    assert finished.in_progress is False
    assert finished.end_ts == clock.now
    assert crud.get_work_order(db, seed.work_order_id).status == "open"


def test_finish_while_paused_closes_pause(engine, seed, clock):
    activity = start(engine, seed)
    clock.advance(seconds=100)
    engine.pause(activity.id)
    clock.advance(seconds=50)
    finished, metrics = finish(engine, activity.id, realized_qty=2)
    assert metrics.total_elapsed_seconds == 100
    assert all(p["end"] is not None for p in finished.pauses)


def test_finish_defaults_realized_to_registered_pieces(engine, seed, clock):
    activity = start(engine, seed)
    piece(engine, activity.id, 1, 12)
    piece(engine, activity.id, 2, 20)
    clock.advance(seconds=20)
    finished, metrics = finish(engine, activity.id)
    assert finished.realized_qty == 2
    assert metrics.pieces_registered == 2
    assert metrics.time_per_unit == 10.0


def test_finish_requires_realized_without_pieces(engine, seed):
    activity = start(engine, seed)
    with pytest.raises(InvalidArgument):
        finish(engine, activity.id)


def test_finish_with_zero_realized_has_no_tpu(engine, seed, clock):
    activity = start(engine, seed)
    clock.advance(seconds=90)
    finished, metrics = finish(engine, activity.id, realized_qty=0)
    assert finished.time_per_unit_s is None
    assert metrics.time_per_unit is None
    assert metrics.total_elapsed_seconds == 90


def test_realized_quantity_cap(engine, seed, clock):
    activity = start(engine, seed, planned=10)
    clock.advance(seconds=60)
    with pytest.raises(InvalidArgument) as exc:
        finish(engine, activity.id, realized_qty=16)
    assert exc.value.details["max_allowed"] == 15
    finished, _ = finish(engine, activity.id, realized_qty=15)
    assert finished.realized_qty == 15


def test_scrap_reason_required(engine, seed):
    activity = start(engine, seed)
    with pytest.raises(InvalidArgument):
        finish(engine, activity.id, realized_qty=3, scrap_qty=1)
    finished, _ = finish(engine, activity.id, realized_qty=3, scrap_qty=1, scrap_reason="costura torta")
    assert finished.scrap_qty == 1
    assert finished.scrap_reason == "costura torta"


def test_long_session_is_anomalous(engine, seed, clock):
    activity = start(engine, seed)
    clock.advance(hours=25)
    finished, metrics = finish(engine, activity.id, realized_qty=5)
    assert finished.status == "anomalous"
    assert metrics.status == "anomalous"
    assert finished.in_progress is False


def test_anomaly_threshold_is_configurable(db, clock, seed):
    engine = ActivityEngine(db, clock=clock, anomaly_threshold_s=60)
    activity = start(engine, seed)
    clock.advance(seconds=61)
    finished, _ = finish(engine, activity.id, realized_qty=1)
    assert finished.status == "anomalous"


def test_terminal_activity_cannot_be_finished_again(engine, seed):
    activity = start(engine, seed)
    finish(engine, activity.id, realized_qty=1)
    with pytest.raises(InvalidState):
        finish(engine, activity.id, realized_qty=1)
    with pytest.raises(InvalidState):
        engine.pause(activity.id)


def test_operator_can_start_again_after_finish(engine, seed):
    first = start(engine, seed)
    finish(engine, first.id, realized_qty=1)
    second = start(engine, seed)
    assert second.id != first.id
    assert engine.get_active(seed.operator_id).id == second.id


def test_full_scenario(engine, seed, clock):
    activity = start(engine, seed, planned=5)
    assert activity.status == "active"

    clock.advance(seconds=12)
    assert piece(engine, activity.id, 1, 12).individual_s == 12
    with pytest.raises(Conflict):
        piece(engine, activity.id, 1, 20)

    assert engine.pause(activity.id).status == "paused"
    clock.advance(seconds=30)
    assert engine.resume(activity.id).status == "active"
    clock.advance(seconds=100)

    finished, metrics = finish(engine, activity.id, realized_qty=5)
    assert finished.status == "finished"
    assert metrics.total_elapsed_seconds == 112
    assert finished.time_per_unit_s == pytest.approx(metrics.total_elapsed_seconds / 5)


def test_list_pieces_ordered_with_tpu(engine, seed):
    activity = start(engine, seed)
    piece(engine, activity.id, 2, 25)
    piece(engine, activity.id, 1, 10)
    piece(engine, activity.id, 3, 33)
    pieces = engine.list_pieces(activity.id)
    assert [p.sequence for p in pieces] == [1, 2, 3]
    assert [p.individual_s for p in pieces] == [10, 15, 8]
    assert pieces[1].tpu_minutes == 0.25


def test_activity_tpu_modes(engine, seed, clock):
    legacy = start(engine, seed)
    clock.advance(seconds=600)
    finish(engine, legacy.id, realized_qty=5)
    result = engine.activity_tpu(legacy.id)
    assert result.mode == "fallback"
    assert result.tpu_minutes == 2.0

    tracked = start(engine, seed)
    piece(engine, tracked.id, 1, 60)
    piece(engine, tracked.id, 2, 180)
    result = engine.activity_tpu(tracked.id)
    assert result.mode == "per_piece"
    assert result.tpu_minutes == 1.5
    assert result.pieces_registered == 2


def test_force_close_all(engine, seed, clock):
    activity = start(engine, seed)
    engine.pause(activity.id)
    clock.advance(seconds=30)
    closed = engine.force_close_all(seed.operator_id)
    assert [a.id for a in closed] == [activity.id]
    assert closed[0].status == "finished"
    assert closed[0].in_progress is False
    assert closed[0].total_elapsed_s == 0
    assert closed[0].realized_qty == 0
    assert all(p["end"] is not None for p in closed[0].pauses)
    assert engine.get_active(seed.operator_id) is None
    assert engine.force_close_all(seed.operator_id) == []


def test_session_summary_flags_inconsistent_records(engine, seed, db):
    first = start(engine, seed)
    finish(engine, first.id, realized_qty=1)
    second = start(engine, seed)

    broken = crud.get_activity(db, first.id)
    broken.in_progress = True
    db.commit()

    summary = engine.session_summary(seed.operator_id)
    assert summary.total == 2
    assert summary.active == 1
    assert summary.finished == 1
    assert summary.in_progress == 2
    assert [a.id for a in summary.inconsistent] == [first.id]
    assert second.id in [a.id for a in summary.activities]


def test_machine_bound_start(engine, seed, db):
    machine = crud.create_machine(db, schemas.MachineCreate(name="Bordadeira", kind="embroidery", head_count=6))
    activity = start(engine, seed, machine_id=machine.id, heads_in_use=[1, 2, 3])
    assert activity.machine_id == machine.id
    assert activity.heads_in_use == [1, 2, 3]
    assert activity.head_efficiency_pct == 50


def test_machine_validations(engine, seed, db):
    machine = crud.create_machine(db, schemas.MachineCreate(name="Bordadeira", kind="embroidery", head_count=4))

    with pytest.raises(InvalidArgument):
        start(engine, seed, heads_in_use=[1])
    with pytest.raises(NotFound):
        start(engine, seed, machine_id=999, heads_in_use=[1])
    with pytest.raises(InvalidArgument) as exc:
        start(engine, seed, machine_id=machine.id, heads_in_use=[2, 5])
    assert exc.value.details["invalid_heads"] == [5]

    crud.update_head(db, machine.id, 2, schemas.MachineHeadUpdate(status="problem", last_problem="linha partida"))
    with pytest.raises(Conflict) as exc:
        start(engine, seed, machine_id=machine.id, heads_in_use=[1, 2])
    assert exc.value.details["heads_with_problem"] == [{"number": 2, "last_problem": "linha partida"}]

    machine.status = "maintenance"
    db.commit()
    with pytest.raises(Conflict):
        start(engine, seed, machine_id=machine.id, heads_in_use=[1])
    assert db.query(models.Activity).count() == 0


def test_inconsistent_open_row_is_reported_as_blocking(engine, seed, db):
    stale = start(engine, seed)
    stale.in_progress = False
    db.commit()
    with pytest.raises(Conflict) as exc:
        start(engine, seed)
    assert exc.value.details["active_activity_id"] == stale.id
    assert db.query(models.Activity).count() == 1


def database_down(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("database is locked"))


def test_store_read_failure_raises_store_error(engine, seed, db, monkeypatch):
    activity = start(engine, seed)
    rollbacks = []
    real_rollback = db.rollback

    def tracking_rollback():
        rollbacks.append(True)
        real_rollback()

    monkeypatch.setattr(db, "rollback", tracking_rollback)
    monkeypatch.setattr(crud, "get_activity", database_down)
    with pytest.raises(StoreError) as exc:
        engine.pause(activity.id)
    assert exc.value.code == "store_error"
    assert rollbacks == [True]


def test_store_commit_failure_leaves_activity_unchanged(engine, seed, db, monkeypatch):
    activity = start(engine, seed)
    monkeypatch.setattr(db, "commit", database_down)
    with pytest.raises(StoreError):
        engine.pause(activity.id)
    monkeypatch.undo()

    db.expire_all()
    unchanged = crud.get_activity(db, activity.id)
    assert unchanged.status == "active"
    assert unchanged.pauses == []
