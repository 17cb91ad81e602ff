"""Live workout engine against in-memory storage and a manual clock."""
import uuid

import pytest

from liftlog.core.enums import PreviousLiftSource, SessionEventKind, SetType, TimerStatus
from liftlog.schemas.workout import PreviousSet
from liftlog.services.active_session import ActiveWorkoutSession, TemplateNotFoundError
from liftlog.services.exercise_library import default_library
from tests.fakes import make_template, regular_sets, sets_of


@pytest.fixture
def start(storage, settings, scheduler, notifier):
    async def _start(template=None):
        if template is not None:
            storage.seed_template(template)
        return await ActiveWorkoutSession.start(
            storage,
            settings,
            template_id=template.id if template is not None else None,
            scheduler=scheduler,
            notifier=notifier,
        )

    return _start


def numbering(exercise):
    return [(s.set_type, s.set_number) for s in exercise.sets]


def assert_contiguous(snapshot):
    for exercise in snapshot.exercises:
        for set_type in SetType:
            numbers = [s.set_number for s in exercise.sets if s.set_type == set_type]
            assert numbers == list(range(1, len(numbers) + 1))


def collect(session):
    events = []
    session.subscribe(events.append)
    return events


# Starting


async def test_start_empty_persists_session(start, storage):
    session = await start()
    await session.flush()

    assert session.session_id in storage.sessions
    assert session.snapshot().exercises == ()
    assert session.snapshot().timer.status == TimerStatus.IDLE


async def test_start_from_template_expands_sets(start, storage):
    template = make_template(
        "Push",
        [
            ("Bench Press", sets_of(SetType.WARMUP, 2, weight=60, reps=10) + regular_sets(3, weight=100, reps=5, rest=180)),
            ("Lateral Raise", regular_sets(2, weight=10, reps=15)),
        ],
        rest_seconds=75,
    )

    session = await start(template)
    await session.flush()
    snap = session.snapshot()

    assert snap.template_id == template.id
    assert snap.template_name == "Push"
    assert [e.exercise_name for e in snap.exercises] == ["Bench Press", "Lateral Raise"]
    bench = snap.exercises[0]
    assert numbering(bench) == [
        (SetType.WARMUP, 1),
        (SetType.WARMUP, 2),
        (SetType.REGULAR, 1),
        (SetType.REGULAR, 2),
        (SetType.REGULAR, 3),
    ]
    assert [s.rest_seconds for s in bench.sets] == [75, 75, 180, 180, 180]
    assert [(s.weight, s.reps) for s in bench.sets][2] == (100, 5)
    assert all(not s.is_completed for s in bench.sets)
    assert len(storage.set_logs) == 7
    assert len(storage.exercise_logs) == 2


async def test_template_rest_falls_back_to_default(start, settings):
    session = await start(make_template("Arms", [("Barbell Curl", regular_sets(2))]))
    assert [s.rest_seconds for s in session.snapshot().exercises[0].sets] == [settings.default_rest_seconds] * 2


async def test_start_from_missing_template(storage, settings, scheduler):
    with pytest.raises(TemplateNotFoundError):
        await ActiveWorkoutSession.start(storage, settings, template_id=uuid.uuid4(), scheduler=scheduler)


# Exercises


async def test_add_exercise_seeds_default_set_and_ignores_duplicates(start, storage):
    session = await start()
    session.add_exercise("Squat")
    session.add_exercise("Squat")
    await session.flush()

    snap = session.snapshot()
    assert len(snap.exercises) == 1
    squat = snap.exercises[0]
    assert squat.order_index == 0
    assert squat.show_rpe is False
    assert numbering(squat) == [(SetType.REGULAR, 1)]
    assert squat.sets[0].rest_seconds == 120
    assert storage.call_names().count("insert_exercise_log") == 1


async def test_add_exercise_accepts_library_entries(start, settings):
    settings.default_sets_per_exercise = 3
    settings.show_rpe_by_default = True
    session = await start()
    session.add_exercise(default_library.lookup("Deadlift"))

    deadlift = session.snapshot().exercises[0]
    assert deadlift.exercise_name == "Deadlift"
    assert deadlift.show_rpe is True
    assert len(deadlift.sets) == 3


async def test_remove_exercise_compacts_order(start, storage):
    session = await start()
    for name in ("Squat", "Bench Press", "Deadlift"):
        session.add_exercise(name)
    removed = session.snapshot().exercises[0]

    session.remove_exercise(0)
    session.remove_exercise(7)
    await session.flush()

    snap = session.snapshot()
    assert [(e.exercise_name, e.order_index) for e in snap.exercises] == [("Bench Press", 0), ("Deadlift", 1)]
    assert removed.row_id not in storage.exercise_logs
    assert sorted(e.order_index for e in storage.exercise_logs.values()) == [0, 1]


async def test_reorder_exercises(start, storage):
    session = await start()
    for name in ("Squat", "Bench Press", "Deadlift"):
        session.add_exercise(name)

    session.reorder_exercises(0, 2)
    session.reorder_exercises(1, 9)
    await session.flush()

    snap = session.snapshot()
    assert [e.exercise_name for e in snap.exercises] == ["Bench Press", "Deadlift", "Squat"]
    assert [e.order_index for e in snap.exercises] == [0, 1, 2]
    stored = {e.exercise_name: e.order_index for e in storage.exercise_logs.values()}
    assert stored == {"Bench Press": 0, "Deadlift": 1, "Squat": 2}


async def test_note_and_rpe_toggle(start, storage):
    session = await start()
    session.add_exercise("Squat")
    session.update_exercise_note(0, "  belt on top set ")
    session.toggle_rpe(0)
    await session.flush()

    squat = session.snapshot().exercises[0]
    assert squat.note == "belt on top set"
    assert squat.show_rpe is True
    assert storage.exercise_logs[squat.row_id].note == "belt on top set"

    session.update_exercise_note(0, "   ")
    assert session.snapshot().exercises[0].note is None


# Sets


async def test_add_set_carries_forward(start):
    session = await start()
    session.add_exercise("Bench Press")
    session.update_set_weight(0, 1, 80)
    session.update_set_reps(0, 1, 8)
    session.update_set_rest(0, 1, 150)
    session.add_set(0)

    second = session.snapshot().exercises[0].sets[1]
    assert (second.set_type, second.set_number) == (SetType.REGULAR, 2)
    assert (second.weight, second.reps, second.rest_seconds) == (80, 8, 150)
    assert second.completed_at is None


async def test_numbering_is_per_type(start, storage):
    session = await start()
    session.add_exercise("Bench Press")
    session.add_set(0)
    session.add_set(0)

    session.cycle_set_type(0, 1)
    assert numbering(session.snapshot().exercises[0]) == [
        (SetType.WARMUP, 1),
        (SetType.REGULAR, 1),
        (SetType.REGULAR, 2),
    ]

    session.update_set_type(0, 2, SetType.DROP)
    session.add_set(0)
    snap = session.snapshot()
    assert numbering(snap.exercises[0]) == [
        (SetType.WARMUP, 1),
        (SetType.REGULAR, 1),
        (SetType.DROP, 1),
        (SetType.REGULAR, 2),
    ]
    assert_contiguous(snap)

    await session.flush()
    stored = sorted(storage.set_logs.values(), key=lambda s: s.position)
    assert [(s.set_type, s.set_number) for s in stored] == numbering(snap.exercises[0])


async def test_cycle_set_type_wraps_around(start):
    session = await start()
    session.add_exercise("Squat")
    session.cycle_set_type(0, 1)
    session.cycle_set_type(0, 1, set_type=SetType.WARMUP)
    session.cycle_set_type(0, 1, set_type=SetType.DROP)
    assert numbering(session.snapshot().exercises[0]) == [(SetType.REGULAR, 1)]


async def test_rpe_outside_range_is_rejected(start):
    session = await start()
    session.add_exercise("Squat")
    session.update_set_rpe(0, 1, 11)
    session.update_set_rpe(0, 1, 0)
    assert session.snapshot().exercises[0].sets[0].rpe is None

    session.update_set_rpe(0, 1, 8.5)
    assert session.snapshot().exercises[0].sets[0].rpe == 8.5


async def test_unknown_set_or_exercise_is_a_no_op(start):
    session = await start()
    session.add_exercise("Squat")
    before = session.snapshot()

    session.update_set_weight(0, 5, 100)
    session.update_set_weight(3, 1, 100)
    session.complete_set(0, 1, set_type=SetType.DROP)
    session.remove_set(0, 999)
    session.add_set(4)

    assert session.snapshot() == before


# Undo


async def test_remove_then_undo_restores_exactly(start, storage):
    session = await start()
    session.add_exercise("Bench Press")
    for _ in range(3):
        session.add_set(0)
    session.update_set_weight(0, 1, 60)
    session.update_set_type(0, 1, SetType.WARMUP)
    session.update_set_weight(0, 2, 100)
    session.update_set_reps(0, 2, 5)
    session.update_set_type(0, 3, SetType.DROP)
    session.update_set_rpe(0, 1, 9)
    before = session.snapshot().exercises[0]
    victim = before.sets[1]

    session.remove_set(0, victim.id)
    during = session.snapshot()
    assert len(during.exercises[0].sets) == 3
    assert during.pending_removal.set.id == victim.id
    assert_contiguous(during)

    session.undo_set_removal()
    await session.flush()

    assert session.snapshot().exercises[0] == before
    assert session.snapshot().pending_removal is None
    assert "delete_set_log" not in storage.call_names()
    stored = sorted(storage.set_logs.values(), key=lambda s: s.position)
    assert [s.id for s in stored] == [s.row_id for s in before.sets]


async def test_undo_is_single_slot(start, storage):
    session = await start()
    session.add_exercise("Squat")
    session.add_set(0)
    session.add_set(0)
    first, second, third = session.snapshot().exercises[0].sets

    session.remove_set(0, first.id)
    session.remove_set(0, third.id)
    session.undo_set_removal()
    session.undo_set_removal()
    await session.flush()

    sets = session.snapshot().exercises[0].sets
    assert [s.id for s in sets] == [second.id, third.id]
    assert [s.set_number for s in sets] == [1, 2]
    assert first.row_id not in storage.set_logs
    assert third.row_id in storage.set_logs


async def test_undo_window_confirms_removal(start, storage, scheduler):
    session = await start()
    events = collect(session)
    session.add_exercise("Squat")
    session.add_set(0)
    first = session.snapshot().exercises[0].sets[0]

    session.remove_set(0, first.id)
    scheduler.advance(4)
    assert session.snapshot().pending_removal is not None

    scheduler.advance(1)
    await session.flush()

    assert session.snapshot().pending_removal is None
    assert first.row_id not in storage.set_logs
    kinds = [e.kind for e in events]
    assert SessionEventKind.SET_REMOVED in kinds
    assert kinds.index(SessionEventKind.UNDO_DISMISSED) > kinds.index(SessionEventKind.SET_REMOVED)

    session.undo_set_removal()
    assert len(session.snapshot().exercises[0].sets) == 1


async def test_confirm_set_removal(start, storage, scheduler):
    session = await start()
    session.add_exercise("Squat")
    session.add_set(0)
    first = session.snapshot().exercises[0].sets[0]

    session.remove_set(0, first.id)
    session.confirm_set_removal()
    await session.flush()

    assert first.row_id not in storage.set_logs
    assert scheduler.pending == 0


async def test_removing_exercise_discards_pending_removal(start):
    session = await start()
    session.add_exercise("Squat")
    session.add_exercise("Bench Press")
    session.add_set(0)
    squat_set = session.snapshot().exercises[0].sets[0]

    session.remove_set(0, squat_set.id)
    session.remove_exercise(0)
    session.undo_set_removal()

    snap = session.snapshot()
    assert [e.exercise_name for e in snap.exercises] == ["Bench Press"]
    assert snap.pending_removal is None


# Completion and rest timer


async def test_complete_requires_weight_and_reps(start):
    session = await start()
    session.add_exercise("Squat")
    session.add_set(0)
    session.update_set_weight(0, 1, 100)

    session.complete_set(0, 1)

    snap = session.snapshot()
    assert snap.exercises[0].sets[0].completed_at is None
    assert snap.timer.status == TimerStatus.IDLE


async def test_complete_fills_from_previous_performance(start, storage):
    storage.seed_previous("Squat", [PreviousSet(set_number=1, weight=140, reps=5, rpe=8)])
    session = await start()
    session.add_exercise("Squat")
    await session.flush()

    blank = session.snapshot().exercises[0].sets[0]
    assert (blank.previous_weight, blank.previous_reps, blank.previous_rpe) == (140, 5, 8)

    session.complete_set(0, 1)
    done = session.snapshot().exercises[0].sets[0]
    assert (done.weight, done.reps, done.rpe) == (140, 5, 8)
    assert done.is_completed


async def test_completing_starts_rest_timer_unless_last_set(start, scheduler):
    session = await start(make_template("Legs", [("Squat", regular_sets(2, weight=100, reps=5, rest=90))]))
    first, last = session.snapshot().exercises[0].sets

    session.complete_set(0, 1)
    timer = session.snapshot().timer
    assert timer.status == TimerStatus.RUNNING
    assert timer.remaining_seconds == 90
    assert timer.set_ref.set_id == first.id

    scheduler.advance(10)
    session.complete_set(0, 2)
    timer = session.snapshot().timer
    assert timer.remaining_seconds == 80
    assert timer.set_ref.set_id == first.id


async def test_last_set_ignores_trailing_exercise_without_sets(start):
    session = await start(make_template("Legs", [("Squat", regular_sets(1, weight=100, reps=5, rest=90))]))
    session.add_exercise("Leg Curl")
    leg_curl_set = session.snapshot().exercises[1].sets[0]
    session.remove_set(1, leg_curl_set.id)
    session.confirm_set_removal()
    assert session.snapshot().exercises[1].sets == ()

    session.complete_set(0, 1)
    snap = session.snapshot()
    assert snap.exercises[0].sets[0].is_completed
    assert snap.timer.status == TimerStatus.IDLE


async def test_rest_defaults_when_set_has_none(start):
    session = await start()
    session.add_exercise("Squat")
    session.add_set(0)
    session.update_set_rest(0, 1, None)
    session.update_set_weight(0, 1, 100)
    session.update_set_reps(0, 1, 5)

    session.complete_set(0, 1)
    assert session.snapshot().timer.remaining_seconds == 120


async def test_new_completion_supersedes_timer(start, scheduler, notifier):
    template = make_template("Legs", [("Squat", regular_sets(3, weight=100, reps=5, rest=60))])
    session = await start(template)

    session.complete_set(0, 1)
    scheduler.advance(30)
    session.complete_set(0, 2)
    assert session.snapshot().timer.remaining_seconds == 60

    scheduler.advance(59)
    assert notifier.expired_count == 0
    scheduler.advance(1)
    assert session.snapshot().timer.status == TimerStatus.EXPIRED
    assert notifier.expired_count == 1


async def test_uncomplete_is_always_allowed(start):
    session = await start(make_template("Legs", [("Squat", regular_sets(1, weight=100, reps=5))]))
    session.complete_set(0, 1)
    session.update_set_weight(0, 1, None)
    session.complete_set(0, 1)
    assert session.snapshot().exercises[0].sets[0].completed_at is None


async def test_timer_passthrough(start, settings, scheduler):
    session = await start(make_template("Legs", [("Squat", regular_sets(2, weight=100, reps=5, rest=60))]))
    session.complete_set(0, 1)

    session.add_timer_time()
    assert session.snapshot().timer.remaining_seconds == 60 + settings.timer_adjust_seconds
    session.subtract_timer_time(20)
    session.pause_timer()
    scheduler.advance(10)
    assert session.snapshot().timer.remaining_seconds == 45
    session.resume_timer()
    session.skip_timer()
    assert session.snapshot().timer.status == TimerStatus.IDLE


# Previous performance


async def test_previous_values_match_by_position_within_type(start, storage):
    storage.seed_previous(
        "Bench Press",
        [
            PreviousSet(set_number=1, set_type=SetType.WARMUP, weight=60, reps=10),
            PreviousSet(set_number=1, weight=100, reps=5),
            PreviousSet(set_number=2, weight=100, reps=4),
        ],
    )
    template = make_template(
        "Push",
        [("Bench Press", sets_of(SetType.WARMUP, 1) + regular_sets(3))],
    )

    session = await start(template)

    sets = session.snapshot().exercises[0].sets
    assert [(s.previous_weight, s.previous_reps) for s in sets] == [(60, 10), (100, 5), (100, 4), (None, None)]
    assert ("get_previous_sets", ("Bench Press", template.id)) in storage.calls


async def test_previous_by_exercise_ignores_template(start, storage, settings):
    settings.previous_lift_source = PreviousLiftSource.BY_EXERCISE
    await start(make_template("Push", [("Bench Press", regular_sets(1))]))
    assert ("get_previous_sets", ("Bench Press", None)) in storage.calls


# Persistence


async def test_writes_reach_storage_in_issue_order(start, storage):
    session = await start()
    session.add_exercise("Squat")
    for weight in (50, 60, 70):
        session.update_set_weight(0, 1, weight)
    await session.flush()

    row_id = session.snapshot().exercises[0].sets[0].row_id
    weights = [arg.weight for name, arg in storage.calls if name == "update_set_log" and arg.id == row_id]
    assert weights == [50, 60, 70]
    assert storage.set_logs[row_id].weight == 70
    names = storage.call_names()
    assert names.index("create_session") < names.index("insert_exercise_log") < names.index("insert_set_log")


async def test_storage_failure_keeps_memory_and_notifies(start, storage):
    session = await start()
    events = collect(session)
    session.add_exercise("Squat")
    storage.fail_on.add("update_set_log")

    session.update_set_weight(0, 1, 100)
    await session.flush()

    assert session.snapshot().exercises[0].sets[0].weight == 100
    assert session.write_failures == 1
    failures = [e for e in events if e.kind == SessionEventKind.PERSISTENCE_FAILED]
    assert len(failures) == 1
    assert "set" in failures[0].message

    storage.fail_on.clear()
    session.update_set_reps(0, 1, 5)
    await session.flush()
    row = storage.set_logs[session.snapshot().exercises[0].sets[0].row_id]
    assert (row.weight, row.reps) == (100, 5)


# Lifecycle


async def test_finish_workout(start, storage, scheduler):
    session = await start(make_template("Legs", [("Squat", regular_sets(3, weight=100, reps=5))]))
    events = collect(session)
    session.complete_set(0, 1)
    victim = session.snapshot().exercises[0].sets[2]
    session.remove_set(0, victim.id)

    snap = await session.finish_workout()

    assert snap.is_terminal
    assert snap.completed_at is not None
    assert snap.timer.status == TimerStatus.IDLE
    assert scheduler.pending == 0
    stored = storage.sessions[session.session_id]
    assert stored.is_completed and stored.completed_at == snap.completed_at
    assert victim.row_id not in storage.set_logs
    assert events[-1].kind == SessionEventKind.FINISHED

    session.add_exercise("Bench Press")
    session.update_set_weight(0, 1, 200)
    assert session.snapshot().exercises == snap.exercises


async def test_cancel_workout_deletes_everything(start, storage, scheduler):
    session = await start(make_template("Legs", [("Squat", regular_sets(2, weight=100, reps=5))]))
    events = collect(session)
    session.complete_set(0, 1)

    await session.cancel_workout()

    assert storage.sessions == {}
    assert storage.exercise_logs == {}
    assert storage.set_logs == {}
    assert scheduler.pending == 0
    assert session.is_terminal
    assert events[-1].kind == SessionEventKind.CANCELLED


async def test_close_stops_timer(start, scheduler):
    session = await start(make_template("Legs", [("Squat", regular_sets(2, weight=100, reps=5))]))
    session.complete_set(0, 1)
    assert scheduler.pending == 1

    await session.close()

    assert scheduler.pending == 0
    assert session.snapshot().timer.status == TimerStatus.IDLE
    assert not session.is_terminal


async def test_resume_restores_in_progress_session(start, storage, settings, scheduler):
    session = await start(make_template("Push", [("Bench Press", sets_of(SetType.WARMUP, 1) + regular_sets(2))]))
    session.add_exercise("Lateral Raise")
    session.update_set_weight(0, 1, 100)
    session.update_set_reps(0, 1, 5)
    session.complete_set(0, 1)
    session.remove_set(0, session.snapshot().exercises[0].sets[2].id)
    await session.close()

    def shape(snapshot):
        return [
            (e.row_id, e.exercise_name, e.order_index, [(s.row_id, s.set_type, s.set_number, s.weight, s.reps, s.completed_at) for s in e.sets])
            for e in snapshot.exercises
        ]

    resumed = await ActiveWorkoutSession.resume(session.session_id, storage, settings, scheduler=scheduler)

    assert resumed is not None
    assert shape(resumed.snapshot()) == shape(session.snapshot())
    assert resumed.snapshot().timer.status == TimerStatus.IDLE
    assert resumed.snapshot().template_id == session.template_id


async def test_resume_finished_or_missing_session(start, storage, settings, scheduler):
    session = await start()
    await session.finish_workout()

    assert await ActiveWorkoutSession.resume(session.session_id, storage, settings, scheduler=scheduler) is None
    assert await ActiveWorkoutSession.resume(uuid.uuid4(), storage, settings, scheduler=scheduler) is None
