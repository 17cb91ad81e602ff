"""The live workout: single authoritative in-memory state for one session.

Every mutation is applied to memory first and returns immediately; the
matching storage write is queued on the session's WriteQueue. Sets live in an
arena keyed by a monotonically increasing id, and each exercise keeps an
ordered list of those ids. Set numbers (1..N within each set type) and
display positions are derived from that order after every structural change.
"""

from __future__ import annotations

import functools
import itertools
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from liftlog.core.constants import MAX_RPE, MIN_RPE
from liftlog.core.enums import PreviousLiftSource, SessionEventKind, SetType, TimerStatus
from liftlog.schemas.session import (
    ExerciseSnapshot,
    PendingRemovalSnapshot,
    SessionEvent,
    SetRef,
    SetSnapshot,
    WorkoutSnapshot,
)
from liftlog.schemas.workout import ExerciseLogRow, PreviousSet, SetLogRow, WorkoutSessionRow
from liftlog.services.ports import LoggingNotifier, Notifier, TrainingSettings, WorkoutStorage
from liftlog.services.rest_timer import RestTimer
from liftlog.services.scheduler import AsyncioScheduler, Cancellable, Scheduler
from liftlog.services.write_queue import WriteQueue

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionEvent], None]
Clock = Callable[[], datetime]


class TemplateNotFoundError(LookupError):
    """Raised when starting a workout from a template that does not exist."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _SetRecord:
    id: int
    row_id: uuid.UUID
    set_type: SetType = SetType.REGULAR
    set_number: int = 1
    position: int = 0
    weight: float | None = None
    reps: int | None = None
    rpe: float | None = None
    rest_seconds: int | None = None
    completed_at: datetime | None = None
    previous: PreviousSet | None = None


@dataclass
class _ExerciseRecord:
    key: int
    row_id: uuid.UUID
    exercise_name: str
    order_index: int
    show_rpe: bool = False
    note: str | None = None
    set_ids: list[int] = field(default_factory=list)
    previous_sets: list[PreviousSet] = field(default_factory=list)


@dataclass
class _PendingRemoval:
    record: _SetRecord
    exercise_key: int
    exercise_index: int
    position: int
    window: Cancellable | None = None


def _mutation(method):
    """Ignore the call (with a log line) once the session is finished, cancelled or closed."""

    @functools.wraps(method)
    def wrapper(self: ActiveWorkoutSession, *args, **kwargs):
        if self._terminal or self._closed:
            logger.info("Ignoring %s on inactive session %s", method.__name__, self.session_id)
            return None
        return method(self, *args, **kwargs)

    return wrapper


class ActiveWorkoutSession:
    """One live workout. Create with start() or resume(), never directly."""

    def __init__(
        self,
        session: WorkoutSessionRow,
        storage: WorkoutStorage,
        settings: TrainingSettings,
        scheduler: Scheduler | None = None,
        notifier: Notifier | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._session = session
        self._storage = storage
        self._settings = settings
        self._scheduler = scheduler or AsyncioScheduler()
        self._clock = clock or _utcnow
        self._ids = itertools.count(1)
        self._sets: dict[int, _SetRecord] = {}
        self._exercises: list[_ExerciseRecord] = []
        self._pending: _PendingRemoval | None = None
        self._listeners: list[SessionListener] = []
        self._terminal = False
        self._closed = False
        self._queue = WriteQueue(name=f"session:{session.id}", on_error=self._on_write_error)
        self._timer = RestTimer(self._scheduler, notifier or LoggingNotifier())
        self._timer.subscribe(lambda _state: self._emit(SessionEventKind.STATE_CHANGED))

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    async def start(
        cls,
        storage: WorkoutStorage,
        settings: TrainingSettings,
        template_id: uuid.UUID | None = None,
        scheduler: Scheduler | None = None,
        notifier: Notifier | None = None,
        clock: Clock | None = None,
    ) -> ActiveWorkoutSession:
        """Begin a new workout, empty or expanded from a template."""
        template = None
        if template_id is not None:
            template = await storage.get_template(template_id)
            if template is None:
                raise TemplateNotFoundError(f"Template {template_id} not found")

        now = (clock or _utcnow)()
        row = WorkoutSessionRow(
            id=uuid.uuid4(),
            template_id=template.id if template is not None else None,
            template_name=template.name if template is not None else None,
            started_at=now,
        )
        session = cls(row, storage, settings, scheduler=scheduler, notifier=notifier, clock=clock)
        session._queue.submit("create session", functools.partial(storage.create_session, row))

        if template is not None:
            for template_exercise in sorted(template.exercises, key=lambda e: e.order_index):
                session._expand_template_exercise(template_exercise)

        logger.info(
            "Started workout %s (%s) with %d exercises",
            row.id,
            row.template_name or "empty",
            len(session._exercises),
        )
        await session._load_all_previous()
        return session

    @classmethod
    async def resume(
        cls,
        session_id: uuid.UUID,
        storage: WorkoutStorage,
        settings: TrainingSettings,
        scheduler: Scheduler | None = None,
        notifier: Notifier | None = None,
        clock: Clock | None = None,
    ) -> ActiveWorkoutSession | None:
        """Rebuild an in-progress workout from storage after a restart.

        Returns None when the session is missing or already completed. Rest
        timer state is never persisted, so the timer starts Idle.
        """
        details = await storage.get_session(session_id)
        if details is None or details.is_completed:
            return None

        row = WorkoutSessionRow.model_validate(details.model_dump(exclude={"exercises"}))
        session = cls(row, storage, settings, scheduler=scheduler, notifier=notifier, clock=clock)
        for log in sorted(details.exercises, key=lambda e: e.order_index):
            exercise = _ExerciseRecord(
                key=next(session._ids),
                row_id=log.id,
                exercise_name=log.exercise_name,
                order_index=log.order_index,
                show_rpe=log.show_rpe,
                note=log.note,
            )
            session._exercises.append(exercise)
            for set_row in sorted(log.sets, key=lambda s: (s.position, s.set_number)):
                record = _SetRecord(
                    id=next(session._ids),
                    row_id=set_row.id,
                    set_type=set_row.set_type,
                    set_number=set_row.set_number,
                    position=set_row.position,
                    weight=set_row.weight,
                    reps=set_row.reps,
                    rpe=set_row.rpe,
                    rest_seconds=set_row.rest_seconds,
                    completed_at=set_row.completed_at,
                )
                session._sets[record.id] = record
                exercise.set_ids.append(record.id)
            session._renumber_and_save(exercise)
        session._reindex_exercises()

        logger.info("Resumed workout %s with %d exercises", row.id, len(session._exercises))
        await session._load_all_previous()
        return session

    def _expand_template_exercise(self, template_exercise: Any) -> None:
        exercise = self._new_exercise(
            template_exercise.exercise_name,
            show_rpe=template_exercise.show_rpe,
            note=template_exercise.note,
        )
        template_sets = sorted(template_exercise.sets, key=lambda s: s.set_number)
        if not template_sets:
            self._seed_default_sets(exercise)
            return
        for template_set in template_sets:
            rest = template_set.rest_seconds
            if rest is None:
                rest = template_exercise.rest_seconds
            if rest is None:
                rest = self._settings.default_rest_seconds
            self._new_set(
                exercise,
                set_type=template_set.set_type,
                weight=template_set.target_weight,
                reps=template_set.target_reps,
                rest_seconds=rest,
            )
        self._renumber(exercise)

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def session_id(self) -> uuid.UUID:
        return self._session.id

    @property
    def template_id(self) -> uuid.UUID | None:
        return self._session.template_id

    @property
    def is_terminal(self) -> bool:
        return self._terminal

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def timer(self) -> RestTimer:
        return self._timer

    @property
    def write_failures(self) -> int:
        return self._queue.failures

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register for SessionEvents; returns a function that unsubscribes."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> WorkoutSnapshot:
        """Immutable view of the whole session as of now."""
        pending = None
        if self._pending is not None:
            pending = PendingRemovalSnapshot(
                exercise_index=self._pending.exercise_index,
                position=self._pending.position,
                set=self._set_snapshot(self._pending.record),
            )
        return WorkoutSnapshot(
            session_id=self._session.id,
            template_id=self._session.template_id,
            template_name=self._session.template_name,
            started_at=self._session.started_at,
            completed_at=self._session.completed_at,
            exercises=tuple(self._exercise_snapshot(e) for e in self._exercises),
            timer=self._timer.state,
            pending_removal=pending,
            is_terminal=self._terminal,
        )

    def _set_snapshot(self, record: _SetRecord) -> SetSnapshot:
        previous = record.previous
        return SetSnapshot(
            id=record.id,
            row_id=record.row_id,
            set_number=record.set_number,
            set_type=record.set_type,
            weight=record.weight,
            reps=record.reps,
            rpe=record.rpe,
            rest_seconds=record.rest_seconds,
            completed_at=record.completed_at,
            previous_weight=previous.weight if previous else None,
            previous_reps=previous.reps if previous else None,
            previous_rpe=previous.rpe if previous else None,
        )

    def _exercise_snapshot(self, exercise: _ExerciseRecord) -> ExerciseSnapshot:
        return ExerciseSnapshot(
            key=exercise.key,
            row_id=exercise.row_id,
            exercise_name=exercise.exercise_name,
            order_index=exercise.order_index,
            show_rpe=exercise.show_rpe,
            note=exercise.note,
            sets=tuple(self._set_snapshot(self._sets[i]) for i in exercise.set_ids),
        )

    def _emit(self, kind: SessionEventKind, message: str | None = None) -> None:
        if not self._listeners:
            return
        event = SessionEvent(kind=kind, snapshot=self.snapshot(), message=message)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Session listener failed on %s", kind.value)

    def _on_write_error(self, description: str, exc: Exception) -> None:
        self._emit(SessionEventKind.PERSISTENCE_FAILED, f"Could not save ({description}): {exc}")

    # ------------------------------------------------------------------
    # Row building and persistence
    # ------------------------------------------------------------------

    def _exercise_row(self, exercise: _ExerciseRecord) -> ExerciseLogRow:
        return ExerciseLogRow(
            id=exercise.row_id,
            session_id=self._session.id,
            exercise_name=exercise.exercise_name,
            order_index=exercise.order_index,
            show_rpe=exercise.show_rpe,
            note=exercise.note,
        )

    def _set_row(self, exercise: _ExerciseRecord, record: _SetRecord) -> SetLogRow:
        return SetLogRow(
            id=record.row_id,
            exercise_log_id=exercise.row_id,
            position=record.position,
            set_number=record.set_number,
            set_type=record.set_type,
            weight=record.weight,
            reps=record.reps,
            rpe=record.rpe,
            rest_seconds=record.rest_seconds,
            completed_at=record.completed_at,
        )

    def _save_exercise(self, exercise: _ExerciseRecord, insert: bool = False) -> None:
        row = self._exercise_row(exercise)
        operation = self._storage.insert_exercise_log if insert else self._storage.update_exercise_log
        verb = "insert" if insert else "update"
        self._queue.submit(f"{verb} exercise {row.exercise_name}", functools.partial(operation, row))

    def _save_set(self, exercise: _ExerciseRecord, record: _SetRecord, insert: bool = False) -> None:
        row = self._set_row(exercise, record)
        operation = self._storage.insert_set_log if insert else self._storage.update_set_log
        verb = "insert" if insert else "update"
        self._queue.submit(
            f"{verb} set {exercise.exercise_name} {row.set_type.value} #{row.set_number}",
            functools.partial(operation, row),
        )

    def _save_session(self) -> None:
        row = self._session.model_copy()
        self._queue.submit("update session", functools.partial(self._storage.update_session, row))

    async def flush(self) -> None:
        """Wait until every storage write queued so far has been attempted."""
        await self._queue.drain()

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def _renumber(self, exercise: _ExerciseRecord) -> list[_SetRecord]:
        """Recompute positions, per-type numbers and previous values.

        Returns the records whose stored position or number changed.
        """
        previous_by_type: dict[SetType, list[PreviousSet]] = {}
        for prev in exercise.previous_sets:
            previous_by_type.setdefault(prev.set_type, []).append(prev)

        counters: dict[SetType, int] = {}
        changed = []
        for position, set_id in enumerate(exercise.set_ids):
            record = self._sets[set_id]
            number = counters.get(record.set_type, 0) + 1
            counters[record.set_type] = number
            if record.set_number != number or record.position != position:
                record.set_number = number
                record.position = position
                changed.append(record)
            candidates = previous_by_type.get(record.set_type, [])
            record.previous = candidates[number - 1] if number <= len(candidates) else None
        return changed

    def _renumber_and_save(self, exercise: _ExerciseRecord) -> None:
        for record in self._renumber(exercise):
            self._save_set(exercise, record)

    def _reindex_exercises(self) -> None:
        for index, exercise in enumerate(self._exercises):
            if exercise.order_index != index:
                exercise.order_index = index
                self._save_exercise(exercise)

    def _previous_template_filter(self) -> uuid.UUID | None:
        if self._settings.previous_lift_source == PreviousLiftSource.BY_TEMPLATE:
            return self._session.template_id
        return None

    async def _load_previous(self, exercise: _ExerciseRecord) -> None:
        try:
            previous = await self._storage.get_previous_sets(
                exercise.exercise_name,
                self._session.id,
                template_id=self._previous_template_filter(),
            )
        except Exception:
            logger.warning("Could not load previous sets for %s", exercise.exercise_name, exc_info=True)
            return
        if exercise not in self._exercises:
            return
        exercise.previous_sets = list(previous)
        self._renumber(exercise)
        self._emit(SessionEventKind.STATE_CHANGED)

    async def _load_all_previous(self) -> None:
        for exercise in list(self._exercises):
            await self._load_previous(exercise)

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def _exercise_at(self, index: int) -> _ExerciseRecord | None:
        if 0 <= index < len(self._exercises):
            return self._exercises[index]
        logger.info("No exercise at index %s", index)
        return None

    def _exercise_by_key(self, key: int) -> _ExerciseRecord | None:
        return next((e for e in self._exercises if e.key == key), None)

    def _find_set(
        self, exercise_index: int, set_number: int, set_type: SetType
    ) -> tuple[_ExerciseRecord, _SetRecord] | None:
        exercise = self._exercise_at(exercise_index)
        if exercise is None:
            return None
        for set_id in exercise.set_ids:
            record = self._sets[set_id]
            if record.set_type == set_type and record.set_number == set_number:
                return exercise, record
        logger.info("No %s set #%s in exercise %s", set_type.value, set_number, exercise.exercise_name)
        return None

    def _new_exercise(self, name: str, show_rpe: bool | None = None, note: str | None = None) -> _ExerciseRecord:
        exercise = _ExerciseRecord(
            key=next(self._ids),
            row_id=uuid.uuid4(),
            exercise_name=name,
            order_index=len(self._exercises),
            show_rpe=self._settings.show_rpe_by_default if show_rpe is None else show_rpe,
            note=note,
        )
        self._exercises.append(exercise)
        self._save_exercise(exercise, insert=True)
        return exercise

    def _new_set(self, exercise: _ExerciseRecord, **values: Any) -> _SetRecord:
        record = _SetRecord(id=next(self._ids), row_id=uuid.uuid4(), position=len(exercise.set_ids), **values)
        record.set_number = sum(1 for i in exercise.set_ids if self._sets[i].set_type == record.set_type) + 1
        self._sets[record.id] = record
        exercise.set_ids.append(record.id)
        self._save_set(exercise, record, insert=True)
        return record

    def _seed_default_sets(self, exercise: _ExerciseRecord) -> None:
        for _ in range(self._settings.default_sets_per_exercise):
            self._new_set(exercise, rest_seconds=self._settings.default_rest_seconds)

    # ------------------------------------------------------------------
    # Exercises
    # ------------------------------------------------------------------

    @_mutation
    def add_exercise(self, exercise_ref: Any) -> None:
        """Append an exercise by name (or anything with a ``name``); duplicates are ignored."""
        name = exercise_ref if isinstance(exercise_ref, str) else getattr(exercise_ref, "name", None)
        if not name or not name.strip():
            logger.info("Ignoring exercise without a name")
            return
        name = name.strip()
        if any(e.exercise_name == name for e in self._exercises):
            logger.debug("%s is already in the workout", name)
            return
        exercise = self._new_exercise(name)
        self._seed_default_sets(exercise)
        self._queue.submit(f"load previous sets {name}", functools.partial(self._load_previous, exercise))
        logger.debug("Added exercise %s at %d", name, exercise.order_index)
        self._emit(SessionEventKind.STATE_CHANGED)

    @_mutation
    def remove_exercise(self, index: int) -> None:
        """Drop the exercise and its sets; later exercises move up. Not undoable."""
        exercise = self._exercise_at(index)
        if exercise is None:
            return
        if self._pending is not None and self._pending.exercise_key == exercise.key:
            self._discard_pending()
        elif self._pending is not None and self._pending.exercise_index > index:
            self._pending.exercise_index -= 1
        del self._exercises[index]
        for set_id in exercise.set_ids:
            del self._sets[set_id]
        self._queue.submit(
            f"delete exercise {exercise.exercise_name}",
            functools.partial(self._storage.delete_exercise_log, exercise.row_id),
        )
        self._reindex_exercises()
        logger.debug("Removed exercise %s", exercise.exercise_name)
        self._emit(SessionEventKind.STATE_CHANGED)

    @_mutation
    def reorder_exercises(self, from_index: int, to_index: int) -> None:
        if from_index == to_index:
            return
        if not (0 <= from_index < len(self._exercises) and 0 <= to_index < len(self._exercises)):
            logger.info("Ignoring reorder %s -> %s", from_index, to_index)
            return
        exercise = self._exercises.pop(from_index)
        self._exercises.insert(to_index, exercise)
        self._reindex_exercises()
        if self._pending is not None:
            owner = self._exercise_by_key(self._pending.exercise_key)
            if owner is not None:
                self._pending.exercise_index = owner.order_index
        self._emit(SessionEventKind.STATE_CHANGED)

    @_mutation
    def update_exercise_note(self, index: int, note: str | None) -> None:
        exercise = self._exercise_at(index)
        if exercise is None:
            return
        exercise.note = note.strip() if note and note.strip() else None
        self._save_exercise(exercise)
        self._emit(SessionEventKind.STATE_CHANGED)

    @_mutation
    def toggle_rpe(self, index: int) -> None:
        """Show or hide the RPE column for an exercise."""
        exercise = self._exercise_at(index)
        if exercise is None:
            return
        exercise.show_rpe = not exercise.show_rpe
        self._save_exercise(exercise)
        self._emit(SessionEventKind.STATE_CHANGED)

    # ------------------------------------------------------------------
    # Sets
    # ------------------------------------------------------------------

    @_mutation
    def add_set(self, exercise_index: int) -> None:
        """Append a regular set carrying forward weight, reps and rest of the last set."""
        exercise = self._exercise_at(exercise_index)
        if exercise is None:
            return
        values: dict[str, Any] = {"rest_seconds": self._settings.default_rest_seconds}
        if exercise.set_ids:
            last = self._sets[exercise.set_ids[-1]]
            values = {"weight": last.weight, "reps": last.reps, "rest_seconds": last.rest_seconds}
        record = self._new_set(exercise, **values)
        self._renumber(exercise)
        logger.debug("Added set #%d to %s", record.set_number, exercise.exercise_name)
        self._emit(SessionEventKind.STATE_CHANGED)

    @_mutation
    def remove_set(self, exercise_index: int, set_id: int) -> None:
        """Remove a set by its stable id and offer a single level of undo.

        A removal still pending is confirmed (deleted from storage) first.
        """
        exercise = self._exercise_at(exercise_index)
        if exercise is None:
            return
        if set_id not in exercise.set_ids:
            logger.info("Set %s is not part of %s", set_id, exercise.exercise_name)
            return
        if self._pending is not None:
            self._confirm_pending()

        position = exercise.set_ids.index(set_id)
        exercise.set_ids.pop(position)
        record = self._sets.pop(set_id)
        self._pending = _PendingRemoval(
            record=record,
            exercise_key=exercise.key,
            exercise_index=exercise_index,
            position=position,
        )
        self._pending.window = self._scheduler.call_later(
            self._settings.undo_window_seconds, self._on_undo_window_elapsed
        )
        self._renumber_and_save(exercise)
        logger.debug("Removed %s set from %s", record.set_type.value, exercise.exercise_name)
        self._emit(SessionEventKind.SET_REMOVED, f"{exercise.exercise_name} set removed")

    @_mutation
    def undo_set_removal(self) -> None:
        """Put the last removed set back where it was."""
        pending = self._pending
        if pending is None:
            return
        self._cancel_undo_window()
        self._pending = None
        exercise = self._exercise_by_key(pending.exercise_key)
        if exercise is None:
            return
        record = pending.record
        self._sets[record.id] = record
        exercise.set_ids.insert(min(pending.position, len(exercise.set_ids)), record.id)
        for changed in self._renumber(exercise):
            if changed is not record:
                self._save_set(exercise, changed)
        self._save_set(exercise, record)
        logger.debug("Restored set in %s", exercise.exercise_name)
        self._emit(SessionEventKind.STATE_CHANGED)

    @_mutation
    def confirm_set_removal(self) -> None:
        """Give up the chance to undo and delete the removed set from storage."""
        if self._pending is None:
            return
        self._confirm_pending()
        self._emit(SessionEventKind.UNDO_DISMISSED)

    def _on_undo_window_elapsed(self) -> None:
        if self._pending is None or self._terminal or self._closed:
            return
        self._pending.window = None
        self._confirm_pending()
        self._emit(SessionEventKind.UNDO_DISMISSED)

    def _cancel_undo_window(self) -> None:
        if self._pending is not None and self._pending.window is not None:
            self._pending.window.cancel()
            self._pending.window = None

    def _confirm_pending(self) -> None:
        pending = self._pending
        if pending is None:
            return
        self._cancel_undo_window()
        self._pending = None
        self._queue.submit(
            "delete removed set",
            functools.partial(self._storage.delete_set_log, pending.record.row_id),
        )

    def _discard_pending(self) -> None:
        """Forget the pending removal; its row goes with its exercise."""
        self._cancel_undo_window()
        self._pending = None

    def _edit_set(self, exercise_index: int, set_number: int, set_type: SetType, **changes: Any) -> None:
        found = self._find_set(exercise_index, set_number, set_type)
        if found is None:
            return
        exercise, record = found
        for name, value in changes.items():
            setattr(record, name, value)
        self._save_set(exercise, record)
        self._emit(SessionEventKind.STATE_CHANGED)

    @_mutation
    def update_set_weight(
        self, exercise_index: int, set_number: int, weight: float | None, *, set_type: SetType = SetType.REGULAR
    ) -> None:
        if weight is not None and weight < 0:
            logger.info("Rejecting negative weight %s", weight)
            return
        self._edit_set(exercise_index, set_number, set_type, weight=weight)

    @_mutation
    def update_set_reps(
        self, exercise_index: int, set_number: int, reps: int | None, *, set_type: SetType = SetType.REGULAR
    ) -> None:
        if reps is not None and reps < 0:
            logger.info("Rejecting negative reps %s", reps)
            return
        self._edit_set(exercise_index, set_number, set_type, reps=reps)

    @_mutation
    def update_set_rest(
        self, exercise_index: int, set_number: int, rest_seconds: int | None, *, set_type: SetType = SetType.REGULAR
    ) -> None:
        if rest_seconds is not None and rest_seconds < 0:
            logger.info("Rejecting negative rest %s", rest_seconds)
            return
        self._edit_set(exercise_index, set_number, set_type, rest_seconds=rest_seconds)

    @_mutation
    def update_set_rpe(
        self, exercise_index: int, set_number: int, rpe: float | None, *, set_type: SetType = SetType.REGULAR
    ) -> None:
        if rpe is not None and not MIN_RPE <= rpe <= MAX_RPE:
            logger.info("Rejecting RPE %s outside [%s, %s]", rpe, MIN_RPE, MAX_RPE)
            return
        self._edit_set(exercise_index, set_number, set_type, rpe=rpe)

    @_mutation
    def update_set_type(
        self, exercise_index: int, set_number: int, new_type: SetType, *, set_type: SetType = SetType.REGULAR
    ) -> None:
        """Retag a set; both the old and new type are renumbered 1..N."""
        found = self._find_set(exercise_index, set_number, set_type)
        if found is None:
            return
        exercise, record = found
        new_type = SetType(new_type)
        if record.set_type == new_type:
            return
        record.set_type = new_type
        changed = self._renumber(exercise)
        if record not in changed:
            self._save_set(exercise, record)
        for changed_record in changed:
            self._save_set(exercise, changed_record)
        self._emit(SessionEventKind.STATE_CHANGED)

    def cycle_set_type(self, exercise_index: int, set_number: int, *, set_type: SetType = SetType.REGULAR) -> None:
        """REGULAR -> WARMUP -> DROP -> REGULAR."""
        self.update_set_type(exercise_index, set_number, SetType(set_type).next(), set_type=set_type)

    @_mutation
    def complete_set(self, exercise_index: int, set_number: int, *, set_type: SetType = SetType.REGULAR) -> None:
        """Toggle completion of a set.

        Completing needs weight and reps, taken from the set or, when blank,
        from its previous performance. Completing any set but the last one of
        the workout starts the rest timer for that set.
        """
        found = self._find_set(exercise_index, set_number, set_type)
        if found is None:
            return
        exercise, record = found

        if record.completed_at is not None:
            record.completed_at = None
            self._save_set(exercise, record)
            self._emit(SessionEventKind.STATE_CHANGED)
            return

        previous = record.previous
        weight = record.weight if record.weight is not None else (previous.weight if previous else None)
        reps = record.reps if record.reps is not None else (previous.reps if previous else None)
        if weight is None or reps is None:
            logger.info("Cannot complete %s set #%s without weight and reps", exercise.exercise_name, set_number)
            return

        record.weight = weight
        record.reps = reps
        if record.rpe is None and previous is not None and previous.rpe is not None:
            record.rpe = previous.rpe
        record.completed_at = self._clock()
        self._save_set(exercise, record)

        if not self._is_last_set(exercise, record):
            rest = record.rest_seconds if record.rest_seconds is not None else self._settings.default_rest_seconds
            self._timer.start(rest, SetRef(exercise_key=exercise.key, set_id=record.id))
        self._emit(SessionEventKind.STATE_CHANGED)

    def _is_last_set(self, exercise: _ExerciseRecord, record: _SetRecord) -> bool:
        """True when record is the final set of the workout; trailing exercises without sets are skipped."""
        for candidate in reversed(self._exercises):
            if candidate.set_ids:
                return candidate is exercise and candidate.set_ids[-1] == record.id
        return False

    # ------------------------------------------------------------------
    # Rest timer passthrough
    # ------------------------------------------------------------------

    @_mutation
    def pause_timer(self) -> None:
        self._timer.pause()

    @_mutation
    def resume_timer(self) -> None:
        self._timer.resume()

    @_mutation
    def skip_timer(self) -> None:
        self._timer.skip()

    @_mutation
    def add_timer_time(self, delta: int | None = None) -> None:
        self._timer.add_time(delta if delta is not None else self._settings.timer_adjust_seconds)

    @_mutation
    def subtract_timer_time(self, delta: int | None = None) -> None:
        self._timer.subtract_time(delta if delta is not None else self._settings.timer_adjust_seconds)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def finish_workout(self) -> WorkoutSnapshot:
        """Stamp completion, persist, stop the timer and make the session read-only."""
        if self._terminal or self._closed:
            logger.info("Workout %s is no longer live", self.session_id)
            return self.snapshot()
        self._confirm_pending()
        now = self._clock()
        self._session = self._session.model_copy(update={"completed_at": now, "is_completed": True})
        self._save_session()
        self._terminal = True
        self._timer.close()
        await self._queue.close()
        logger.info("Finished workout %s", self.session_id)
        self._emit(SessionEventKind.FINISHED)
        return self.snapshot()

    async def cancel_workout(self) -> None:
        """Hard delete the session with every exercise and set row. No undo."""
        if self._terminal or self._closed:
            logger.info("Workout %s is no longer live", self.session_id)
            return
        self._discard_pending()
        self._terminal = True
        self._timer.close()
        self._queue.submit("delete session", functools.partial(self._storage.delete_session, self._session.id))
        await self._queue.close()
        logger.info("Cancelled workout %s", self.session_id)
        self._emit(SessionEventKind.CANCELLED)

    async def close(self) -> None:
        """Tear down without finishing; the workout stays resumable."""
        if self._closed:
            return
        self._confirm_pending()
        self._closed = True
        self._timer.close()
        await self._queue.close()
        logger.debug("Closed session %s", self.session_id)

    @property
    def timer_status(self) -> TimerStatus:
        return self._timer.status
