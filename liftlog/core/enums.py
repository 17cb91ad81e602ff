"""Shared enums for models, engine and API."""

from enum import Enum


class SetType(str, Enum):
    """How a set counts toward volume. Each type keeps its own 1..N numbering."""

    REGULAR = "regular"  # Working set (shows number)
    WARMUP = "warmup"  # Shows "W"
    DROP = "drop"  # Shows "D"

    def next(self) -> "SetType":
        """Cycle REGULAR -> WARMUP -> DROP -> REGULAR."""
        order = list(SetType)
        return order[(order.index(self) + 1) % len(order)]


class TimerStatus(str, Enum):
    """Rest timer run state."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    EXPIRED = "expired"  # Reached zero; stays until skip/dismiss or a new start


class PreviousLiftSource(str, Enum):
    """Where "previous performance" values for a live set come from."""

    BY_TEMPLATE = "by_template"  # Last completed session of the same template
    BY_EXERCISE = "by_exercise"  # Last completed session containing the exercise


class SessionEventKind(str, Enum):
    """Notifications a live session sends to its subscribers."""

    STATE_CHANGED = "state_changed"
    SET_REMOVED = "set_removed"  # Undo is available
    UNDO_DISMISSED = "undo_dismissed"
    PERSISTENCE_FAILED = "persistence_failed"
    FINISHED = "finished"
    CANCELLED = "cancelled"
