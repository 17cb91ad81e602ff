"""
In-memory fakes for the engine's collaborators.

Each fake implements the same Protocol as the production class it replaces:

- ManualScheduler: Scheduler driven by advance() instead of wall time
- RecordingNotifier: Notifier that counts expiry notifications
- FakeWorkoutStorage: WorkoutStorage over dicts, with call log and failure injection
- make_template / regular_sets / sets_of: template-shaped test data
"""
from tests.fakes.notifier import RecordingNotifier
from tests.fakes.scheduler import ManualScheduler
from tests.fakes.storage import FakeWorkoutStorage
from tests.fakes.templates import make_template, regular_sets, sets_of

__all__ = [
    "FakeWorkoutStorage",
    "ManualScheduler",
    "RecordingNotifier",
    "make_template",
    "regular_sets",
    "sets_of",
]
