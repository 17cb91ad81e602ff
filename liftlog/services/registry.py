"""Holds the one live workout of the process.

A single active workout is the product invariant; starting a second one while
the first is live is refused.
"""

from __future__ import annotations

import asyncio
import logging
import uuid

from liftlog.services.active_session import ActiveWorkoutSession
from liftlog.services.ports import Notifier, TrainingSettings, WorkoutStorage
from liftlog.services.scheduler import Scheduler

logger = logging.getLogger(__name__)


class WorkoutAlreadyActiveError(RuntimeError):
    def __init__(self, session_id: uuid.UUID) -> None:
        super().__init__(f"Workout {session_id} is already in progress")
        self.session_id = session_id


class SessionRegistry:
    def __init__(
        self,
        storage: WorkoutStorage,
        settings: TrainingSettings,
        scheduler: Scheduler | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.storage = storage
        self.settings = settings
        self._scheduler = scheduler
        self._notifier = notifier
        self._active: ActiveWorkoutSession | None = None
        self._start_lock = asyncio.Lock()

    @property
    def active(self) -> ActiveWorkoutSession | None:
        """The live session, or None once it has finished, been cancelled or closed."""
        session = self._active
        if session is not None and (session.is_terminal or session.is_closed):
            self._active = None
            return None
        return session

    async def start(self, template_id: uuid.UUID | None = None) -> ActiveWorkoutSession:
        """Start the live workout; overlapping calls are serialized so only one can win."""
        async with self._start_lock:
            if self.active is not None:
                raise WorkoutAlreadyActiveError(self.active.session_id)
            self._active = await ActiveWorkoutSession.start(
                self.storage,
                self.settings,
                template_id=template_id,
                scheduler=self._scheduler,
                notifier=self._notifier,
            )
            return self._active

    async def recover(self) -> ActiveWorkoutSession | None:
        """Resume the most recent unfinished workout left behind by a previous run."""
        if self.active is not None:
            return self.active
        get_active_session_id = getattr(self.storage, "get_active_session_id", None)
        if get_active_session_id is None:
            return None
        session_id = await get_active_session_id()
        if session_id is None:
            return None
        self._active = await ActiveWorkoutSession.resume(
            session_id,
            self.storage,
            self.settings,
            scheduler=self._scheduler,
            notifier=self._notifier,
        )
        if self._active is not None:
            logger.info("Recovered unfinished workout %s", session_id)
        return self._active

    async def close(self) -> None:
        """Tear down the live session (process exit); it stays resumable."""
        if self._active is not None:
            await self._active.close()
            self._active = None
