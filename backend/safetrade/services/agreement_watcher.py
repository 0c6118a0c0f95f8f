"""
Counterpart agreement watcher.

WHAT: Polling subscription to the shared deal agreement
WHY: A bilateral wizard waits for the other party without knowing the transport
HOW: One asyncio task fetching on an interval, pushing snapshots to a listener
"""

import asyncio
import contextlib

from ..core.config import settings
from ..utils.logger import get_logger
from ..wizard.collaborators import (
    AgreementListener,
    AgreementSource,
    CollaboratorError,
    ErrorListener,
    WatchFactory,
)

logger = get_logger(__name__)

POLL_FAILED_MESSAGE = "Could not check the other party's agreement. Retrying..."


class AgreementWatcher:
    """
    Poll the deal agreement until both parties have agreed.

    The listener receives every fetched snapshot; polling ends on its own
    once a snapshot reports both sides agreed, or when stop() is called.
    Failed polls are reported to on_error and polling continues.
    """

    def __init__(
        self,
        source: AgreementSource,
        conversation_id: str,
        user_id: str,
        on_update: AgreementListener,
        *,
        on_error: ErrorListener | None = None,
        interval: float | None = None,
    ):
        self.source = source
        self.conversation_id = conversation_id
        self.user_id = user_id
        self.on_update = on_update
        self.on_error = on_error
        self.interval = settings.AGREEMENT_POLL_INTERVAL if interval is None else interval
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._task is None:
            self._stop_event.clear()
            self._task = asyncio.create_task(self._run())
            logger.debug(f"Watching counterpart agreement for {self.conversation_id}")

    async def stop(self) -> None:
        self._stop_event.set()
        task, self._task = self._task, None
        # Stopped from inside our own listener: the loop exits on its next check
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def poll_once(self) -> bool:
        """
        Fetch once and notify the listener.

        Returns:
            True when both parties have agreed
        """
        lookup = await self.source.fetch(self.conversation_id, self.user_id)
        snapshot = lookup.deal_agreement
        if snapshot is None:
            return False
        await self.on_update(snapshot)
        return snapshot.both_agreed

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                if await self.poll_once():
                    logger.info(f"Both parties agreed on {self.conversation_id}")
                    break
            except CollaboratorError as e:
                logger.warning(f"Counterpart poll failed for {self.conversation_id}: {e}")
                if self.on_error is not None:
                    await self.on_error(str(e))
            except Exception as e:
                logger.warning(f"Unexpected counterpart poll failure for {self.conversation_id}: {e!r}")
                if self.on_error is not None:
                    await self.on_error(POLL_FAILED_MESSAGE)

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                continue


def polling_watch_factory(
    source: AgreementSource,
    conversation_id: str,
    user_id: str,
    interval: float | None = None,
) -> WatchFactory:
    """Build the watch_factory an AgreementWizard uses to follow its counterpart."""

    def factory(on_update: AgreementListener, on_error: ErrorListener) -> AgreementWatcher:
        return AgreementWatcher(
            source,
            conversation_id,
            user_id,
            on_update,
            on_error=on_error,
            interval=interval,
        )

    return factory
