"""
Debounced, batched upserts of shift edits.

Edits land in a pending map keyed by shift id (last write wins). A quiet
period after the last enqueue triggers one flush, which sends the whole map
in a single ``batch_upsert_shifts`` call. Only one flush is in flight at a
time. A failed flush puts its snapshot back *under* anything enqueued while
it was in flight and waits for the next enqueue or a manual flush.
"""
from __future__ import annotations
import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from core.config_loader import settings
from .lifecycle import ShiftStatus, coerce_status
from .schema import Shift, ShiftId, ShiftInput
from .store import ScheduleStore, StoreError

logger = logging.getLogger(__name__)


class FlushOutcome(str, Enum):
    flushed = "flushed"
    empty = "empty"
    busy = "busy"       # another flush is in flight
    failed = "failed"


class SyncQueue:
    def __init__(
        self,
        store: ScheduleStore,
        on_flushed: Optional[Callable[[], Awaitable[object]]] = None,
        *,
        on_timer: Optional[Callable[[], Awaitable[object]]] = None,
        debounce: Optional[float] = None,
    ):
        self._store = store
        self._on_flushed = on_flushed
        # runs when the debounce elapses; defaults to a plain flush()
        self._on_timer = on_timer
        self.debounce = settings.SYNC_DEBOUNCE_SECONDS if debounce is None else debounce

        self._pending: dict[ShiftId, ShiftInput] = {}
        self._timer: Optional[asyncio.TimerHandle] = None
        self._timer_task: Optional[asyncio.Task] = None
        self._in_flight = False
        self._idle = asyncio.Event()
        self._idle.set()
        self._closed = False
        self.last_error: Optional[str] = None

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def pending(self) -> dict[ShiftId, ShiftInput]:
        return dict(self._pending)

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    @property
    def is_flushing(self) -> bool:
        return self._in_flight

    @property
    def is_scheduled(self) -> bool:
        return self._timer is not None

    async def wait_idle(self) -> None:
        await self._idle.wait()

    # ---------- mutators ----------

    def enqueue(self, shift: Shift) -> bool:
        if self._closed:
            raise RuntimeError("sync queue is closed")
        status = coerce_status(shift.status)
        if status is not ShiftStatus.open:
            # the grid guard should have stopped this already
            logger.warning(f"Dropping upsert for shift {shift.id}: status is {status.value}")
            return False
        self._pending[shift.id] = ShiftInput.from_shift(shift)
        self._arm()
        return True

    def discard(self, shift_id: ShiftId) -> None:
        self._pending.pop(shift_id, None)
        if not self._pending:
            self._disarm()

    async def flush(self, *, reload: bool = True) -> FlushOutcome:
        if self._closed:
            return FlushOutcome.empty
        if self._in_flight:
            logger.debug("Flush requested while another is in flight; skipping")
            return FlushOutcome.busy
        if not self._pending:
            return FlushOutcome.empty

        self._disarm()
        snapshot = self._pending
        self._pending = {}
        self._in_flight = True
        self._idle.clear()
        self.last_error = None

        try:
            try:
                await self._store.batch_upsert_shifts(list(snapshot.values()))
            except Exception as exc:
                self._pending = {**snapshot, **self._pending}
                self.last_error = str(exc) or "Failed to save shifts"
                if not isinstance(exc, StoreError):
                    raise
                logger.warning(f"Flush of {len(snapshot)} shift(s) failed, kept for retry: {exc}")
                return FlushOutcome.failed

            logger.info(f"Flushed {len(snapshot)} shift upsert(s)")
            if reload and self._on_flushed is not None:
                await self._on_flushed()
        finally:
            self._in_flight = False
            self._idle.set()

        if self._pending and not self._closed:
            self._arm()
        return FlushOutcome.flushed

    def cancel(self) -> None:
        """Stop the debounce timer; pending entries stay."""
        self._disarm()

    async def close(self, *, flush_pending: bool = True) -> FlushOutcome:
        """Tear down: wait for the flush in flight, then flush or drop what is left."""
        self._disarm()
        await self._idle.wait()
        outcome = FlushOutcome.empty
        if flush_pending:
            # a failed final flush leaves its entries in ``pending`` for the caller to report
            outcome = await self.flush(reload=False)
        elif self._pending:
            logger.info(f"Discarding {len(self._pending)} unflushed shift upsert(s)")
            self._pending = {}
        self._closed = True
        return outcome

    # ---------- timer ----------

    def _arm(self) -> None:
        loop = asyncio.get_running_loop()
        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self.debounce, self._fire)

    def _disarm(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self) -> None:
        self._timer = None
        work = self._on_timer() if self._on_timer is not None else self.flush()
        self._timer_task = asyncio.ensure_future(work)
        self._timer_task.add_done_callback(self._timer_done)

    def _timer_done(self, task: asyncio.Task) -> None:
        if self._timer_task is task:
            self._timer_task = None
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Debounced flush crashed: {exc!r}", exc_info=exc)
