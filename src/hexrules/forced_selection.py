import logging
import time
from concurrent.futures import Future
from enum import Enum
from typing import Callable, FrozenSet, Iterable, Optional

from .hex_utils import HexCoord

logger = logging.getLogger(__name__)


class SelectionState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class ForcedSelectionController:
    """
    Takes over input until the player picks one cell from a given set.

    At most one session is active at a time. begin() hands back a Future that
    is fulfilled exactly once: with the chosen cell on submission, or with
    None on cancellation or timeout. Terminal states are momentary: the
    controller records them in last_outcome and returns to IDLE before the
    Future's done-callbacks run, so a callback may begin the next session.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None,
                 on_change: Optional[Callable[[], None]] = None):
        self.clock = clock or _monotonic_ms
        self.on_change = on_change
        self.state = SelectionState.IDLE
        self.last_outcome: Optional[SelectionState] = None

        self.target_cells: FrozenSet[HexCoord] = frozenset()
        self.prompt: str = ""
        self.cancelable = False
        self.timeout_ms: Optional[float] = None
        self._started_at = 0.0
        self._on_selection: Optional[Callable[[HexCoord], None]] = None
        self._on_cancel: Optional[Callable[[], None]] = None
        self._pending: Optional[Future] = None

    @property
    def is_active(self) -> bool:
        return self.state is SelectionState.ACTIVE

    @property
    def display_prompt(self) -> str:
        if self.is_active and self.cancelable:
            return f"{self.prompt} (Press ESC to cancel)"
        return self.prompt

    def begin(
        self,
        target_cells: Iterable[HexCoord],
        prompt: str,
        cancelable: bool = True,
        timeout_ms: Optional[float] = None,
        on_selection: Optional[Callable[[HexCoord], None]] = None,
        on_cancel: Optional[Callable[[], None]] = None
    ) -> Optional[Future]:
        """Starts a session. Returns None, leaving the active session untouched, when busy."""
        if self.is_active:
            logger.warning("Already in forced selection mode; ignoring request '%s'.", prompt)
            return None

        self.state = SelectionState.ACTIVE
        self.target_cells = frozenset(target_cells)
        self.prompt = prompt
        self.cancelable = cancelable
        self.timeout_ms = timeout_ms
        self._started_at = self.clock()
        self._on_selection = on_selection
        self._on_cancel = on_cancel
        self._pending = Future()
        self._pending.set_running_or_notify_cancel()

        logger.info("Forced selection started: %s (%d targets)", prompt, len(self.target_cells))
        self._notify()
        return self._pending

    def submit(self, cell: HexCoord) -> bool:
        """Offers a cell. Returns True when it resolved the session."""
        if not self.is_active:
            logger.error("submit(%r) called with no active forced selection.", cell)
            return False
        if cell not in self.target_cells:
            return False

        callback = self._on_selection
        try:
            if callback:
                callback(cell)
        except Exception as e:
            logger.exception("Selection callback failed for %r", cell)
            self._finish(SelectionState.RESOLVED, exception=e)
            return True

        self._finish(SelectionState.RESOLVED, result=cell)
        return True

    def cancel(self) -> bool:
        """Cancels a cancelable session. Returns True when it ended the session."""
        if not self.is_active:
            logger.error("cancel() called with no active forced selection.")
            return False
        if not self.cancelable:
            logger.info("Forced selection '%s' cannot be cancelled.", self.prompt)
            return False
        return self._abort(SelectionState.CANCELLED)

    def tick(self, now_ms: Optional[float] = None) -> bool:
        """Expires the active session if its timeout has elapsed. Returns True when it did."""
        if not self.is_active or self.timeout_ms is None:
            return False
        now = self.clock() if now_ms is None else now_ms
        if now - self._started_at < self.timeout_ms:
            return False
        if not self.cancelable:
            # Must be resolved by a submission
            return False
        logger.warning("Forced selection '%s' timed out after %d ms", self.prompt, self.timeout_ms)
        return self._abort(SelectionState.TIMED_OUT)

    def _abort(self, outcome: SelectionState) -> bool:
        callback = self._on_cancel
        try:
            if callback:
                callback()
        except Exception as e:
            logger.exception("Cancel callback failed")
            self._finish(outcome, exception=e)
            return True
        self._finish(outcome, result=None)
        return True

    def _finish(self, outcome: SelectionState, result: Optional[HexCoord] = None,
                exception: Optional[BaseException] = None) -> None:
        pending = self._pending

        self.state = SelectionState.IDLE
        self.last_outcome = outcome
        self.target_cells = frozenset()
        self.prompt = ""
        self.cancelable = False
        self.timeout_ms = None
        self._on_selection = None
        self._on_cancel = None
        self._pending = None
        logger.info("Forced selection ended: %s", outcome.value)
        self._notify()

        if pending is not None:
            if exception is not None:
                pending.set_exception(exception)
            else:
                pending.set_result(result)

    def _notify(self) -> None:
        if self.on_change:
            self.on_change()
