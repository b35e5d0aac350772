"""
Cancellable deferred call used to collapse bursts of search input.
"""

import logging
import time
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Holds at most one pending call to callback.

    submit() replaces any pending call (the superseded arguments are
    discarded, not queued) and restarts the quiet period. The owning event
    loop calls poll() between events; the callback fires once the quiet
    period has elapsed since the last submit(). Everything runs on the
    caller's thread.
    """

    def __init__(
        self,
        callback: Callable[..., Any],
        delay_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be non-negative")
        self._callback = callback
        self.delay_seconds = delay_seconds
        self._clock = clock
        self._pending_args: Optional[Tuple[Any, ...]] = None
        self._deadline: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._pending_args is not None

    def submit(self, *args: Any) -> None:
        """Cancel the pending call, if any, and schedule a new one."""
        if self._pending_args is not None:
            logger.debug("Superseding pending debounced call.")
        self._pending_args = args
        self._deadline = self._clock() + self.delay_seconds

    def cancel(self) -> None:
        self._pending_args = None
        self._deadline = None

    def poll(self) -> bool:
        """
        Fire the pending call if its quiet period has elapsed.

        Returns:
            bool: True if the callback ran.
        """
        if self._pending_args is None or self._deadline is None:
            return False
        if self._clock() < self._deadline:
            return False
        return self.flush()

    def flush(self) -> bool:
        """Fire the pending call now, regardless of the deadline."""
        if self._pending_args is None:
            return False
        args = self._pending_args
        self.cancel()
        self._callback(*args)
        return True
