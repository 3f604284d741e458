"""Rate-limited informational logging.

Each line is prefixed with the calling thread's native id and written to a
stream (standard error by default). A line identical to the one before it is
written at most ALLOWED_BURST + 1 times within DELAY seconds.
"""

from __future__ import annotations

import sys
import threading
import time
from typing import Callable, Optional, TextIO

__all__ = ["MAX_LINE", "DELAY", "ALLOWED_BURST", "InfoLog"]

MAX_LINE = 1024
DELAY = 1
ALLOWED_BURST = 10
_ELLIPSIS = "..."


class InfoLog:
    """A writer of thread-tagged, burst-limited log lines.

    The ``flags`` attribute selects which categories ``log`` lets through.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.stream = stream
        self.clock = clock if clock is not None else time.time
        self.flags = 0
        self._state = threading.local()

    def _thread_state(self) -> threading.local:
        state = self._state
        if not hasattr(state, "previous"):
            state.previous = "\0" * MAX_LINE
            state.last_log_ts = 0
            state.burst = 0
        return state

    def printf(self, fmt: str, *args: object) -> int:
        """Format and write one line; return its length, or 0 if it was suppressed."""
        state = self._thread_state()
        now = int(self.clock())
        line = f"{threading.get_native_id()} " + (fmt % args)

        if len(line) >= MAX_LINE:
            line = line[: MAX_LINE - len(_ELLIPSIS) - 1] + _ELLIPSIS

        if line and not line.endswith("\n"):
            line += "\n"

        if state.previous[: len(line)] == line:
            state.burst += 1
            if state.burst > ALLOWED_BURST and now - state.last_log_ts < DELAY:
                return 0
        else:
            state.burst = 0

        state.last_log_ts = now
        state.previous = line + state.previous[len(line):]
        stream = self.stream if self.stream is not None else sys.stderr
        stream.write(line)
        stream.flush()
        return len(line)

    def log(self, flag: int, fmt: str, *args: object) -> int:
        """Write a line only if flag is enabled in ``flags``; return what printf returned."""
        if self.flags & flag:
            return self.printf(fmt, *args)
        return 0