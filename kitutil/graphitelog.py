"""Periodic output of all counters as JSON lines for graphite.

Each emission writes one or more JSON objects, each holding a timestamp and
at most ``json_limit`` counters, one object per line.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional, TextIO

from .counters import COUNTER_FLAG_NONE, THREAD_TOTAL, Counters

__all__ = ["BUFFER_SIZE", "GraphiteLog"]

BUFFER_SIZE = 32767

_log = logging.getLogger(__name__)


class _Batch:
    """Accumulates counters into bounded JSON lines and writes them out."""

    def __init__(self, stream: TextIO, now: int, limit: int) -> None:
        self.stream = stream
        self.now = now
        self.limit = limit
        self.text = ""
        self.pos = 0
        self.counter = 0
        self.complete = True

    def _append(self, piece: str) -> None:
        self.pos += len(piece)
        self.text = (self.text + piece)[: BUFFER_SIZE - 1]

    def add(self, key: str, value: str) -> None:
        if self.counter % self.limit == 0:
            self.text = ""
            self.pos = 0
            self._append(f'{{"log.timestamp":"{self.now}"')
            self.complete = False

        if self.pos < BUFFER_SIZE:
            self._append(f',"{key}":"{value}"')
            self.counter += 1

        if self.counter % self.limit == 0 or self.pos >= BUFFER_SIZE:
            self.finish()

    def finish(self) -> None:
        if self.complete:
            return
        if self.pos < BUFFER_SIZE:
            self._append("}\n")
        if self.pos >= BUFFER_SIZE:
            _log.warning("graphitelog buffer overflow - graphite data has been truncated and is invalid")
        self.complete = True
        self.stream.write(self.text)
        self.stream.flush()


class GraphiteLog:
    """Writes the values of a Counters registry at a regular interval."""

    def __init__(self, counters: Counters) -> None:
        self._counters = counters
        self._json_limit = 0
        self._interval = 0
        self._stop = threading.Event()

    def set_options(self, json_limit: int, interval: int) -> None:
        """Set the counters per JSON line and the seconds between emissions."""
        if json_limit < 1:
            raise ValueError("json_limit must be at least 1")
        if interval < 0:
            raise ValueError("interval must not be negative")
        self._json_limit = json_limit
        self._interval = interval

    def emit(self, stream: TextIO) -> None:
        """Write every counter once, as JSON lines, to stream."""
        if not self._json_limit:
            raise RuntimeError("No configuration acquired; cannot emit graphite log")
        batch = _Batch(stream, int(time.time()), self._json_limit)
        self._counters.mib_text("", batch.add, THREAD_TOTAL, COUNTER_FLAG_NONE)
        batch.finish()

    def run(self, stream: Optional[TextIO], counter_slot: int) -> None:
        """Emit until terminated, waking near each half interval; emit once more at the end."""
        self._counters.init_thread(counter_slot)
        exiting = False

        while not exiting:
            if self._stop.is_set():
                exiting = True  # one last pass

            if not self._interval:
                raise RuntimeError("No configuration acquired; cannot run graphitelog thread")

            if stream is not None:
                self.emit(stream)

            bedtime = True
            while not self._stop.is_set() and bedtime:
                now_usec = time.time_ns() // 1000
                interval_usec = self._interval * 1_000_000
                sleep_usec = interval_usec - (now_usec + interval_usec // 2) % interval_usec
                if sleep_usec > 1_000_000:
                    sleep_usec = 750_000
                else:
                    bedtime = False
                self._stop.wait(sleep_usec / 1_000_000)

    def terminate(self) -> None:
        """Ask a running ``run`` loop to emit once more and return."""
        self._stop.set()