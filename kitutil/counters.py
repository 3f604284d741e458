"""Thread-aware counters.

Each thread that has been given a slot updates its own array of counters
without locking. Totals are summed across slots on demand. Threads without a
slot may use a shared, lock-protected array when sharing is allowed. Values
wrap as unsigned 64-bit integers.
"""

from __future__ import annotations

import bisect
import threading
from typing import Callable, Optional

__all__ = [
    "MAXCOUNTERS",
    "INVALID_COUNTER",
    "COUNTER_FLAG_NONE",
    "COUNTER_FLAG_SUMMARIZE",
    "THREAD_TOTAL",
    "THREAD_SHARED",
    "CounterError",
    "Counters",
    "mib_in_tree",
]

MAXCOUNTERS = 600
INVALID_COUNTER = 0
COUNTER_FLAG_NONE = 0x00
COUNTER_FLAG_SUMMARIZE = 0x01

THREAD_TOTAL = -1
THREAD_SHARED = -2

_DYNAMIC = 1
_STATIC = 2
_USED = 4

_MASK = (1 << 64) - 1

MibCallback = Callable[[str, str], None]
CombineHandler = Callable[[int], int]
MibFn = Callable[[int, str, str, MibCallback, int, int], None]


class CounterError(RuntimeError):
    """Raised when counters are misused."""


def _zeros() -> list[int]:
    return [0] * MAXCOUNTERS


def mib_in_tree(tree: str, mib: str) -> bool:
    """Return whether mib is tree itself or lies under it ('.' separated)."""
    if not mib.startswith(tree):
        return False
    size = len(tree)
    return size == 0 or len(mib) == size or mib[size] == "."


class Counters:
    """A registry of named counters with per-thread storage."""

    def __init__(self) -> None:
        self._initialized = False
        self._thread0_initialized = False
        self._allow_shared = False
        self._texts: list[Optional[str]] = [None]
        self._sorted: list[int] = []
        self._sorted_texts: list[str] = []
        self._mibfns: dict[int, MibFn] = {}
        self._handlers: list[tuple[int, CombineHandler]] = []
        self._max_counters = MAXCOUNTERS
        self._maxthreads = 0
        self._state: list[int] = []
        self._all: list[list[int]] = []
        self._thread0 = _zeros()
        self._dead = _zeros()
        self._shared = _zeros()
        self._local = threading.local()
        self._lock = threading.Lock()

    # -- registration -------------------------------------------------------

    def new(
        self,
        txt: str,
        combine_handler: Optional[CombineHandler] = None,
        mibfn: Optional[MibFn] = None,
    ) -> int:
        """Register a counter named txt and return its number."""
        counter = len(self._texts)
        if counter >= MAXCOUNTERS:
            raise CounterError(f"Counter {counter} exceeds MAXCOUNTERS ({MAXCOUNTERS}).")
        self._texts.append(txt)
        position = bisect.bisect_right(self._sorted_texts, txt)
        self._sorted_texts.insert(position, txt)
        self._sorted.insert(position, counter)
        if combine_handler is not None:
            self._handlers.append((counter, combine_handler))
        if mibfn is not None:
            self._mibfns[counter] = mibfn
        return counter

    def num_counters(self) -> int:
        """Return how many counters are registered."""
        return len(self._texts) - 1

    def is_valid(self, counter: int) -> bool:
        """Return whether counter names a registered counter."""
        return counter != INVALID_COUNTER and 0 < counter <= self.num_counters()

    def sorted_index(self, index: int) -> int:
        """Return the counter at position index when ordered by name."""
        return self._sorted[index]

    def text(self, counter: int) -> Optional[str]:
        """Return the name of counter, or None if it is not valid."""
        return self._texts[counter] if self.is_valid(counter) else None

    # -- per-thread storage -------------------------------------------------

    @property
    def _mine(self) -> Optional[list[int]]:
        return getattr(self._local, "counters", None)

    @_mine.setter
    def _mine(self, value: list[int]) -> None:
        self._local.counters = value

    def _are_shared(self) -> bool:
        if self._mine is not None:
            return False
        if not self._thread0_initialized:
            self._mine = self._thread0
            self._thread0_initialized = True
            return False
        if not self._allow_shared:
            raise CounterError(
                "Shared counters have been disabled and this thread's counters aren't initialized"
            )
        return True

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise CounterError("Counters not yet initialized")

    def _in_range(self, counter: int) -> bool:
        return 0 <= counter <= self.num_counters()

    def _apply(self, counter: int, delta: int) -> None:
        if not self._in_range(counter):
            return
        if self._are_shared():
            with self._lock:
                self._shared[counter] = (self._shared[counter] + delta) & _MASK
        else:
            mine = self._mine
            mine[counter] = (mine[counter] + delta) & _MASK

    def incr(self, counter: int) -> None:
        """Add one to counter in this thread's storage."""
        self._apply(counter, 1)

    def decr(self, counter: int) -> None:
        """Subtract one from counter in this thread's storage."""
        self._apply(counter, -1)

    def add(self, counter: int, value: int) -> None:
        """Add value to counter in this thread's storage."""
        self._apply(counter, value)

    def zero(self, counter: int) -> None:
        """Reset counter to zero in this thread's storage."""
        if not self._in_range(counter):
            return
        if self._are_shared():
            with self._lock:
                self._shared[counter] = 0
        else:
            self._mine[counter] = 0

    # -- setup --------------------------------------------------------------

    def initialize(self, counts: int = MAXCOUNTERS, threads: int = 1, allow_sharing: bool = True) -> None:
        """Allocate storage for threads slots; counts made so far are discarded."""
        if counts > MAXCOUNTERS:
            raise CounterError(f"Currently, counts cannot be greater than {MAXCOUNTERS}")
        if threads < 1:
            raise CounterError("At least one counter slot is required")
        if self._initialized:
            raise CounterError("Already initialized!")

        if not self._thread0_initialized:
            self._mine = self._thread0
            self._thread0_initialized = True

        with self._lock:
            self._initialized = True
            self._max_counters = counts
            self._maxthreads = threads
            self._allow_shared = allow_sharing
            self._state = [_STATIC] * threads
            self._state[0] |= _USED
            self._thread0[:] = _zeros()
            self._all = [self._thread0] + [_zeros() for _ in range(threads - 1)]

    def usable(self) -> bool:
        """Return whether this thread may update counters without sharing."""
        return not self._thread0_initialized or self._mine is not None

    def _slots(self, threadnum: int) -> range:
        if threadnum == THREAD_TOTAL:
            return range(self._maxthreads)
        if threadnum >= 0:
            return range(threadnum, min(threadnum + 1, self._maxthreads))
        return range(0)

    def _combine_into(self, out: list[int], threadnum: int) -> None:
        self._require_initialized()
        with self._lock:
            sources = [self._all[i] for i in self._slots(threadnum) if self._state[i] & _USED]
            if threadnum == THREAD_TOTAL:
                sources += [self._dead, self._shared]
            for n in range(self.num_counters() + 1):
                out[n] = (out[n] + sum(source[n] for source in sources)) & _MASK
        for counter, handler in self._handlers:
            out[counter] = handler(threadnum) & _MASK

    def combine(self, threadnum: int = THREAD_TOTAL) -> list[int]:
        """Return the counts of slot threadnum, or of everything for THREAD_TOTAL."""
        out = _zeros()
        self._combine_into(out, threadnum)
        return out

    def init_thread(self, slot: int) -> None:
        """Give the calling thread the static slot."""
        self._require_initialized()
        if not 0 <= slot < self._maxthreads:
            raise CounterError(f"thread initialized as slot {slot}, but slot_count is {self._maxthreads}")
        if self._state[slot] & _USED:
            raise CounterError(f"thread initialized as slot {slot}, but that slot is already in use")
        self._mine = self._all[slot]
        self._state[slot] |= _USED

    def fini_thread(self, slot: int) -> None:
        """Release the calling thread's static slot, keeping its counts in the totals."""
        self._require_initialized()
        if not 0 <= slot < self._maxthreads:
            raise CounterError(f"thread finalized at slot {slot}, but slot_count is {self._maxthreads}")
        if not self._state[slot] & _USED:
            raise CounterError(f"thread finalized at slot {slot}, but that slot isn't in use")
        if self._mine is not self._all[slot]:
            raise CounterError(f"thread finalized at wrong slot {slot}")
        self._combine_into(self._dead, slot)
        self._mine[:] = _zeros()
        self._mine = self._dead
        self._state[slot] &= ~_USED

    def get_data(self, counter: int, threadnum: int = THREAD_TOTAL) -> int:
        """Return counter for one slot, THREAD_TOTAL or THREAD_SHARED."""
        if threadnum < 0 and threadnum not in (THREAD_TOTAL, THREAD_SHARED):
            raise CounterError("Invalid threadnum")
        if not self._thread0_initialized:
            raise CounterError("Main thread not initialized!")
        if not self._allow_shared and threadnum == THREAD_SHARED and self._initialized:
            raise CounterError("Shared counters are not enabled")

        value = 0
        if self._in_range(counter) and threadnum < self._maxthreads:
            if not self._initialized:
                if self._mine is not self._thread0:
                    raise CounterError(
                        "Can only be called by the main thread before counter initialization"
                    )
                value = self._thread0[counter]
            elif threadnum == THREAD_SHARED:
                value = self._shared[counter]
            else:
                with self._lock:
                    value = sum(
                        self._all[i][counter] for i in self._slots(threadnum) if self._state[i] & _USED
                    )
                    if threadnum == THREAD_TOTAL:
                        value += self._dead[counter] + self._shared[counter]

            for handled, handler in self._handlers:
                if handled == counter:
                    value = handler(threadnum)
                    break

        return value & _MASK

    def get(self, counter: int) -> int:
        """Return the total of counter across all threads."""
        return 0 if counter == INVALID_COUNTER else self.get_data(counter, THREAD_TOTAL)

    # -- dynamic threads ----------------------------------------------------

    def init_dynamic_thread(self) -> int:
        """Give the calling thread a free dynamic slot and return its number."""
        self._require_initialized()
        with self._lock:
            slot = next((i for i, state in enumerate(self._state) if state == _DYNAMIC), None)
            if slot is None:
                raise CounterError("Cannot locate a dynamic thread slot")
            mine = self._all[slot]
            self._state[slot] |= _USED
        self._mine = mine
        mine[:] = _zeros()
        return slot

    def prepare_dynamic_threads(self, count: int) -> None:
        """Make count more dynamic slots available, reusing free slots first."""
        self._require_initialized()
        if not count:
            return
        with self._lock:
            done = 0
            for i, state in enumerate(self._state):
                if done >= count:
                    break
                if not state:
                    self._state[i] = _DYNAMIC
                    done += 1
            extra = count - done
            self._state.extend([_DYNAMIC] * extra)
            self._all.extend(_zeros() for _ in range(extra))
            self._maxthreads += extra

    def fini_dynamic_thread(self, slot: int) -> None:
        """Release the calling thread's dynamic slot, keeping its counts in the totals."""
        self._require_initialized()
        if not 0 <= slot < self._maxthreads:
            raise CounterError(f"thread finalized as slot {slot}, but slot_count is {self._maxthreads}")
        if self._state[slot] != _USED | _DYNAMIC:
            raise CounterError(f"thread finalized as slot {slot}, but that slot is not dynamic and in use")
        self._combine_into(self._dead, slot)
        self._mine = self._dead
        self._state[slot] = 0

    # -- reporting ----------------------------------------------------------

    def mib_text(
        self,
        subtree: str,
        callback: MibCallback,
        threadnum: int = THREAD_TOTAL,
        cflags: int = COUNTER_FLAG_NONE,
    ) -> None:
        """Call callback(name, value) for each counter under subtree, in name order."""
        totals = self.combine(threadnum)
        for counter in self._sorted:
            name = self._texts[counter]
            mibfn = self._mibfns.get(counter)
            if mibfn is not None:
                if mib_in_tree(subtree, name) or mib_in_tree(name, subtree):
                    mibfn(counter, subtree, name, callback, threadnum, cflags)
            elif mib_in_tree(subtree, name):
                callback(name, str(totals[counter]))