import threading

import pytest

from kitutil.counters import (
    MAXCOUNTERS,
    THREAD_SHARED,
    THREAD_TOTAL,
    CounterError,
    Counters,
    mib_in_tree,
)

ULLONG_MAX = 18446744073709551615


def run_in_thread(fn):
    """Run fn in a new thread; return (result, exception)."""
    box = {}

    def target():
        try:
            box["result"] = fn()
        except Exception as exc:  # noqa: BLE001
            box["error"] = exc

    thread = threading.Thread(target=target)
    thread.start()
    thread.join()
    return box.get("result"), box.get("error")


def test_new_and_lookup():
    counters = Counters()
    first = counters.new("counter")
    second = counters.new("other")
    assert (first, second) == (1, 2)
    assert counters.num_counters() == 2
    assert counters.is_valid(first)
    assert not counters.is_valid(0)
    assert not counters.is_valid(3)
    assert counters.text(second) == "other"
    assert counters.text(0) is None


def test_sorted_index_orders_by_name():
    counters = Counters()
    b = counters.new("b")
    a = counters.new("a")
    c = counters.new("c")
    assert [counters.sorted_index(i) for i in range(3)] == [a, b, c]


def test_too_many_counters():
    counters = Counters()
    for i in range(MAXCOUNTERS - 1):
        counters.new(f"c{i:03d}")
    with pytest.raises(CounterError):
        counters.new("one.too.many")


def test_counting_before_initialize_then_discarded():
    counters = Counters()
    c = counters.new("early")
    counters.add(c, 7)
    assert counters.get_data(c, THREAD_TOTAL) == 7
    counters.initialize(MAXCOUNTERS, 2, False)
    assert counters.get(c) == 0


def test_initialize_errors():
    counters = Counters()
    with pytest.raises(CounterError):
        counters.initialize(MAXCOUNTERS + 1, 1, True)
    with pytest.raises(CounterError):
        counters.initialize(MAXCOUNTERS, 0, True)
    counters.initialize(MAXCOUNTERS, 1, True)
    with pytest.raises(CounterError):
        counters.initialize(MAXCOUNTERS, 1, True)


def test_incr_decr_add_zero():
    counters = Counters()
    counters.initialize(MAXCOUNTERS, 2, False)
    c = counters.new("counter")
    assert counters.get(c) == 0
    counters.incr(c)
    counters.incr(c)
    counters.decr(c)
    counters.add(c, 5)
    assert counters.get(c) == 6
    counters.zero(c)
    assert counters.get(c) == 0


def test_decrement_wraps_unsigned():
    counters = Counters()
    counters.initialize(MAXCOUNTERS, 1, False)
    c = counters.new("counter")
    counters.decr(c)
    assert counters.get(c) == ULLONG_MAX


def test_unregistered_counter_ignored():
    counters = Counters()
    counters.initialize(MAXCOUNTERS, 1, False)
    c = counters.new("counter")
    counters.add(c + 1, 10)
    assert counters.get(c + 1) == 0
    assert counters.get(0) == 0


def test_combine_handler_overrides_value():
    counters = Counters()
    counters.initialize(MAXCOUNTERS, 1, False)
    seen = []

    def handler(threadnum):
        seen.append(threadnum)
        return 42

    c = counters.new("special", combine_handler=handler)
    counters.add(c, 1)
    assert counters.get(c) == 42
    assert counters.combine()[c] == 42
    assert seen == [THREAD_TOTAL, THREAD_TOTAL]


def test_per_thread_slots_and_fini():
    counters = Counters()
    counters.initialize(MAXCOUNTERS, 2, False)
    c = counters.new("counter")
    counters.add(c, 5)

    def worker():
        counters.init_thread(1)
        counters.add(c, 3)
        return counters.get_data(c, 1)

    result, error = run_in_thread(worker)
    assert error is None
    assert result == 3
    assert counters.get_data(c, 0) == 5
    assert counters.get(c) == 8
    assert counters.combine(1)[c] == 3

    # A new thread claims slot 1 again only after it has been released.
    _, error = run_in_thread(lambda: counters.init_thread(1))
    assert isinstance(error, CounterError)

    def claim_release():
        counters.fini_thread(1)

    _, error = run_in_thread(claim_release)
    assert isinstance(error, CounterError)  # slot 1 belongs to another thread


def test_fini_thread_keeps_totals():
    counters = Counters()
    counters.initialize(MAXCOUNTERS, 2, False)
    c = counters.new("counter")

    def worker():
        counters.init_thread(1)
        counters.add(c, 4)
        counters.fini_thread(1)
        return counters.get_data(c, 1)

    result, error = run_in_thread(worker)
    assert error is None
    assert result == 0
    assert counters.get(c) == 4


def test_init_thread_bad_slot():
    counters = Counters()
    counters.initialize(MAXCOUNTERS, 2, False)
    _, error = run_in_thread(lambda: counters.init_thread(2))
    assert isinstance(error, CounterError)
    with pytest.raises(CounterError):
        counters.init_thread(0)  # the main thread already holds slot 0


def test_shared_counters_disallowed():
    counters = Counters()
    counters.initialize(MAXCOUNTERS, 1, False)
    c = counters.new("counter")
    counters.add(c, 3)
    result, error = run_in_thread(lambda: counters.incr(c))
    assert isinstance(error, CounterError)
    assert result is None
    # The refused increment left the totals untouched.
    assert counters.get(c) == 3
    assert counters.get_data(c, 0) == 3


def test_shared_counters_allowed():
    counters = Counters()
    counters.initialize(MAXCOUNTERS, 1, True)
    c = counters.new("counter")

    def worker():
        counters.incr(c)
        return counters.usable()

    usable, error = run_in_thread(worker)
    assert error is None
    assert usable is False
    assert counters.get_data(c, THREAD_SHARED) == 1
    assert counters.get(c) == 1
    assert counters.usable()


def test_fini_dynamic_thread_on_static_slot():
    counters = Counters()
    counters.initialize(MAXCOUNTERS, 2, False)
    with pytest.raises(CounterError):
        counters.fini_dynamic_thread(0)


def test_mib_in_tree():
    assert mib_in_tree("", "anything")
    assert mib_in_tree("a.b", "a.b")
    assert mib_in_tree("a", "a.b")
    assert not mib_in_tree("a", "ab")
    assert not mib_in_tree("a.b", "a")


def test_mib_text_reports_in_order_and_filters():
    counters = Counters()
    counters.initialize(MAXCOUNTERS, 2, False)
    z = counters.new("z.count")
    a = counters.new("a.count")
    counters.new("a.other")
    counters.add(z, 5)
    counters.add(a, 2)

    lines = []
    counters.mib_text("", lambda key, value: lines.append((key, value)))
    assert lines == [("a.count", "2"), ("a.other", "0"), ("z.count", "5")]

    lines.clear()
    counters.mib_text("a", lambda key, value: lines.append((key, value)))
    assert [key for key, _ in lines] == ["a.count", "a.other"]


def test_mib_text_calls_mibfn_when_tree_is_inside_mib():
    counters = Counters()
    counters.initialize(MAXCOUNTERS, 1, False)
    calls = []

    def mibfn(counter, subtree, name, callback, threadnum, cflags):
        calls.append((subtree, name))
        callback(name + ".x", "1")

    counters.new("tree", mibfn=mibfn)
    out = []
    counters.mib_text("tree.x", lambda key, value: out.append((key, value)))
    assert calls == [("tree.x", "tree")]
    assert out == [("tree.x", "1")]


def test_combine_requires_initialize():
    counters = Counters()
    counters.new("counter")
    with pytest.raises(CounterError):
        counters.combine()