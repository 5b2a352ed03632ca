import sys, pathlib
import threading
import time

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from core.observer import (
    BindingState,
    EmptySignalObservable,
    EmptySignalObserver,
    Subscription,
)


def wait_until(pred, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if pred():
            return True
        time.sleep(0.005)
    return pred()


def test_subscribe_returns_unique_handles():
    obs = EmptySignalObservable("t")
    a = obs.subscribe()
    b = obs.subscribe()
    assert a.id != b.id
    assert obs.subscriber_count == 2


def test_notify_without_subscribers_is_noop():
    obs = EmptySignalObservable("t")
    start = time.perf_counter()
    obs.notify()
    assert time.perf_counter() - start < 0.1
    assert obs.subscriber_count == 0


def test_notify_delivers_one_signal_to_each_subscriber():
    obs = EmptySignalObservable("t")
    a = obs.subscribe()
    b = obs.subscribe()
    obs.notify()
    assert a.receive(timeout=0.1) is True
    assert b.receive(timeout=0.1) is True
    assert a.receive(timeout=0.01) is False


def test_full_buffer_coalesces_and_does_not_block():
    obs = EmptySignalObservable("t")
    sub = obs.subscribe()
    start = time.perf_counter()
    for _ in range(100):
        obs.notify()
    assert time.perf_counter() - start < 0.5
    assert sub.pending is True
    assert sub.receive(timeout=0.1) is True
    # the other 99 were dropped
    assert sub.receive(timeout=0.01) is False


def test_offer_reports_drop():
    sub = Subscription(1)
    assert sub.offer() is True
    assert sub.offer() is False


def test_unsubscribe_closes_and_discards_pending():
    obs = EmptySignalObservable("t")
    sub = obs.subscribe()
    obs.notify()
    obs.unsubscribe(sub)
    assert sub.closed
    assert obs.subscriber_count == 0
    assert sub.receive(timeout=0.01) is False
    obs.notify()
    assert sub.pending is False


def test_double_unsubscribe_is_noop():
    obs = EmptySignalObservable("t")
    sub = obs.subscribe()
    obs.unsubscribe(sub)
    obs.unsubscribe(sub)
    assert sub.closed
    assert obs.subscriber_count == 0


def test_unsubscribe_foreign_handle_is_ignored():
    a = EmptySignalObservable("a")
    b = EmptySignalObservable("b")
    sub_a = a.subscribe()
    sub_b = b.subscribe()
    assert sub_a.id == sub_b.id  # ids are per observable
    b.unsubscribe(sub_a)
    assert not sub_a.closed
    assert not sub_b.closed
    assert b.subscriber_count == 1


def test_receive_unblocks_on_close():
    sub = Subscription(1)
    results = []
    t = threading.Thread(target=lambda: results.append(sub.receive()))
    t.start()
    time.sleep(0.02)
    sub.close()
    t.join(1.0)
    assert not t.is_alive()
    assert results == [False]


def test_unsubscribe_races_with_notify():
    obs = EmptySignalObservable("t")
    stop = threading.Event()
    errors = []

    def notifier():
        try:
            while not stop.is_set():
                obs.notify()
        except Exception as e:  # pragma: no cover - failure path
            errors.append(e)

    t = threading.Thread(target=notifier)
    t.start()
    try:
        for _ in range(300):
            sub = obs.subscribe()
            obs.unsubscribe(sub)
            # nothing may arrive once unsubscribe returned
            assert sub.receive(timeout=0) is False
    finally:
        stop.set()
        t.join(2.0)
    assert not errors
    assert obs.subscriber_count == 0


def test_watch_runs_callback_per_signal():
    obs = EmptySignalObservable("t")
    observer = EmptySignalObserver()
    hits = []
    got = threading.Event()

    def on_notify():
        hits.append(threading.current_thread().name)
        got.set()

    sub = observer.watch(obs, on_notify)
    assert observer.state(sub) is BindingState.ACTIVE
    obs.notify()
    assert got.wait(1.0)
    assert hits and hits[0] != threading.current_thread().name
    observer.ignore(obs, sub)


def test_callbacks_never_overlap():
    obs = EmptySignalObservable("t")
    observer = EmptySignalObserver()
    active = []
    overlaps = []
    calls = []

    def on_notify():
        if active:
            overlaps.append(1)
        active.append(1)
        time.sleep(0.01)
        calls.append(1)
        active.pop()

    sub = observer.watch(obs, on_notify)
    for _ in range(20):
        obs.notify()
        time.sleep(0.003)
    assert wait_until(lambda: len(calls) >= 2)
    observer.ignore(obs, sub)
    assert not overlaps


def test_ignore_terminates_loop_and_stops_callbacks():
    obs = EmptySignalObservable("t")
    observer = EmptySignalObserver()
    calls = []
    sub = observer.watch(obs, lambda: calls.append(1))
    obs.notify()
    assert wait_until(lambda: calls)

    observer.ignore(obs, sub)
    assert observer.state(sub) is BindingState.TERMINATED
    assert not any(t.name.endswith(f"-{sub.id}") and t.name.startswith("observer-t")
                   for t in threading.enumerate())

    seen = len(calls)
    obs.notify()
    time.sleep(0.05)
    assert len(calls) == seen


def test_ignore_waits_for_running_callback():
    obs = EmptySignalObservable("t")
    observer = EmptySignalObserver()
    started = threading.Event()
    finished = []

    def slow():
        started.set()
        time.sleep(0.1)
        finished.append(1)

    sub = observer.watch(obs, slow)
    obs.notify()
    assert started.wait(1.0)
    observer.ignore(obs, sub)
    assert finished == [1]


def test_ignore_from_inside_callback():
    obs = EmptySignalObservable("t")
    observer = EmptySignalObserver()
    calls = []
    holder = {}

    def on_notify():
        calls.append(1)
        observer.ignore(obs, holder["sub"])

    holder["sub"] = observer.watch(obs, on_notify)
    obs.notify()
    assert wait_until(lambda: observer.state(holder["sub"]) is BindingState.TERMINATED)
    obs.notify()
    time.sleep(0.05)
    assert calls == [1]


def test_callback_error_is_logged_and_loop_survives(caplog):
    obs = EmptySignalObservable("t")
    observer = EmptySignalObserver()
    calls = []

    def flaky():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("boom")

    sub = observer.watch(obs, flaky)
    obs.notify()
    assert wait_until(lambda: len(calls) == 1)
    obs.notify()
    assert wait_until(lambda: len(calls) == 2)
    observer.ignore(obs, sub)
    assert "Observer callback failed" in caplog.text


def test_ignore_unknown_handle_is_noop():
    obs = EmptySignalObservable("t")
    observer = EmptySignalObserver()
    sub = obs.subscribe()
    observer.ignore(obs, sub)
    observer.ignore(obs, sub)
    assert sub.closed
    assert observer.state(sub) is BindingState.TERMINATED


def test_ignore_with_wrong_observable_still_detaches():
    a = EmptySignalObservable("a")
    b = EmptySignalObservable("b")
    observer = EmptySignalObserver(join_timeout=1.0)
    calls = []
    sub = observer.watch(a, lambda: calls.append(1))

    start = time.perf_counter()
    observer.ignore(b, sub)
    assert time.perf_counter() - start < 0.5

    assert sub.closed
    assert observer.state(sub) is BindingState.TERMINATED
    a.notify()
    time.sleep(0.05)
    assert calls == []
