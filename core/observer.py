"""Thread based observable/observer pair carrying empty "something changed" signals.

An observable keeps one capacity-1 subscription per subscriber.  Notifying
never waits for consumers: if a subscriber still has an unconsumed signal the
new one is dropped (coalescing).  Observers run their callback on a dedicated
thread, once per received signal, until the subscription is closed.
"""

from __future__ import annotations

from enum import Enum
import itertools
import logging
import threading
from typing import Callable, Dict, Optional

log = logging.getLogger(__name__)


class Subscription:
    """Subscription handle holding at most one pending signal."""

    def __init__(self, sub_id: int):
        self.id = sub_id
        self._cond = threading.Condition()
        self._pending = False
        self._closed = False

    def __repr__(self) -> str:
        return f"<Subscription id={self.id} closed={self._closed}>"

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> bool:
        return self._pending

    def offer(self) -> bool:
        """Deliver a signal without blocking. Returns False if it was dropped."""
        with self._cond:
            if self._closed or self._pending:
                return False
            self._pending = True
            self._cond.notify()
            return True

    def receive(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the next signal and consume it.
        Returns True when a signal was consumed, False on closure or timeout.
        """
        with self._cond:
            self._cond.wait_for(lambda: self._pending or self._closed, timeout)
            if self._closed or not self._pending:
                return False
            self._pending = False
            return True

    def close(self) -> bool:
        """Close the handle, discarding any pending signal. Idempotent."""
        with self._cond:
            if self._closed:
                return False
            self._closed = True
            self._pending = False
            self._cond.notify_all()
            return True


class EmptySignalObservable:
    """
    Observable that signals empty messages.

    The meaning of a signal is agreed between producer and observer; usually
    it means the state changed and the observer should read it again.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._slots: Dict[int, Subscription] = {}

    def __repr__(self) -> str:
        return f"<EmptySignalObservable {self.name!r} subscribers={self.subscriber_count}>"

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._slots)

    def subscribe(self) -> Subscription:
        with self._lock:
            subscription = Subscription(next(self._ids))
            self._slots[subscription.id] = subscription
        log.debug("%s: subscribed id=%s", self.name, subscription.id)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            owned = self._slots.get(subscription.id) is subscription
            if owned:
                del self._slots[subscription.id]
        if not owned:
            log.debug("%s: ignoring unsubscribe of unknown %r", self.name, subscription)
            return
        subscription.close()
        log.debug("%s: unsubscribed id=%s", self.name, subscription.id)

    def notify(self) -> None:
        with self._lock:
            if not self._slots:
                return
            targets = list(self._slots.values())
        for subscription in targets:
            # Unsubscribed in the meantime -> offer() is a no-op on a closed handle.
            subscription.offer()


class BindingState(str, Enum):
    ACTIVE = "active"
    DETACHING = "detaching"
    TERMINATED = "terminated"


class _Binding:
    def __init__(self, subscription: Subscription, thread: threading.Thread):
        self.subscription = subscription
        self.thread = thread
        self.state = BindingState.ACTIVE


class EmptySignalObserver:
    """Runs a callback on its own thread for every signal of an observable."""

    def __init__(self, join_timeout: float = 5.0):
        self.join_timeout = join_timeout
        self._lock = threading.Lock()
        self._bindings: Dict[int, _Binding] = {}

    def watch(self, observable: EmptySignalObservable, on_notify: Callable[[], None]) -> Subscription:
        subscription = observable.subscribe()
        thread = threading.Thread(
            target=self._run,
            args=(subscription, on_notify),
            name=f"observer-{observable.name or 'anon'}-{subscription.id}",
            daemon=True,
        )
        with self._lock:
            self._bindings[id(subscription)] = _Binding(subscription, thread)
        thread.start()
        return subscription

    def ignore(self, observable: EmptySignalObservable, subscription: Subscription) -> None:
        with self._lock:
            binding = self._bindings.get(id(subscription))
            if binding is not None and binding.state is BindingState.ACTIVE:
                binding.state = BindingState.DETACHING
        observable.unsubscribe(subscription)
        # Close even if ``observable`` did not own the handle, so the loop always ends.
        subscription.close()
        if binding is None or binding.thread is threading.current_thread():
            return
        binding.thread.join(self.join_timeout)
        if binding.thread.is_alive():
            log.warning(
                "Observer thread %s still running %.1fs after ignore",
                binding.thread.name, self.join_timeout,
            )

    def state(self, subscription: Subscription) -> BindingState:
        with self._lock:
            binding = self._bindings.get(id(subscription))
        return binding.state if binding is not None else BindingState.TERMINATED

    def _run(self, subscription: Subscription, on_notify: Callable[[], None]) -> None:
        try:
            while subscription.receive():
                try:
                    on_notify()
                except Exception:
                    log.exception("Observer callback failed for subscription %s", subscription.id)
        finally:
            with self._lock:
                binding = self._bindings.pop(id(subscription), None)
            if binding is not None:
                binding.state = BindingState.TERMINATED
