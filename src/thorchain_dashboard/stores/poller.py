"""Reference-counted pollers that keep a fetched value fresh while it has subscribers."""

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from thorchain_dashboard.api.errors import FetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[["PollState"], None]


def utc_now() -> datetime:
    return datetime.now(UTC)


class PollerStatus(StrEnum):
    """Lifecycle state of a poller."""

    IDLE = "idle"
    ACTIVE = "active"


class PollState(BaseModel):
    """
    Snapshot of a poller's published state.

    Attributes
    ----------
    value : Any
        Last successfully fetched value (kept while refreshes fail)
    error : str | None
        Error from the most recent refresh, None if it succeeded
    loading : bool
        True while the first fetch after activation is outstanding
    last_update : datetime | None
        Time of the last successful refresh

    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Any = None
    error: str | None = None
    loading: bool = False
    last_update: datetime | None = None

    @property
    def is_stale(self) -> bool:
        """True when a value is shown but the latest refresh failed."""
        return self.error is not None and self.last_update is not None


class Subscription:
    """
    Handle returned by :meth:`Poller.subscribe`.

    Unsubscribing more than once has no effect. The handle can also be
    called directly or used as a context manager.

    """

    def __init__(self, release: Callable[[], None]) -> None:
        self._release = release
        self._active = True
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        """Release this subscription."""
        with self._lock:
            if not self._active:
                return
            self._active = False
        self._release()

    def __call__(self) -> None:
        self.unsubscribe()

    def __enter__(self) -> "Subscription":
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: object | None,
    ) -> None:
        """Context manager exit."""
        self.unsubscribe()


class Poller(Generic[T]):
    """
    Periodically re-executes a fetch while at least one subscriber holds a handle.

    The first subscriber starts a single worker thread that fetches
    immediately and then once per ``interval``. The last unsubscribe stops it;
    a fetch still in flight on a stopped worker is discarded.
    A failed refresh records the error and keeps the previous value; the
    worker keeps running.

    Parameters
    ----------
    name : str
        Poller name used in thread names and log messages
    fetch : Callable[[], T]
        Zero-argument callable performing one fetch
    interval : float
        Seconds between refreshes
    now : Callable[[], datetime]
        Wall-clock source for ``last_update``

    Examples
    --------
    >>> poller = Poller("network", thornode.get_network, interval=6)
    >>> subscription = poller.subscribe()
    >>> poller.state.value
    >>> subscription.unsubscribe()

    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[], T],
        interval: float,
        *,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        if interval <= 0:
            msg = f"Polling interval must be positive, got {interval}"
            raise ValueError(msg)

        self.name = name
        self.interval = interval
        self._fetch = fetch
        self._now = now
        self._state = PollState()
        self._listeners: list[Listener] = []
        self._subscriber_count = 0
        self._worker: threading.Thread | None = None
        self._stop: threading.Event | None = None
        self._lock = threading.Lock()

    @property
    def state(self) -> PollState:
        with self._lock:
            return self._state

    @property
    def value(self) -> T | None:
        return self.state.value

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return self._subscriber_count

    @property
    def status(self) -> PollerStatus:
        with self._lock:
            return PollerStatus.ACTIVE if self._worker is not None else PollerStatus.IDLE

    @property
    def is_active(self) -> bool:
        return self.status == PollerStatus.ACTIVE

    def subscribe(self) -> Subscription:
        """
        Register a subscriber, starting the worker on the first one.

        Returns
        -------
        Subscription
            Handle used to unsubscribe

        """
        with self._lock:
            self._subscriber_count += 1
            if self._subscriber_count == 1:
                self._state = self._state.model_copy(update={"loading": True})
                self._start_worker()
        return Subscription(self._release)

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback invoked with every published state.

        Parameters
        ----------
        listener : Callable[[PollState], None]
            Callback receiving the new state

        Returns
        -------
        Callable[[], None]
            Function removing the listener

        """
        with self._lock:
            self._listeners.append(listener)

        def remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return remove

    def force_refresh(self) -> PollState:
        """
        Fetch immediately in the calling thread.

        Does not depend on subscribers and does not shift the worker's schedule.

        Returns
        -------
        PollState
            State after the refresh

        """
        self._tick()
        return self.state

    def _start_worker(self) -> None:
        stop = threading.Event()
        worker = threading.Thread(target=self._run, args=(stop,), name=f"poller-{self.name}", daemon=True)
        self._stop = stop
        self._worker = worker
        worker.start()

    def _release(self) -> None:
        with self._lock:
            if self._subscriber_count == 0:
                return
            self._subscriber_count -= 1
            if self._subscriber_count > 0:
                return
            stop = self._stop
            self._stop = None
            self._worker = None
            if stop is not None:
                stop.set()

        if stop is not None:
            logger.debug("Poller %s stopped", self.name)

    def _run(self, stop: threading.Event) -> None:
        self._tick(stop)
        while not stop.wait(self.interval):
            self._tick(stop)

    def _tick(self, stop: threading.Event | None = None) -> None:
        try:
            value = self._fetch()
        except FetchError as e:
            logger.warning("Poller %s refresh failed: %s", self.name, e)
            self._publish(stop, error=str(e), loading=False)
            return
        except Exception as e:
            logger.exception("Poller %s refresh raised unexpectedly", self.name)
            self._publish(stop, error=str(e), loading=False)
            return

        self._publish(
            stop,
            derive=lambda: self._on_value(value),
            value=value,
            error=None,
            loading=False,
            last_update=self._now(),
        )

    def _on_value(self, value: T) -> None:
        """
        Hook for subclasses to derive extra state from a fresh value.

        Runs under the poller lock just before the value is published, so it
        must not block or call back into the poller.

        """

    def _publish(
        self,
        stop: threading.Event | None,
        derive: Callable[[], None] | None = None,
        **changes: Any,
    ) -> None:
        with self._lock:
            # A stopped worker's late result must not overwrite a newer worker's
            if stop is not None and stop.is_set():
                logger.debug("Poller %s dropped result from a stopped worker", self.name)
                return
            if derive is not None:
                derive()
            self._state = self._state.model_copy(update=changes)
            state = self._state
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(state)
            except Exception:
                logger.exception("Poller %s listener failed", self.name)
