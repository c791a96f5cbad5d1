"""Real-time RUNE price poller with a rolling price history."""

import threading
from collections.abc import Callable
from datetime import datetime, timedelta
from decimal import Decimal

from thorchain_dashboard.clients.thornode import ThorNodeClient
from thorchain_dashboard.core.models import PriceChange, PriceDirection, PricePoint
from thorchain_dashboard.data import get_poller_config
from thorchain_dashboard.stores.poller import Poller, utc_now


class RunePricePoller(Poller[Decimal]):
    """
    Polls the RUNE price from THORNode on the real-time provider path.

    Keeps every observation from the last ``history_window`` seconds for
    sparklines and price-change indicators.

    Parameters
    ----------
    thornode : ThorNodeClient
        THORNode client
    interval : float | None
        Seconds between refreshes (default from providers.yaml, 6 s)
    history_window : float | None
        Seconds of history to keep (default from providers.yaml, 1 hour)
    now : Callable[[], datetime]
        Wall-clock source

    """

    def __init__(
        self,
        thornode: ThorNodeClient,
        interval: float | None = None,
        history_window: float | None = None,
        *,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        config = get_poller_config("rune_price")
        super().__init__(
            "rune_price",
            thornode.get_rune_price,
            interval or float(config["interval_seconds"]),
            now=now,
        )
        self.history_window = timedelta(seconds=history_window or float(config["history_window_seconds"]))
        self._history: list[PricePoint] = []
        self._history_lock = threading.Lock()

    @property
    def price(self) -> Decimal:
        return self.state.value or Decimal("0")

    @property
    def formatted(self) -> str:
        return f"${self.price:.6f}"

    @property
    def history(self) -> list[PricePoint]:
        with self._history_lock:
            return list(self._history)

    def change(self) -> PriceChange:
        """
        Change between the two most recent observations.

        Returns
        -------
        PriceChange
            Absolute and percentage change with direction

        """
        history = self.history
        if len(history) < 2:
            return PriceChange()

        current = history[-1].price
        previous = history[-2].price
        absolute = current - previous
        percentage = absolute / previous * 100 if previous > 0 else Decimal("0")

        if absolute > 0:
            direction = PriceDirection.UP
        elif absolute < 0:
            direction = PriceDirection.DOWN
        else:
            direction = PriceDirection.NEUTRAL

        return PriceChange(absolute=absolute, percentage=percentage, direction=direction)

    def _on_value(self, value: Decimal) -> None:
        timestamp = self._now()
        cutoff = timestamp - self.history_window
        with self._history_lock:
            self._history = [point for point in self._history if point.timestamp > cutoff]
            self._history.append(PricePoint(price=value, timestamp=timestamp))
