"""
Belief Engine

Per-domain wiring of aggregator -> calculator -> monitor. The aggregator
and calculator are not safe for concurrent mutation, so the engine is
their single owner and serializes access with a lock. A second lock
serializes whole steps so samples reach the monitor in the order the
calculator produced them. The monitor does its own locking.
"""

import logging
import threading
import time
from typing import Callable, Iterable, Optional, Union

from ..logger import get_domain_adapter
from .aggregator import SignalAggregator
from .calculator import BsiCalculator
from .models import BeliefInflection, BeliefSignal, BsiConfig, BsiUpdate
from .monitor import BeliefMonitor, InflectionSubscriber
from .sources import SignalCollector


class BeliefEngine:
    """Fuses signals for one domain and watches the result for inflections"""

    def __init__(
        self,
        domain: str,
        bsi_config: Optional[BsiConfig] = None,
        max_buffer_size: int = 1000,
        threshold: float = 0.5,
        min_persistence: int = 300,
        recent_window_seconds: Optional[int] = None,
        max_signal_age_seconds: Optional[int] = None
    ):
        self.domain = domain
        self.recent_window_seconds = recent_window_seconds
        self.max_signal_age_seconds = max_signal_age_seconds

        self.aggregator = SignalAggregator(max_buffer_size)
        self.calculator = BsiCalculator(bsi_config)
        self.monitor = BeliefMonitor(threshold, min_persistence)

        self._lock = threading.Lock()
        self._step_lock = threading.Lock()
        self.logger = get_domain_adapter(domain, logger=logging.getLogger(__name__))

        self.steps_run = 0
        self.inflections_detected = 0

    @classmethod
    def from_config(cls, domain: str, config) -> "BeliefEngine":
        """Build an engine from a beliefindex.config.Config"""
        return cls(
            domain=domain,
            bsi_config=config.bsi,
            max_buffer_size=config.aggregator.max_buffer_size,
            threshold=config.monitor.threshold,
            min_persistence=config.monitor.min_persistence,
            recent_window_seconds=config.aggregator.recent_window_seconds,
            max_signal_age_seconds=config.aggregator.max_signal_age_seconds,
        )

    def ingest(self, signals: Iterable[BeliefSignal]) -> None:
        with self._lock:
            self.aggregator.add_signals(signals)

    def step(self, window_seconds: Optional[int] = None, now: Optional[int] = None) -> BsiUpdate:
        """
        Compute one index sample from the buffered signals and feed it to the monitor.

        Signals older than max_signal_age_seconds (when set) are pruned first.
        Subscribers run inside the step and must not call step() themselves.

        Args:
            window_seconds: Only use signals this recent (defaults to the
                engine's recent window; None means the whole buffer)
            now: Step time in Unix seconds (defaults to the wall clock)
        """
        now = int(time.time()) if now is None else now
        window = window_seconds if window_seconds is not None else self.recent_window_seconds

        with self._step_lock:
            with self._lock:
                if self.max_signal_age_seconds is not None:
                    self.aggregator.clear_old_signals(self.max_signal_age_seconds, now=now)
                if window is None:
                    batch = self.aggregator.get_all_signals()
                else:
                    batch = self.aggregator.get_recent_signals(window, now=now)
                bsi = self.calculator.calculate(batch, self.domain, now=now)

            inflection = self.monitor.update(bsi)

            self.steps_run += 1
            if inflection is not None:
                self.inflections_detected += 1
            steps_run = self.steps_run

        self.logger.debug(
            f"Step {steps_run}: value={bsi.value:.4f}, "
            f"confidence={bsi.confidence:.2f}, signals={bsi.signal_count}"
        )

        return BsiUpdate(bsi=bsi, signals=batch, timestamp=now, inflection=inflection)

    async def poll(self, collector: SignalCollector, now: Optional[int] = None) -> BsiUpdate:
        """Query all sources, buffer whatever arrived, then step"""
        signals = await collector.query_all(self.domain)
        self.ingest(signals)
        return self.step(now=now)

    def apply_decay(self) -> None:
        with self._lock:
            self.calculator.apply_decay()

    def prune(self, max_age_seconds: int, now: Optional[int] = None) -> int:
        """Drop buffered signals older than max_age_seconds"""
        with self._lock:
            return self.aggregator.clear_old_signals(max_age_seconds, now=now)

    def on_inflection(
        self,
        subscriber: Union[InflectionSubscriber, Callable[[BeliefInflection], None]]
    ) -> None:
        self.monitor.on_inflection(subscriber)

    def validate_persistence(self, inflection: BeliefInflection) -> bool:
        return self.monitor.validate_persistence(inflection)
