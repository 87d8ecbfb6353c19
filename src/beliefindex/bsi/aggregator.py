"""
Signal Aggregator

Source-partitioned buffering of belief signals with bounded retention,
plus filtered and statistical read views over the buffer.

Not thread-safe: callers sharing an aggregator must serialize access
(see BeliefEngine).
"""

import logging
import statistics
import time
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional

from .models import BeliefSignal, SignalStatistics, SignalType


class SignalAggregator:
    """Buffers belief signals per source, evicting oldest-first"""

    def __init__(self, max_buffer_size: int = 1000):
        if max_buffer_size <= 0:
            raise ValueError(f"max_buffer_size must be positive, got {max_buffer_size}")
        self.max_buffer_size = max_buffer_size
        self.signal_buffer: Dict[str, Deque[BeliefSignal]] = {}
        self.logger = logging.getLogger(__name__)

    def add_signal(self, signal: BeliefSignal) -> None:
        """Append to the signal's source buffer; the oldest entry drops on overflow"""
        buffer = self.signal_buffer.get(signal.source)
        if buffer is None:
            buffer = deque(maxlen=self.max_buffer_size)
            self.signal_buffer[signal.source] = buffer
        buffer.append(signal)

    def add_signals(self, signals: Iterable[BeliefSignal]) -> None:
        for signal in signals:
            self.add_signal(signal)

    def _iter_signals(self) -> Iterable[BeliefSignal]:
        for buffer in self.signal_buffer.values():
            yield from buffer

    def get_all_signals(self) -> List[BeliefSignal]:
        return list(self._iter_signals())

    def get_signals_by_type(self, signal_type: SignalType) -> List[BeliefSignal]:
        return [s for s in self._iter_signals() if s.signal_type == signal_type]

    def get_signals_by_source(self, source: str) -> List[BeliefSignal]:
        return list(self.signal_buffer.get(source, ()))

    def get_recent_signals(self, window_seconds: int, now: Optional[int] = None) -> List[BeliefSignal]:
        """Signals with timestamp >= now - window_seconds, across all sources"""
        cutoff = self._now(now) - window_seconds
        return [s for s in self._iter_signals() if s.timestamp >= cutoff]

    def get_average_by_type(self, signal_type: SignalType) -> Optional[float]:
        """Mean value of the given type, or None when no such signals are buffered"""
        signals = self.get_signals_by_type(signal_type)
        if not signals:
            return None
        return sum(s.value for s in signals) / len(signals)

    def get_source_diversity(self) -> int:
        """Number of distinct sources currently buffered"""
        return len(self.signal_buffer)

    def get_total_signal_count(self) -> int:
        return sum(len(buffer) for buffer in self.signal_buffer.values())

    def clear(self) -> None:
        self.signal_buffer.clear()

    def clear_old_signals(self, max_age_seconds: int, now: Optional[int] = None) -> int:
        """
        Drop signals older than max_age_seconds.

        Sources left without signals are removed so diversity stays accurate.

        Returns:
            Number of signals removed
        """
        cutoff = self._now(now) - max_age_seconds
        removed = 0

        for source in list(self.signal_buffer):
            buffer = self.signal_buffer[source]
            kept = [s for s in buffer if s.timestamp >= cutoff]
            removed += len(buffer) - len(kept)

            if kept:
                self.signal_buffer[source] = deque(kept, maxlen=self.max_buffer_size)
            else:
                del self.signal_buffer[source]

        if removed:
            self.logger.debug(f"Cleared {removed} signals older than {max_age_seconds}s")

        return removed

    def get_statistics(self) -> SignalStatistics:
        """Count, mean, median, population std-dev, min and max over all buffered values"""
        values = [s.value for s in self._iter_signals()]

        if not values:
            return SignalStatistics()

        return SignalStatistics(
            count=len(values),
            mean=statistics.fmean(values),
            median=statistics.median(values),
            std_dev=statistics.pstdev(values),
            min=min(values),
            max=max(values),
            source_count=self.get_source_diversity(),
        )

    @staticmethod
    def _now(now: Optional[int]) -> int:
        return int(time.time()) if now is None else now
