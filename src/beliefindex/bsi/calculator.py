"""
Belief State Index Calculator

Turns a batch of belief signals into one BeliefStateIndex sample:

1. Z-score outlier filtering (batches of 3+ signals)
2. Effective weight = signal weight x per-type weight
3. Weighted average value
4. Velocity against a trailing history of samples
5. Volatility as population std-dev of the filtered batch
6. Confidence blending count sufficiency (60%) and low dispersion (40%)

Velocity lookback is measured in samples, not wall-clock seconds:
smoothing_window / 60 samples back, which assumes roughly one sample
per minute. Irregular sampling cadence skews velocity accordingly.
"""

import logging
import statistics
import time
from collections import deque
from typing import Deque, List, Optional, Sequence, Tuple

from .models import BeliefSignal, BeliefStateIndex, BsiConfig

HISTORY_LIMIT = 1000


class BsiCalculator:
    """Computes index samples and keeps a bounded trailing series for velocity"""

    def __init__(self, config: Optional[BsiConfig] = None):
        self.config = config or BsiConfig()
        self.config.validate_config()
        self.history: Deque[BeliefStateIndex] = deque(maxlen=HISTORY_LIMIT)
        self.logger = logging.getLogger(__name__)

    def calculate(
        self,
        signals: Sequence[BeliefSignal],
        domain: str,
        now: Optional[int] = None
    ) -> BeliefStateIndex:
        """
        Fuse a signal batch into one sample and append it to history.

        Args:
            signals: Batch to fuse, possibly empty
            domain: Tag for the produced sample
            now: Sample time in Unix seconds (defaults to the wall clock)

        Returns:
            The new BeliefStateIndex
        """
        filtered = self.filter_outliers(signals)
        if len(filtered) != len(signals):
            self.logger.debug(
                f"Outlier filter kept {len(filtered)} of {len(signals)} signals",
                extra={"domain": domain}
            )

        value = self._weighted_average(self.apply_weights(filtered))
        velocity = self._velocity(value)
        volatility = self._volatility(filtered)
        confidence = self._confidence(len(filtered), volatility)

        bsi = BeliefStateIndex(
            value=value,
            velocity=velocity,
            volatility=volatility,
            confidence=confidence,
            signal_count=len(filtered),
            domain=domain,
            last_updated=int(time.time()) if now is None else now,
        )

        # History holds its own copy so decay never touches returned samples
        self.history.append(bsi.model_copy())

        return bsi

    def filter_outliers(self, signals: Sequence[BeliefSignal]) -> List[BeliefSignal]:
        """Keep signals whose |z-score| is within outlier_threshold"""
        if len(signals) < 3:
            return list(signals)

        values = [s.value for s in signals]
        mean = statistics.fmean(values)
        std_dev = statistics.pstdev(values, mean)

        kept = []
        for signal in signals:
            z_score = abs(signal.value - mean) / std_dev if std_dev > 0 else 0.0
            if z_score <= self.config.outlier_threshold:
                kept.append(signal)
        return kept

    def apply_weights(self, signals: Sequence[BeliefSignal]) -> List[Tuple[float, float]]:
        """(value, effective weight) pairs"""
        weights = self.config.signal_weights
        return [
            (signal.value, signal.weight * weights.for_type(signal.signal_type))
            for signal in signals
        ]

    @staticmethod
    def _weighted_average(weighted: Sequence[Tuple[float, float]]) -> float:
        total_weight = sum(w for _, w in weighted)
        if not weighted or total_weight == 0:
            return 0.0
        return sum(v * w for v, w in weighted) / total_weight

    def _velocity(self, current_value: float) -> float:
        if not self.history:
            return 0.0

        window_size = max(1, self.config.smoothing_window // 60)
        lookback = max(0, len(self.history) - window_size)

        past_value = self.history[lookback].value
        return (current_value - past_value) / (len(self.history) - lookback)

    @staticmethod
    def _volatility(signals: Sequence[BeliefSignal]) -> float:
        if len(signals) < 2:
            return 0.0
        return statistics.pstdev([s.value for s in signals])

    def _confidence(self, signal_count: int, volatility: float) -> float:
        count_factor = min(1.0, signal_count / self.config.min_signal_count)
        volatility_factor = max(0.0, 1.0 - volatility)
        return max(0.0, min(1.0, count_factor * 0.6 + volatility_factor * 0.4))

    def apply_decay(self) -> None:
        """Scale every retained sample's value and velocity by decay_factor"""
        factor = self.config.decay_factor
        for bsi in self.history:
            bsi.value *= factor
            bsi.velocity *= factor

    def get_history(self) -> List[BeliefStateIndex]:
        return [bsi.model_copy() for bsi in self.history]

    def clear_history(self) -> None:
        self.history.clear()
