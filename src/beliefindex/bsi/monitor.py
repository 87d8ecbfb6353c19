"""
Belief Monitor

Consumes BeliefStateIndex samples, detects inflection points and notifies
subscribers. Detection runs on every update; persistence validation is
caller-driven via validate_persistence().

Concurrency: history and the subscriber list each sit behind their own lock.
An update appends and detects under the history lock, then notifies a
snapshot of the subscribers after releasing it. All subscribers for an
event run, in registration order, before update() returns. A subscriber
may therefore call back into the monitor without deadlocking.
"""

import logging
import threading
from collections import deque
from typing import Callable, Deque, List, Optional, Protocol, Sequence, Union, runtime_checkable

from .calculator import HISTORY_LIMIT
from .models import BeliefInflection, BeliefStateIndex, InflectionType

# Samples averaged by the reversal and spike detectors
DETECTION_WINDOW = 10

# Minimum velocity threshold for a spike to count
MIN_SPIKE_THRESHOLD = 0.1


@runtime_checkable
class InflectionSubscriber(Protocol):
    """Receives every inflection the monitor detects"""

    def notify(self, inflection: BeliefInflection) -> None:
        ...


class CallbackSubscriber:
    """Adapts a plain callable to the subscriber interface"""

    def __init__(self, callback: Callable[[BeliefInflection], None]):
        self.callback = callback

    def notify(self, inflection: BeliefInflection) -> None:
        self.callback(inflection)


class BeliefMonitor:
    """Detects and validates inflections in a stream of index samples"""

    def __init__(self, threshold: float = 0.5, min_persistence: int = 300):
        self.threshold = threshold
        self.min_persistence = min_persistence

        self.history: Deque[BeliefStateIndex] = deque(maxlen=HISTORY_LIMIT)
        self.subscribers: List[InflectionSubscriber] = []

        self._history_lock = threading.Lock()
        self._subscriber_lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def update(self, bsi: BeliefStateIndex) -> Optional[BeliefInflection]:
        """
        Record a sample and run the detectors against it.

        Detectors run in priority order (sentiment reversal, threshold
        crossing, velocity spike); at most one inflection fires per update.

        Returns:
            The detected inflection (unvalidated), or None
        """
        with self._history_lock:
            self.history.append(bsi.model_copy())
            inflection = self._detect_inflection(self.history, bsi)

        if inflection is not None:
            self.logger.info(
                f"{inflection.inflection_type.value} detected: "
                f"value={inflection.bsi_value:.4f}, sharpness={inflection.sharpness:.4f}",
                extra={"domain": bsi.domain}
            )
            self._notify_subscribers(inflection)

        return inflection

    def on_inflection(
        self,
        subscriber: Union[InflectionSubscriber, Callable[[BeliefInflection], None]]
    ) -> None:
        """Register a subscriber object (with notify()) or a plain callable"""
        if not isinstance(subscriber, InflectionSubscriber):
            if not callable(subscriber):
                raise TypeError("Subscriber must implement notify() or be callable")
            subscriber = CallbackSubscriber(subscriber)

        with self._subscriber_lock:
            self.subscribers.append(subscriber)

    @property
    def subscriber_count(self) -> int:
        with self._subscriber_lock:
            return len(self.subscribers)

    def _notify_subscribers(self, inflection: BeliefInflection) -> None:
        with self._subscriber_lock:
            subscribers = list(self.subscribers)

        for subscriber in subscribers:
            try:
                subscriber.notify(inflection.model_copy())
            except Exception:
                self.logger.exception(f"Error in inflection subscriber {subscriber!r}")

    def _detect_inflection(
        self,
        history: Sequence[BeliefStateIndex],
        current: BeliefStateIndex
    ) -> Optional[BeliefInflection]:
        if len(history) >= 3:
            inflection = self._check_sentiment_reversal(history, current)
            if inflection:
                return inflection

        # Crossing only needs the sample before the current one
        if len(history) >= 2:
            inflection = self._check_threshold_crossing(history, current)
            if inflection:
                return inflection

        if len(history) >= 3:
            return self._check_velocity_spike(history, current)

        return None

    @staticmethod
    def _recent(history: Sequence[BeliefStateIndex]) -> List[BeliefStateIndex]:
        start = max(0, len(history) - DETECTION_WINDOW)
        return [history[i] for i in range(start, len(history))]

    def _check_sentiment_reversal(
        self,
        history: Sequence[BeliefStateIndex],
        current: BeliefStateIndex
    ) -> Optional[BeliefInflection]:
        recent = self._recent(history)
        past_avg = sum(b.value for b in recent) / len(recent)

        if (past_avg > 0.0 and current.value < -self.threshold) or \
           (past_avg < 0.0 and current.value > self.threshold):
            return self._inflection(
                InflectionType.SENTIMENT_REVERSAL,
                current,
                sharpness=abs(current.value - past_avg)
            )

        return None

    def _check_threshold_crossing(
        self,
        history: Sequence[BeliefStateIndex],
        current: BeliefStateIndex
    ) -> Optional[BeliefInflection]:
        previous = history[-2]

        if (previous.value < self.threshold <= current.value) or \
           (previous.value > -self.threshold >= current.value):
            return self._inflection(
                InflectionType.THRESHOLD_CROSSING,
                current,
                sharpness=abs(current.value - previous.value)
            )

        return None

    def _check_velocity_spike(
        self,
        history: Sequence[BeliefStateIndex],
        current: BeliefStateIndex
    ) -> Optional[BeliefInflection]:
        recent = self._recent(history)
        avg_velocity = sum(b.velocity for b in recent) / len(recent)
        velocity_threshold = abs(avg_velocity) * 2.0

        if abs(current.velocity) > velocity_threshold and velocity_threshold > MIN_SPIKE_THRESHOLD:
            return self._inflection(
                InflectionType.VELOCITY_SPIKE,
                current,
                sharpness=abs(current.velocity - avg_velocity)
            )

        return None

    @staticmethod
    def _inflection(
        inflection_type: InflectionType,
        current: BeliefStateIndex,
        sharpness: float
    ) -> BeliefInflection:
        return BeliefInflection(
            inflection_type=inflection_type,
            timestamp=current.last_updated,
            bsi_value=current.value,
            velocity=current.velocity,
            sharpness=sharpness,
        )

    def validate_persistence(self, inflection: BeliefInflection) -> bool:
        """
        Check that an inflection's condition held for at least min_persistence.

        Considers every retained sample at or after the inflection timestamp.
        Records the measured duration and outcome on the inflection.

        Returns:
            True if the condition persisted long enough
        """
        with self._history_lock:
            post_inflection = [b for b in self.history if b.last_updated >= inflection.timestamp]

        if not post_inflection:
            inflection.validated = False
            return False

        duration = post_inflection[-1].last_updated - inflection.timestamp

        if inflection.inflection_type == InflectionType.SENTIMENT_REVERSAL:
            persisted = all(self._same_sign(inflection.bsi_value, b.value) for b in post_inflection)
        elif inflection.inflection_type == InflectionType.THRESHOLD_CROSSING:
            persisted = all(self._same_side(inflection.bsi_value, b.value) for b in post_inflection)
        else:
            # TODO: velocity spikes need their own persistence rule; until then they always persist
            self.logger.warning(
                f"No persistence rule for {inflection.inflection_type.value}, treating as persisted"
            )
            persisted = True

        result = persisted and duration >= self.min_persistence

        inflection.persistence_duration = duration
        inflection.validated = result

        return result

    @staticmethod
    def _same_sign(reference: float, value: float) -> bool:
        return (reference > 0.0 and value > 0.0) or (reference < 0.0 and value < 0.0)

    def _same_side(self, reference: float, value: float) -> bool:
        return (reference >= self.threshold and value >= self.threshold) or \
               (reference <= -self.threshold and value <= -self.threshold)

    def get_history(self) -> List[BeliefStateIndex]:
        with self._history_lock:
            return [bsi.model_copy() for bsi in self.history]

    def clear_history(self) -> None:
        with self._history_lock:
            self.history.clear()
