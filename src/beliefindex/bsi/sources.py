"""
Signal Sources

Interface for external belief signal providers and a collector that fans
a domain query out to several of them. Provider-specific fetch/parse
logic lives outside this package; implementations subclass SignalSource.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from ..logger import get_domain_adapter
from .models import BeliefSignal, SignalType


class SignalSource(ABC):
    """A provider that produces one belief signal per domain query"""

    @property
    @abstractmethod
    def name(self) -> str:
        """Source identifier, used as BeliefSignal.source"""

    @property
    def update_frequency(self) -> int:
        """Suggested polling interval in seconds"""
        return 60

    @abstractmethod
    async def query(self, domain: str) -> BeliefSignal:
        """Fetch the current signal for a domain; may raise on provider failure"""


class StaticSignalSource(SignalSource):
    """Source that always reports the same value, for replays and tests"""

    def __init__(
        self,
        name: str,
        signal_type: SignalType,
        value: float,
        weight: float = 1.0,
        update_frequency: int = 60
    ):
        self._name = name
        self.signal_type = signal_type
        self.value = value
        self.weight = weight
        self._update_frequency = update_frequency

    @property
    def name(self) -> str:
        return self._name

    @property
    def update_frequency(self) -> int:
        return self._update_frequency

    async def query(self, domain: str) -> BeliefSignal:
        return BeliefSignal(
            source=self._name,
            signal_type=self.signal_type,
            value=self.value,
            weight=self.weight,
            timestamp=int(time.time()),
            metadata=[("domain", domain)],
        )


class SignalCollector:
    """Queries several sources concurrently, skipping any that fail"""

    def __init__(self, sources: Optional[Sequence[SignalSource]] = None):
        self.sources: List[SignalSource] = list(sources or [])
        self.logger = logging.getLogger(__name__)
        self.failure_counts = {source.name: 0 for source in self.sources}

    def add_source(self, source: SignalSource) -> None:
        self.sources.append(source)
        self.failure_counts.setdefault(source.name, 0)

    async def query_all(self, domain: str) -> List[BeliefSignal]:
        """
        Query every source for a domain.

        A failing source is logged and left out; a partial (or empty)
        result is a normal outcome, not an error.
        """
        if not self.sources:
            return []

        results = await asyncio.gather(
            *(source.query(domain) for source in self.sources),
            return_exceptions=True
        )

        log = get_domain_adapter(domain, logger=self.logger)

        signals = []
        for source, result in zip(self.sources, results):
            if isinstance(result, BaseException):
                self.failure_counts[source.name] = self.failure_counts.get(source.name, 0) + 1
                log.warning(
                    f"Source {source.name} failed: {result}",
                    extra={"source": source.name}
                )
                continue
            signals.append(result)

        log.debug(f"Collected {len(signals)}/{len(self.sources)} signals")
        return signals

    def get_failure_stats(self) -> List[Tuple[str, int]]:
        """(source name, failure count) per registered source"""
        return [(source.name, self.failure_counts.get(source.name, 0)) for source in self.sources]
