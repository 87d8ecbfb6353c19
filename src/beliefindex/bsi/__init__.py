"""
Belief State Index package

Streaming fusion of belief signals into a scalar index:
- SignalAggregator: bounded per-source signal buffers
- BsiCalculator: outlier filtering, weighting, velocity and confidence
- BeliefMonitor: inflection detection and persistence validation
- BeliefEngine: per-domain pipeline wiring
"""

from .models import (
    BeliefInflection,
    BeliefSignal,
    BeliefStateIndex,
    BsiConfig,
    BsiUpdate,
    ConfigurationError,
    InflectionType,
    SignalStatistics,
    SignalType,
    SignalWeights,
)
from .aggregator import SignalAggregator
from .calculator import BsiCalculator
from .monitor import BeliefMonitor, CallbackSubscriber, InflectionSubscriber
from .sources import SignalCollector, SignalSource, StaticSignalSource
from .engine import BeliefEngine

__all__ = [
    "BeliefInflection",
    "BeliefSignal",
    "BeliefStateIndex",
    "BsiConfig",
    "BsiUpdate",
    "ConfigurationError",
    "InflectionType",
    "SignalStatistics",
    "SignalType",
    "SignalWeights",
    "SignalAggregator",
    "BsiCalculator",
    "BeliefMonitor",
    "CallbackSubscriber",
    "InflectionSubscriber",
    "SignalCollector",
    "SignalSource",
    "StaticSignalSource",
    "BeliefEngine",
]
