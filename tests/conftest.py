"""
Pytest configuration and fixtures for beliefindex tests.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest
from unittest.mock import patch

from beliefindex.bsi.models import BeliefSignal, BeliefStateIndex, BsiConfig, SignalType


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture(autouse=True)
def reset_package_loggers() -> Generator[None, None, None]:
    """Undo setup_logger() so later tests see records via caplog."""
    yield
    for name in ("beliefindex", "beliefindex.bsi"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True


@pytest.fixture
def mock_env_vars() -> Generator[dict, None, None]:
    """Mock environment variables for testing."""
    test_env = {
        "BSI_SMOOTHING_WINDOW": "120",
        "BSI_DECAY_FACTOR": "0.9",
        "BSI_MIN_SIGNAL_COUNT": "5",
        "BSI_OUTLIER_THRESHOLD": "2.0",
        "BSI_WEIGHT_MODEL_FORECAST": "2.0",
        "AGGREGATOR_MAX_BUFFER_SIZE": "50",
        "MONITOR_THRESHOLD": "0.4",
        "MONITOR_MIN_PERSISTENCE": "120",
        "LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, test_env, clear=False):
        yield test_env


@pytest.fixture
def bsi_config() -> BsiConfig:
    """Default calculator configuration."""
    return BsiConfig()


@pytest.fixture
def make_signal() -> Callable[..., BeliefSignal]:
    """Factory for belief signals with sensible defaults."""

    def _make(
        value: float,
        source: str = "oracle1",
        signal_type: SignalType = SignalType.SENTIMENT,
        weight: float = 1.0,
        timestamp: int = 1_700_000_000,
        metadata=None,
    ) -> BeliefSignal:
        return BeliefSignal(
            source=source,
            signal_type=signal_type,
            value=value,
            weight=weight,
            timestamp=timestamp,
            metadata=metadata or [],
        )

    return _make


@pytest.fixture
def make_bsi() -> Callable[..., BeliefStateIndex]:
    """Factory for index samples fed directly to a monitor."""

    def _make(
        value: float,
        last_updated: int,
        velocity: float = 0.0,
        domain: str = "BTC",
    ) -> BeliefStateIndex:
        return BeliefStateIndex(
            value=value,
            velocity=velocity,
            volatility=0.0,
            confidence=0.8,
            signal_count=5,
            domain=domain,
            last_updated=last_updated,
        )

    return _make
