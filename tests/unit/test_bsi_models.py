"""
Unit tests for belief index data models and configuration validation.
"""

import pytest
from pydantic import ValidationError

from beliefindex.bsi.models import (
    BeliefInflection,
    BeliefSignal,
    BeliefStateIndex,
    BsiConfig,
    ConfigurationError,
    InflectionType,
    SignalStatistics,
    SignalType,
    SignalWeights,
)


class TestBeliefSignal:
    """Test belief signal model"""

    def test_signal_is_immutable(self, make_signal):
        signal = make_signal(0.5)

        with pytest.raises(ValidationError):
            signal.value = 0.9

    def test_metadata_preserves_order_and_duplicates(self, make_signal):
        signal = make_signal(
            0.5,
            metadata=[("tag", "a"), ("url", "x"), ("tag", "b")]
        )

        assert signal.metadata == [("tag", "a"), ("url", "x"), ("tag", "b")]
        assert signal.metadata_values("tag") == ["a", "b"]
        assert signal.metadata_values("missing") == []

    def test_json_round_trip(self, make_signal):
        signal = make_signal(
            -0.123456789,
            signal_type=SignalType.MODEL_FORECAST,
            weight=1.75,
            timestamp=1_700_000_123,
            metadata=[("k", "v")]
        )

        restored = BeliefSignal.model_validate_json(signal.model_dump_json())

        assert restored == signal
        assert restored.timestamp == 1_700_000_123
        assert restored.signal_type is SignalType.MODEL_FORECAST


class TestBeliefStateIndex:
    """Test index sample model and sentiment predicates"""

    def test_empty_sample(self):
        bsi = BeliefStateIndex.empty("BTC")

        assert bsi.value == 0.0
        assert bsi.confidence == 0.0
        assert bsi.signal_count == 0
        assert bsi.domain == "BTC"

    def test_sentiment_predicates(self):
        bsi = BeliefStateIndex.empty("BTC")

        bsi.value = 0.5
        assert bsi.is_bullish()
        assert not bsi.is_bearish()

        bsi.value = -0.5
        assert bsi.is_bearish()
        assert not bsi.is_bullish()

        bsi.value = 0.1
        assert bsi.is_neutral()

    def test_motion_predicates(self):
        bsi = BeliefStateIndex(value=0.2, velocity=-0.2, volatility=0.6, domain="ETH")

        assert bsi.is_accelerating()
        assert bsi.is_volatile()

    def test_confidence_bounds_enforced(self):
        with pytest.raises(ValidationError):
            BeliefStateIndex(value=0.0, confidence=1.5, domain="BTC")

    def test_json_round_trip(self):
        bsi = BeliefStateIndex(
            value=0.1 + 0.2,
            velocity=-1e-9,
            volatility=0.25,
            confidence=0.875,
            signal_count=4,
            domain="BTC",
            last_updated=-5,
        )

        assert BeliefStateIndex.model_validate_json(bsi.model_dump_json()) == bsi


class TestBeliefInflection:
    """Test inflection model defaults"""

    def test_defaults_unvalidated(self):
        inflection = BeliefInflection(
            inflection_type=InflectionType.VELOCITY_SPIKE,
            timestamp=1000,
            bsi_value=0.2,
            velocity=0.4,
            sharpness=0.3,
        )

        assert inflection.validated is False
        assert inflection.persistence_duration == 0

    def test_reserved_types_exist(self):
        assert InflectionType("consensus_formation") is InflectionType.CONSENSUS_FORMATION
        assert InflectionType("velocity_stabilization") is InflectionType.VELOCITY_STABILIZATION


class TestBsiConfig:
    """Test calculator configuration validation"""

    def test_defaults_validate(self, bsi_config):
        bsi_config.validate()

        assert bsi_config.smoothing_window == 300
        assert bsi_config.decay_factor == 0.95
        assert bsi_config.min_signal_count == 3
        assert bsi_config.outlier_threshold == 2.5

    def test_default_signal_weights(self):
        weights = SignalWeights()

        assert weights.for_type(SignalType.SENTIMENT) == 1.0
        assert weights.for_type(SignalType.PROBABILITY) == 1.2
        assert weights.for_type(SignalType.NARRATIVE) == 0.8
        assert weights.for_type(SignalType.MODEL_FORECAST) == 1.5
        assert weights.for_type(SignalType.CONSENSUS_METRIC) == 1.3

    def test_construction_never_fails(self):
        config = BsiConfig(smoothing_window=0, decay_factor=2.0, min_signal_count=0, outlier_threshold=-1)

        assert config.smoothing_window == 0

    @pytest.mark.parametrize("overrides, message", [
        ({"smoothing_window": 0}, "Smoothing window"),
        ({"decay_factor": 0.0}, "Decay factor"),
        ({"decay_factor": 1.01}, "Decay factor"),
        ({"min_signal_count": 0}, "Minimum signal count"),
        ({"outlier_threshold": 0.0}, "Outlier threshold"),
        ({"signal_weights": SignalWeights(narrative=0.0)}, "narrative"),
    ])
    def test_invalid_fields_rejected(self, overrides, message):
        config = BsiConfig(**overrides)

        with pytest.raises(ConfigurationError, match=message):
            config.validate()

    def test_validate_config_matches_validate(self):
        config = BsiConfig(min_signal_count=0)

        with pytest.raises(ConfigurationError, match="Minimum signal count"):
            config.validate_config()
        with pytest.raises(ConfigurationError, match="Minimum signal count"):
            config.validate()

        assert BsiConfig().validate_config() is None

    def test_decay_factor_of_one_is_valid(self):
        BsiConfig(decay_factor=1.0).validate()

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)


def test_statistics_default_is_zeroed():
    stats = SignalStatistics()

    assert stats.count == 0
    assert stats.mean == 0.0
    assert stats.median == 0.0
    assert stats.source_count == 0
