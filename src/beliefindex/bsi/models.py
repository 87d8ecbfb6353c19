"""
Belief State Index Models

Core data models for belief signal fusion:
- BeliefSignal: one weighted, timestamped observation from a source
- BeliefStateIndex: one fused sample (value, velocity, volatility, confidence)
- BeliefInflection: a detected structural change in the index series
- BsiConfig / SignalWeights: calculator configuration
- SignalStatistics / BsiUpdate: read-side summaries

Timestamps are Unix seconds (int) and every real-valued field is a float,
so JSON round-trips through model_dump_json/model_validate_json are exact.
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ConfigurationError(ValueError):
    """Raised when a BsiConfig fails validation."""


class SignalType(str, Enum):
    """Closed set of belief signal kinds."""
    SENTIMENT = "sentiment"
    PROBABILITY = "probability"
    NARRATIVE = "narrative"
    MODEL_FORECAST = "model_forecast"
    CONSENSUS_METRIC = "consensus_metric"


class InflectionType(str, Enum):
    """Structural change taxonomy for the index series"""
    SENTIMENT_REVERSAL = "sentiment_reversal"
    THRESHOLD_CROSSING = "threshold_crossing"
    VELOCITY_SPIKE = "velocity_spike"
    # Reserved: no detector emits these yet
    CONSENSUS_FORMATION = "consensus_formation"
    CONSENSUS_FRAGMENTATION = "consensus_fragmentation"
    VELOCITY_STABILIZATION = "velocity_stabilization"


class BeliefSignal(BaseModel):
    """
    Atomic belief observation from a single source.

    Values are nominally normalized to [-1, 1] but not enforced here;
    range checks belong to the producing source.
    """

    model_config = ConfigDict(frozen=True)

    source: str = Field(..., description="Signal source identifier")
    signal_type: SignalType = Field(..., description="Kind of signal")
    value: float = Field(..., description="Signed signal value")
    weight: float = Field(default=1.0, description="Source-assigned importance")
    timestamp: int = Field(..., description="Observation time (Unix seconds)")
    metadata: List[Tuple[str, str]] = Field(
        default_factory=list,
        description="Ordered key/value pairs, duplicates allowed"
    )

    def metadata_values(self, key: str) -> List[str]:
        """All metadata values stored under key, in insertion order"""
        return [v for k, v in self.metadata if k == key]


class BeliefStateIndex(BaseModel):
    """Fused belief sample for one domain"""

    value: float = Field(..., description="Fused value, nominally in [-1, 1]")
    velocity: float = Field(default=0.0, description="Rate of change per sample")
    volatility: float = Field(default=0.0, ge=0.0, description="Dispersion of contributing signals")
    confidence: float = Field(default=0.0, ge=0.0, le=1.0, description="Confidence score (0-1)")
    signal_count: int = Field(default=0, ge=0, description="Signals surviving outlier filtering")
    domain: str = Field(..., description="Tracked subject")
    last_updated: int = Field(default=0, description="Sample time (Unix seconds)")

    @classmethod
    def empty(cls, domain: str) -> "BeliefStateIndex":
        """Zeroed sample for a domain with no observations yet"""
        return cls(value=0.0, domain=domain)

    def is_bullish(self) -> bool:
        return self.value > 0.3

    def is_bearish(self) -> bool:
        return self.value < -0.3

    def is_neutral(self) -> bool:
        return abs(self.value) <= 0.3

    def is_accelerating(self) -> bool:
        return abs(self.velocity) > 0.1

    def is_volatile(self) -> bool:
        return self.volatility > 0.5


class BeliefInflection(BaseModel):
    """Detected inflection in the index series"""

    inflection_type: InflectionType = Field(..., description="Detector that fired")
    timestamp: int = Field(..., description="last_updated of the triggering sample")
    bsi_value: float = Field(..., description="Index value at inflection")
    velocity: float = Field(..., description="Index velocity at inflection")
    sharpness: float = Field(..., ge=0.0, description="Magnitude of the triggering deviation")
    persistence_duration: int = Field(default=0, ge=0, description="Seconds the condition held")
    validated: bool = Field(default=False, description="Set by persistence validation")


class SignalWeights(BaseModel):
    """Per-signal-type weight multipliers"""

    sentiment: float = Field(default=1.0)
    probability: float = Field(default=1.2)
    narrative: float = Field(default=0.8)
    model_forecast: float = Field(default=1.5)
    consensus_metric: float = Field(default=1.3)

    def for_type(self, signal_type: SignalType) -> float:
        """Multiplier applied to signals of the given type"""
        return getattr(self, signal_type.value)


class BsiConfig(BaseModel):
    """
    Calculator configuration.

    Fields are unconstrained and construction always succeeds; call
    validate() before handing the config to a calculator.

    Note: validate() here is an instance method that checks field ranges.
    It replaces pydantic's deprecated BaseModel.validate classmethod, so
    never call it on the class. validate_config() is the same check under
    a name pydantic does not use.
    """

    smoothing_window: int = Field(default=300, description="Velocity smoothing window (seconds)")
    decay_factor: float = Field(default=0.95, description="History decay multiplier, in (0, 1]")
    min_signal_count: int = Field(default=3, description="Signal count for full count-confidence")
    outlier_threshold: float = Field(default=2.5, description="Z-score cutoff for outliers")
    signal_weights: SignalWeights = Field(default_factory=SignalWeights)

    def validate(self) -> None:
        """Check the configuration; see validate_config()"""
        self.validate_config()

    def validate_config(self) -> None:
        """
        Check every field independently.

        Raises:
            ConfigurationError: on the first invalid field
        """
        if self.smoothing_window <= 0:
            raise ConfigurationError("Smoothing window must be greater than 0")

        if self.decay_factor <= 0.0 or self.decay_factor > 1.0:
            raise ConfigurationError(
                f"Decay factor must be in (0.0, 1.0], got {self.decay_factor}"
            )

        if self.min_signal_count <= 0:
            raise ConfigurationError("Minimum signal count must be greater than 0")

        if self.outlier_threshold <= 0.0:
            raise ConfigurationError(
                f"Outlier threshold must be positive, got {self.outlier_threshold}"
            )

        for signal_type in SignalType:
            weight = self.signal_weights.for_type(signal_type)
            if weight <= 0.0:
                raise ConfigurationError(
                    f"Signal weight for {signal_type.value} must be positive, got {weight}"
                )


class SignalStatistics(BaseModel):
    """Summary statistics over an aggregator buffer"""

    count: int = 0
    mean: float = 0.0
    median: float = 0.0
    std_dev: float = 0.0
    min: float = 0.0
    max: float = 0.0
    source_count: int = 0


class BsiUpdate(BaseModel):
    """Result of one engine step"""

    bsi: BeliefStateIndex
    signals: List[BeliefSignal] = Field(default_factory=list, description="Batch fed to the calculator")
    timestamp: int = Field(..., description="Step time (Unix seconds)")
    inflection: Optional[BeliefInflection] = None
