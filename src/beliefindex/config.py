"""
Configuration management for the belief index engine.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .bsi.models import BsiConfig, SignalWeights


class AggregatorSettings(BaseModel):
    """Signal buffering settings."""

    max_buffer_size: int = Field(default=1000, ge=1)
    recent_window_seconds: int = Field(default=300, ge=1)
    max_signal_age_seconds: int = Field(default=3600, ge=1)


class MonitorSettings(BaseModel):
    """Inflection detection settings."""

    threshold: float = Field(default=0.5, gt=0.0)
    min_persistence: int = Field(default=300, ge=0)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO")
    file_path: str = Field(default="./logs/beliefindex.log")
    max_size: str = Field(default="10MB")
    backup_count: int = Field(default=5)


class Config(BaseModel):
    """Main configuration class."""

    bsi: BsiConfig = Field(default_factory=BsiConfig)
    aggregator: AggregatorSettings = Field(default_factory=AggregatorSettings)
    monitor: MonitorSettings = Field(default_factory=MonitorSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load_from_env(cls, env_file: Optional[str] = None) -> "Config":
        """Load configuration from environment variables."""
        if env_file:
            load_dotenv(env_file)
        else:
            # Try to load from .env file in current directory
            env_path = Path(".env")
            if env_path.exists():
                load_dotenv(env_path)

        # Calculator config; validation is left to BsiConfig.validate_config()
        bsi = BsiConfig(
            smoothing_window=int(os.getenv("BSI_SMOOTHING_WINDOW", "300")),
            decay_factor=float(os.getenv("BSI_DECAY_FACTOR", "0.95")),
            min_signal_count=int(os.getenv("BSI_MIN_SIGNAL_COUNT", "3")),
            outlier_threshold=float(os.getenv("BSI_OUTLIER_THRESHOLD", "2.5")),
            signal_weights=SignalWeights(
                sentiment=float(os.getenv("BSI_WEIGHT_SENTIMENT", "1.0")),
                probability=float(os.getenv("BSI_WEIGHT_PROBABILITY", "1.2")),
                narrative=float(os.getenv("BSI_WEIGHT_NARRATIVE", "0.8")),
                model_forecast=float(os.getenv("BSI_WEIGHT_MODEL_FORECAST", "1.5")),
                consensus_metric=float(os.getenv("BSI_WEIGHT_CONSENSUS_METRIC", "1.3")),
            )
        )

        aggregator = AggregatorSettings(
            max_buffer_size=int(os.getenv("AGGREGATOR_MAX_BUFFER_SIZE", "1000")),
            recent_window_seconds=int(os.getenv("AGGREGATOR_RECENT_WINDOW", "300")),
            max_signal_age_seconds=int(os.getenv("AGGREGATOR_MAX_SIGNAL_AGE", "3600"))
        )

        monitor = MonitorSettings(
            threshold=float(os.getenv("MONITOR_THRESHOLD", "0.5")),
            min_persistence=int(os.getenv("MONITOR_MIN_PERSISTENCE", "300"))
        )

        logging = LoggingConfig(
            level=os.getenv("LOG_LEVEL", "INFO"),
            file_path=os.getenv("LOG_FILE_PATH", "./logs/beliefindex.log"),
            max_size=os.getenv("LOG_MAX_SIZE", "10MB"),
            backup_count=int(os.getenv("LOG_BACKUP_COUNT", "5"))
        )

        return cls(
            bsi=bsi,
            aggregator=aggregator,
            monitor=monitor,
            logging=logging
        )
