"""
Beliefindex: Streaming Belief Signal Fusion

Fuses weighted, timestamped belief signals from independent sources into a
continuously updated Belief State Index and detects inflection events in it.
"""

__version__ = "0.1.0"
__author__ = "Beliefindex Team"
__description__ = "Streaming belief signal fusion and inflection detection"

# Package-level imports for convenience
from .config import Config
from .logger import get_logger

__all__ = ["Config", "get_logger", "__version__"]
