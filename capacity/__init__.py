"""Capacity - Longitudinal signal analysis for personal capacity tracking

Philosophy:
    Absence is data, not failure.
    A missing check-in says nothing about the person, only about the record.
    Patterns prompt questions, never conclusions.

Core Principle:
    Everything the user sees is derived at query time from their own
    signals. Nothing about absence is ever stored, and nothing about a
    correlation is ever presented as a cause.

Components:
    absence/: Gap and coverage derivation
        - gap_detection.py: Inter-signal gaps and their categories
        - coverage.py: Share of calendar days holding a signal
        - gap_analysis.py: The 90-day gate in front of both

    experiments/: Curiosity engine
        - patterns.py: Recurring low-capacity patterns
        - suggestions.py: Fixed, neutral experiment prompts per pattern
        - storage.py: Single-active experiment lifecycle and daily log
        - analysis.py: Followed vs not-followed correlation

    language_filter.py: Blocks failure/deficiency phrasing in output
    store.py: Key/value persistence contract and signal loading

Safety Rules:
    1. Gap information never reaches a view shorter than 90 days
    2. Neutral language only ("Signals present on X of Y days")
    3. Correlation observed, causation unknown
    4. Graceful degradation when data is insufficient

Database: data/capacity.db
    - kv_store: Whole-value key/value records

Configuration: args/capacity.yaml
"""

from pathlib import Path

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"
DATA_DIR = PROJECT_ROOT / "data"
DB_PATH = DATA_DIR / "capacity.db"
CONFIG_PATH = ARGS_DIR / "capacity.yaml"

# Milliseconds in a day
MS_PER_DAY = 24 * 60 * 60 * 1000

__version__ = "0.3.0"

__all__ = [
    "PROJECT_ROOT",
    "ARGS_DIR",
    "DATA_DIR",
    "DB_PATH",
    "CONFIG_PATH",
    "MS_PER_DAY",
    "__version__",
]
