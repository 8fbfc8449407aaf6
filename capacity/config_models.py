from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from capacity import CONFIG_PATH
from capacity.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# Absence (gaps and coverage)
# =============================================================================

class AbsenceConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    min_days_for_gap_analysis: int = Field(default=90, ge=1)


# =============================================================================
# Pattern detection
# =============================================================================

class PatternDetectionConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    enabled: bool = Field(default=True)
    lookback_days: int = Field(default=30, ge=1)
    min_history_signals: int = Field(default=14, ge=0)
    min_window_signals: int = Field(default=7, ge=0)


# =============================================================================
# Experiments
# =============================================================================

class ExperimentsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    default_duration_weeks: int = Field(default=4, ge=2, le=8)
    cooldown_days_after_decline: int = Field(default=7, ge=0)
    correlation_threshold: float = Field(default=15.0, ge=0)


# =============================================================================
# Language filter
# =============================================================================

class LanguageConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    enabled: bool = Field(default=True)
    blocked_phrases: list[str] = Field(default_factory=list)
    reframe_patterns: dict[str, str] = Field(default_factory=dict)


# =============================================================================
# Storage
# =============================================================================

class StorageConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    db_path: Optional[str] = None
    signals_key: str = Field(default="@capacity:signals")


class CapacityConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    absence: AbsenceConfig = Field(default_factory=AbsenceConfig)
    patterns: PatternDetectionConfig = Field(default_factory=PatternDetectionConfig)
    experiments: ExperimentsConfig = Field(default_factory=ExperimentsConfig)
    language: LanguageConfig = Field(default_factory=LanguageConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


# =============================================================================
# load_config
# =============================================================================

def load_config(path: Path | None = None) -> CapacityConfig:
    yaml_path = path or CONFIG_PATH

    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return CapacityConfig.model_validate(raw.get("capacity", raw))
    except Exception as e:
        logger.warning(f"Config validation failed for {yaml_path}: {e}, using defaults")
        return CapacityConfig()
