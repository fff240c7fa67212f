"""Load, validate, and hot-reload the CycleCast engine configuration.

The config lives in ``cycle_config.yaml`` alongside this module.  It is
loaded once on first use and cached.  Call ``reload_engine_config()`` to
re-read from disk after an edit — no restart required.

Usage::

    from cyclecast.engine.config_loader import get_engine_config

    config = get_engine_config()
    config.analysis.default_cycle_length        # 28
    config.confidence.multipliers.ovulation     # 0.8
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("cyclecast.engine.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "cycle_config.yaml"

TARGET_LENGTH_POLICIES = ("fixed", "learned")


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class AnalysisConfig:
    """Cycle statistics settings."""

    default_cycle_length: int = 28
    default_period_length: int = 5
    recent_window: int = 6
    regularity_penalty: float = 8.0


@dataclass
class ConfidenceTier:
    """Bonus applied when at least ``min_cycles`` cycle samples exist."""

    min_cycles: int
    bonus: float


@dataclass
class ConfidenceMultipliers:
    """Per-category scaling applied to the base confidence."""

    next_period: float = 0.85
    ovulation: float = 0.80
    future_cycles: float = 0.75


@dataclass
class ConfidenceConfig:
    """Base confidence scoring settings."""

    base: float = 50.0
    cycle_tiers: list[ConfidenceTier] = field(default_factory=list)
    regularity_weight: float = 20.0
    recent_bonus: float = 10.0
    recent_bonus_min_cycles: int = 3
    minimum: float = 30.0
    maximum: float = 95.0
    multipliers: ConfidenceMultipliers = field(default_factory=ConfidenceMultipliers)

    def tier_bonus(self, total_cycles: int) -> float:
        """Return the bonus of the highest tier ``total_cycles`` reaches."""
        for tier in sorted(self.cycle_tiers, key=lambda t: t.min_cycles, reverse=True):
            if total_cycles >= tier.min_cycles:
                return tier.bonus
        return 0.0


@dataclass
class OvulationConfig:
    """Ovulation and fertile window settings."""

    luteal_phase_days: int = 14
    regular_threshold: int = 70
    jitter_irregular: bool = True
    luteal_jitter_min: float = 13.0
    luteal_jitter_max: float = 16.0
    fertile_days_before: int = 5
    fertile_days_after: int = 1


@dataclass
class FutureCyclesConfig:
    """Long-horizon forecast settings."""

    count: int = 6
    confidence_decay: float = 5.0
    confidence_floor: float = 70.0


@dataclass
class ScheduleEntry:
    """Offsets (from the last logged day) forecast for a given logged-day count."""

    possible: list[int]
    predicted: list[int]


@dataclass
class InProgressConfig:
    """In-progress period forecast settings."""

    target_length_policy: str = "fixed"
    complete_after_days: int = 5
    possible_confidence: int = 85
    predicted_confidence: int = 75
    max_possible_days: int = 3
    schedule: dict[int, ScheduleEntry] = field(default_factory=dict)


@dataclass
class InsightsConfig:
    """Thresholds that trigger advisory messages."""

    min_cycles: int = 3
    irregular_score: int = 50
    very_regular: int = 80
    moderately_regular: int = 60
    some_irregularity: int = 40
    short_cycle_days: int = 21
    long_cycle_days: int = 35
    short_period_days: int = 3
    long_period_days: int = 7


@dataclass
class HistoryConfig:
    """Limits applied when editing period history."""

    max_period_days: int = 10


@dataclass
class EngineConfig:
    """Complete, validated engine configuration.

    This is the single in-memory representation of cycle_config.yaml.
    Analyzer, forecasters, classifier, and history helpers all read from
    this object.
    """

    version: str
    analysis: AnalysisConfig
    confidence: ConfidenceConfig
    ovulation: OvulationConfig
    future_cycles: FutureCyclesConfig
    in_progress: InProgressConfig
    insights: InsightsConfig
    history: HistoryConfig


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when cycle_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Engine config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> EngineConfig:
    """Validate the raw YAML dict and construct an EngineConfig.

    Missing sections fall back to the built-in defaults; values that are
    present must be well-formed.  All problems are collected and reported
    together.

    Raises:
        ConfigValidationError: If any value is invalid.
    """
    if not isinstance(raw, dict):
        raise ConfigValidationError(
            f"cycle_config.yaml must be a mapping at the top level, got {type(raw).__name__}"
        )

    errors: list[str] = []

    def _number(section: dict, key: str, default: Any, path: str, cast=float) -> Any:
        value = section.get(key, default)
        try:
            return cast(value)
        except (TypeError, ValueError):
            errors.append(f"{path}.{key} must be a number, got {value!r}")
            return default

    def _mapping(parent: dict, key: str, path: str) -> dict:
        value = parent.get(key, {}) or {}
        if not isinstance(value, dict):
            errors.append(f"'{path}' must be a mapping")
            return {}
        return value

    def _section(key: str) -> dict:
        return _mapping(raw, key, key)

    version = str(raw.get("version", "1.0"))

    # ── Analysis ──
    an_raw = _section("analysis")
    analysis = AnalysisConfig(
        default_cycle_length=_number(an_raw, "default_cycle_length", 28, "analysis", int),
        default_period_length=_number(an_raw, "default_period_length", 5, "analysis", int),
        recent_window=_number(an_raw, "recent_window", 6, "analysis", int),
        regularity_penalty=_number(an_raw, "regularity_penalty", 8.0, "analysis"),
    )
    if analysis.default_cycle_length <= 0 or analysis.default_period_length <= 0:
        errors.append("analysis defaults must be positive day counts")
    if analysis.recent_window < 1:
        errors.append("analysis.recent_window must be at least 1")

    # ── Confidence ──
    cf_raw = _section("confidence")
    tiers: list[ConfidenceTier] = []
    tiers_raw = cf_raw.get("cycle_tiers", []) or []
    if not isinstance(tiers_raw, list):
        errors.append("'confidence.cycle_tiers' must be a list")
        tiers_raw = []
    for i, tier in enumerate(tiers_raw):
        if not isinstance(tier, dict):
            errors.append(f"confidence.cycle_tiers[{i}] must be a mapping")
            continue
        tiers.append(
            ConfidenceTier(
                min_cycles=_number(tier, "min_cycles", 0, f"confidence.cycle_tiers[{i}]", int),
                bonus=_number(tier, "bonus", 0.0, f"confidence.cycle_tiers[{i}]"),
            )
        )
    mult_raw = _mapping(cf_raw, "multipliers", "confidence.multipliers")
    multipliers = ConfidenceMultipliers(
        next_period=_number(mult_raw, "next_period", 0.85, "confidence.multipliers"),
        ovulation=_number(mult_raw, "ovulation", 0.80, "confidence.multipliers"),
        future_cycles=_number(mult_raw, "future_cycles", 0.75, "confidence.multipliers"),
    )
    for name in ("next_period", "ovulation", "future_cycles"):
        m = getattr(multipliers, name)
        if not (0.0 < m <= 1.0):
            errors.append(f"confidence.multipliers.{name} = {m} is out of range (0.0, 1.0]")
    confidence = ConfidenceConfig(
        base=_number(cf_raw, "base", 50.0, "confidence"),
        cycle_tiers=tiers,
        regularity_weight=_number(cf_raw, "regularity_weight", 20.0, "confidence"),
        recent_bonus=_number(cf_raw, "recent_bonus", 10.0, "confidence"),
        recent_bonus_min_cycles=_number(cf_raw, "recent_bonus_min_cycles", 3, "confidence", int),
        minimum=_number(cf_raw, "minimum", 30.0, "confidence"),
        maximum=_number(cf_raw, "maximum", 95.0, "confidence"),
        multipliers=multipliers,
    )
    if confidence.minimum > confidence.maximum:
        errors.append(
            f"confidence.minimum ({confidence.minimum}) exceeds maximum ({confidence.maximum})"
        )

    # ── Ovulation ──
    ov_raw = _section("ovulation")
    ovulation = OvulationConfig(
        luteal_phase_days=_number(ov_raw, "luteal_phase_days", 14, "ovulation", int),
        regular_threshold=_number(ov_raw, "regular_threshold", 70, "ovulation", int),
        jitter_irregular=bool(ov_raw.get("jitter_irregular", True)),
        luteal_jitter_min=_number(ov_raw, "luteal_jitter_min", 13.0, "ovulation"),
        luteal_jitter_max=_number(ov_raw, "luteal_jitter_max", 16.0, "ovulation"),
        fertile_days_before=_number(ov_raw, "fertile_days_before", 5, "ovulation", int),
        fertile_days_after=_number(ov_raw, "fertile_days_after", 1, "ovulation", int),
    )
    if ovulation.luteal_jitter_min > ovulation.luteal_jitter_max:
        errors.append("ovulation.luteal_jitter_min must not exceed luteal_jitter_max")
    if ovulation.fertile_days_before < 0 or ovulation.fertile_days_after < 0:
        errors.append("ovulation fertile window offsets must be non-negative")

    # ── Future cycles ──
    fc_raw = _section("future_cycles")
    future_cycles = FutureCyclesConfig(
        count=_number(fc_raw, "count", 6, "future_cycles", int),
        confidence_decay=_number(fc_raw, "confidence_decay", 5.0, "future_cycles"),
        confidence_floor=_number(fc_raw, "confidence_floor", 70.0, "future_cycles"),
    )
    if future_cycles.count < 0:
        errors.append("future_cycles.count must be non-negative")
    if future_cycles.confidence_decay < 0:
        errors.append("future_cycles.confidence_decay must be non-negative")

    # ── In-progress period ──
    ip_raw = _section("in_progress")
    policy = str(ip_raw.get("target_length_policy", "fixed"))
    if policy not in TARGET_LENGTH_POLICIES:
        errors.append(
            f"in_progress.target_length_policy must be one of {TARGET_LENGTH_POLICIES}, "
            f"got {policy!r}"
        )
    schedule: dict[int, ScheduleEntry] = {}
    for logged, entry in _mapping(ip_raw, "schedule", "in_progress.schedule").items():
        try:
            logged_days = int(logged)
            schedule[logged_days] = ScheduleEntry(
                possible=[int(o) for o in (entry or {}).get("possible", []) or []],
                predicted=[int(o) for o in (entry or {}).get("predicted", []) or []],
            )
        except (AttributeError, TypeError, ValueError):
            errors.append(f"in_progress.schedule.{logged} must map to lists of day offsets")
    in_progress = InProgressConfig(
        target_length_policy=policy,
        complete_after_days=_number(ip_raw, "complete_after_days", 5, "in_progress", int),
        possible_confidence=_number(ip_raw, "possible_confidence", 85, "in_progress", int),
        predicted_confidence=_number(ip_raw, "predicted_confidence", 75, "in_progress", int),
        max_possible_days=_number(ip_raw, "max_possible_days", 3, "in_progress", int),
        schedule=schedule,
    )

    # ── Insights ──
    in_raw = _section("insights")
    bands_raw = _mapping(in_raw, "regularity_bands", "insights.regularity_bands")
    insights = InsightsConfig(
        min_cycles=_number(in_raw, "min_cycles", 3, "insights", int),
        irregular_score=_number(in_raw, "irregular_score", 50, "insights", int),
        very_regular=_number(bands_raw, "very_regular", 80, "insights.regularity_bands", int),
        moderately_regular=_number(
            bands_raw, "moderately_regular", 60, "insights.regularity_bands", int
        ),
        some_irregularity=_number(
            bands_raw, "some_irregularity", 40, "insights.regularity_bands", int
        ),
        short_cycle_days=_number(in_raw, "short_cycle_days", 21, "insights", int),
        long_cycle_days=_number(in_raw, "long_cycle_days", 35, "insights", int),
        short_period_days=_number(in_raw, "short_period_days", 3, "insights", int),
        long_period_days=_number(in_raw, "long_period_days", 7, "insights", int),
    )
    if not (insights.very_regular >= insights.moderately_regular >= insights.some_irregularity):
        errors.append("insights.regularity_bands must be in descending order")

    # ── History ──
    hi_raw = _section("history")
    history = HistoryConfig(
        max_period_days=_number(hi_raw, "max_period_days", 10, "history", int),
    )
    if history.max_period_days < 1:
        errors.append("history.max_period_days must be at least 1")

    if errors:
        raise ConfigValidationError(
            f"cycle_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return EngineConfig(
        version=version,
        analysis=analysis,
        confidence=confidence,
        ovulation=ovulation,
        future_cycles=future_cycles,
        in_progress=in_progress,
        insights=insights,
        history=history,
    )


def load_engine_config(path: Path | None = None) -> EngineConfig:
    """Load and validate the engine config from disk.

    Args:
        path: Override path to YAML. Uses the bundled cycle_config.yaml by default.

    Returns:
        Validated EngineConfig instance.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded engine config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: EngineConfig | None = None
_config_lock = threading.Lock()


def get_engine_config() -> EngineConfig:
    """Return the global EngineConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_engine_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_engine_config()
    return _config


def reload_engine_config(path: Path | None = None) -> EngineConfig:
    """Reload the engine config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_engine_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info(
        "Reloaded engine config: %s → %s",
        old_version,
        new_config.version,
    )
    return new_config
