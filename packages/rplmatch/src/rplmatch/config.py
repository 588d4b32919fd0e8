"""Configuration for the rplmatch fuzzy lookup engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from rplmatch.errors import ConfigError


@dataclass
class Thresholds:
    """Strict lower bounds for each confidence tier."""

    high: float = 0.85
    medium: float = 0.60
    low: float = 0.30

    def validate(self) -> None:
        if not 0.0 <= self.low < self.medium < self.high <= 1.0:
            raise ConfigError(
                f"thresholds must satisfy 0 <= low < medium < high <= 1, got "
                f"low={self.low} medium={self.medium} high={self.high}"
            )


@dataclass
class RunConfig:
    checkpoint_every: int = 100
    early_termination: bool = True

    def validate(self) -> None:
        if self.checkpoint_every < 1:
            raise ConfigError(f"checkpoint_every must be >= 1, got {self.checkpoint_every}")


@dataclass
class SummaryConfig:
    enabled: bool = True
    model: str = "gemini-2.0-flash"
    sample_tiers: tuple[str, ...] = ("Low", "Medium")
    max_samples: int = 5
    system_instruction: str = "You are a professional data compliance analyst."
    unavailable_text: str = "AI insights currently unavailable."
    empty_text: str = "Analysis complete. No significant patterns detected."


@dataclass
class ExportConfig:
    matched_column: str = "Fuzzy Match Result"
    similarity_column: str = "Similarity %"
    tier_column: str = "Match Status"
    sheet_name: str = "Results"
    filename_suffix: str = "_matched"


@dataclass
class MatchConfig:
    thresholds: Thresholds = field(default_factory=Thresholds)
    run: RunConfig = field(default_factory=RunConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    def validate(self) -> None:
        self.thresholds.validate()
        self.run.validate()

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> MatchConfig:
        """Build a config with overrides from RPLMATCH_* environment variables."""
        env = os.environ if environ is None else environ
        config = cls()

        try:
            if "RPLMATCH_THRESHOLD_HIGH" in env:
                config.thresholds.high = float(env["RPLMATCH_THRESHOLD_HIGH"])
            if "RPLMATCH_THRESHOLD_MEDIUM" in env:
                config.thresholds.medium = float(env["RPLMATCH_THRESHOLD_MEDIUM"])
            if "RPLMATCH_THRESHOLD_LOW" in env:
                config.thresholds.low = float(env["RPLMATCH_THRESHOLD_LOW"])
            if "RPLMATCH_CHECKPOINT_EVERY" in env:
                config.run.checkpoint_every = int(env["RPLMATCH_CHECKPOINT_EVERY"])
        except ValueError as e:
            raise ConfigError(f"invalid numeric setting: {e}") from e

        if "RPLMATCH_EARLY_TERMINATION" in env:
            config.run.early_termination = _parse_bool(env["RPLMATCH_EARLY_TERMINATION"])
        if "RPLMATCH_SUMMARY" in env:
            config.summary.enabled = _parse_bool(env["RPLMATCH_SUMMARY"])
        if "RPLMATCH_SUMMARY_MODEL" in env:
            config.summary.model = env["RPLMATCH_SUMMARY_MODEL"]

        config.validate()
        return config


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off", ""):
        return False
    raise ConfigError(f"not a boolean: {raw!r}")
