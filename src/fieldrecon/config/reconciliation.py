"""Thresholds and tunables for the field reconciliation engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

from .env import env_int
from .errors import ConfigurationError

DEFAULT_MIN_FUZZY_LENGTH: Final[int] = 3
DEFAULT_SUGGESTION_MIN_FREQUENCY: Final[int] = 2
DEFAULT_RECOMMEND_RATIO: Final[float] = 0.5
DEFAULT_SAMPLE_VALUES_LIMIT: Final[int] = 3
DEFAULT_SUGGESTION_COHORT_LIMIT: Final[int] = 10
DEFAULT_ATTENTION_THRESHOLD: Final[int] = 70
FUZZY_MODES: Final[frozenset[str]] = frozenset({"substring", "tokens"})


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    min_fuzzy_length: int = DEFAULT_MIN_FUZZY_LENGTH
    fuzzy_mode: str = "substring"
    suggestion_min_frequency: int = DEFAULT_SUGGESTION_MIN_FREQUENCY
    recommend_ratio: float = DEFAULT_RECOMMEND_RATIO
    sample_values_limit: int = DEFAULT_SAMPLE_VALUES_LIMIT
    suggestion_cohort_limit: int = DEFAULT_SUGGESTION_COHORT_LIMIT
    attention_threshold: int = DEFAULT_ATTENTION_THRESHOLD

    def __post_init__(self) -> None:
        if self.fuzzy_mode not in FUZZY_MODES:
            allowed = ", ".join(sorted(FUZZY_MODES))
            raise ConfigurationError(
                f"Unknown fuzzy mode {self.fuzzy_mode!r} (expected one of: {allowed})"
            )
        if not 0 < self.recommend_ratio <= 1:
            raise ConfigurationError("recommend_ratio must be within (0, 1]")


def get_reconciliation_config() -> ReconciliationConfig:
    return ReconciliationConfig(
        min_fuzzy_length=env_int(
            "FIELDRECON_MIN_FUZZY_LENGTH", DEFAULT_MIN_FUZZY_LENGTH, minimum=0
        ),
        fuzzy_mode=os.getenv("FIELDRECON_FUZZY_MODE", "substring").strip().lower()
        or "substring",
        suggestion_min_frequency=env_int(
            "FIELDRECON_SUGGESTION_MIN_FREQUENCY", DEFAULT_SUGGESTION_MIN_FREQUENCY, minimum=1
        ),
        suggestion_cohort_limit=env_int(
            "FIELDRECON_SUGGESTION_COHORT_LIMIT", DEFAULT_SUGGESTION_COHORT_LIMIT, minimum=1
        ),
        attention_threshold=env_int(
            "FIELDRECON_ATTENTION_THRESHOLD", DEFAULT_ATTENTION_THRESHOLD, minimum=0
        ),
    )
