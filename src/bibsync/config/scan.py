"""Matching settings for external-change scans."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from bibsync.domain.reconciliation.similarity import (
    DEFAULT_MATCH_THRESHOLD,
    ORACLES,
    CheckedSimilarity,
    oracle_named,
)

from .env import env_choice, env_float

MATCH_THRESHOLD_ENV: Final[str] = "BIBSYNC_MATCH_THRESHOLD"
SIMILARITY_ENV: Final[str] = "BIBSYNC_SIMILARITY"
DEFAULT_SIMILARITY: Final[str] = "strict"


@dataclass(frozen=True, slots=True)
class ScanConfig:
    match_threshold: float = DEFAULT_MATCH_THRESHOLD
    similarity: str = DEFAULT_SIMILARITY

    def build_similarity(self) -> CheckedSimilarity:
        return CheckedSimilarity(oracle_named(self.similarity))


def get_scan_config() -> ScanConfig:
    return ScanConfig(
        match_threshold=env_float(
            MATCH_THRESHOLD_ENV, DEFAULT_MATCH_THRESHOLD, minimum=0.0, maximum=1.0
        ),
        similarity=env_choice(SIMILARITY_ENV, DEFAULT_SIMILARITY, ORACLES),
    )
