"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so the app layer can build them safely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AnalysisConfig:
    """Week horizons and scheduling for the analyzer."""

    weeks: int = 6
    verifier_weeks: int = 7
    max_concurrency: int = 1

    def __post_init__(self) -> None:
        if self.weeks < 1 or self.verifier_weeks < 1:
            raise ValueError("Week horizons must be at least 1")
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
