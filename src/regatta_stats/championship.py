"""regatta_stats.championship

Championship detection for regatta entries that carry only a free-text
regatta name (no championship flag on the source record).

The heuristic sits behind the ChampionshipClassifier protocol so that it can
be tuned (or replaced by a lookup table) without touching normalization.
"""

from __future__ import annotations

import re
from typing import Protocol

# Two-letter acronyms (DM/EM/WM) count only as the leading word of the name.
DEFAULT_CHAMPIONSHIP_PATTERN = r"meisterschaft|^dm\b|^em\b|^wm\b|deutsche|europa|welt"


class ChampionshipClassifier(Protocol):
    def is_championship(self, regatta_name: str | None) -> bool: ...


class RegexChampionshipClassifier:
    """Case-insensitive regex search against the regatta name."""

    def __init__(self, pattern: str = DEFAULT_CHAMPIONSHIP_PATTERN) -> None:
        self.pattern = pattern
        self._regex = re.compile(pattern, re.IGNORECASE)

    def is_championship(self, regatta_name: str | None) -> bool:
        if not regatta_name:
            return False
        return self._regex.search(regatta_name) is not None

    def __repr__(self) -> str:
        return f"RegexChampionshipClassifier({self.pattern!r})"


DEFAULT_CLASSIFIER = RegexChampionshipClassifier()
