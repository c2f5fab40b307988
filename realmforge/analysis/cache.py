"""
Deck analysis cache.

Memoizes combo and archetype analysis per distinct deck composition.

INVARIANT: eviction is FIFO by insertion order, not LRU. A cache hit does
not refresh an entry's position.
"""

import logging
from collections import OrderedDict
from collections.abc import Sequence

from realmforge.analysis.archetypes import identify_deck_archetypes
from realmforge.analysis.combos import identify_card_combos
from realmforge.config import ANALYSIS_CACHE_SIZE
from realmforge.models.analysis import DeckAnalysis
from realmforge.models.card import Card

logger = logging.getLogger(__name__)


def deck_cache_key(deck: Sequence[Card]) -> str:
    """Sorted base names joined by commas, so card order does not change the key."""
    return ",".join(sorted(card.base_name for card in deck))


class DeckAnalysisCache:
    """Bounded FIFO cache of DeckAnalysis keyed by deck composition."""

    def __init__(self, max_size: int = ANALYSIS_CACHE_SIZE):
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        self.max_size = max_size
        self._entries: OrderedDict[str, DeckAnalysis] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> list[str]:
        """Cached keys, oldest insertion first."""
        return list(self._entries)

    def get(self, key: str) -> DeckAnalysis | None:
        analysis = self._entries.get(key)
        if analysis is None:
            self.misses += 1
        else:
            self.hits += 1
        return analysis

    def put(self, key: str, analysis: DeckAnalysis) -> None:
        if key in self._entries:
            self._entries[key] = analysis
            return
        if len(self._entries) >= self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted deck analysis %r", evicted[:60])
        self._entries[key] = analysis

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def analyze(self, deck: Sequence[Card]) -> DeckAnalysis:
        """Return the cached analysis for this composition, computing it on a miss."""
        key = deck_cache_key(deck)
        cached = self.get(key)
        if cached is not None:
            return cached

        combos = identify_card_combos(deck)
        analysis = DeckAnalysis(
            combos=combos,
            archetypes=identify_deck_archetypes(deck, combos),
        )
        self.put(key, analysis)
        return analysis
