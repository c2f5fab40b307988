"""Deck statistics used by reports and avatar selection."""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from itertools import combinations

from realmforge.models.card import Card


@dataclass
class DeckStats:
    elements: dict[str, int] = field(default_factory=dict)
    types: dict[str, int] = field(default_factory=dict)
    keywords: dict[str, int] = field(default_factory=dict)
    mana_curve: dict[int, int] = field(default_factory=dict)
    rarities: dict[str, int] = field(default_factory=dict)


def get_deck_stats(cards: Sequence[Card]) -> DeckStats:
    """Tally elements, types, keywords, costs and rarities (missing rarity as "Unknown")."""
    return DeckStats(
        elements=dict(Counter(e.value for card in cards for e in card.elements)),
        types=dict(Counter(card.type.value for card in cards)),
        keywords=dict(Counter(keyword for card in cards for keyword in card.keywords)),
        mana_curve=dict(Counter(card.mana_cost for card in cards)),
        rarities=dict(Counter(card.rarity or "Unknown" for card in cards)),
    )


def analyze_elemental_synergy(cards: Sequence[Card]) -> list[tuple[tuple[str, str], int]]:
    """
    Element pairs that appear together on cards, most frequent first.

    When no card carries two elements but some carry one, the first element
    seen is paired with itself so callers always get a primary element.
    """
    seen = list(dict.fromkeys(e.value for card in cards for e in card.elements))
    pairs: list[tuple[tuple[str, str], int]] = []
    for first, second in combinations(seen, 2):
        count = sum(
            1
            for card in cards
            if first in (e.value for e in card.elements)
            and second in (e.value for e in card.elements)
        )
        if count > 0:
            pairs.append(((first, second), count))

    if not pairs and seen:
        pairs.append(((seen[0], seen[0]), 1))

    return sorted(pairs, key=lambda pair: pair[1], reverse=True)
