"""
Synergy scoring.

Scores how well a candidate card fits a deck as a weighted sum of five
independent signals: mechanical complementarity, shared elements, cost-curve
gaps, structural combo synergy and fit with the deck's strongest archetype.

An empty deck scores 0 for every candidate. Scores are never negative.
"""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

from realmforge.analysis.archetypes import calculate_archetype_synergy
from realmforge.analysis.cache import DeckAnalysisCache
from realmforge.analysis.combos import calculate_combo_synergy
from realmforge.analysis.mechanics import calculate_mechanical_synergy
from realmforge.models.card import Card, Element
from realmforge.models.failure import FailureKind, KnownError

# Component weights in the combined score
MECHANICAL_WEIGHT = 1.0
ELEMENTAL_WEIGHT = 0.8
COST_CURVE_WEIGHT = 0.6
COMBO_WEIGHT = 1.2
ARCHETYPE_WEIGHT = 1.0

# Shared-element credit stops growing past this many deck cards per element
ELEMENT_COUNT_CAP = 5


@dataclass(frozen=True, slots=True)
class SynergyWeighting:
    """Per-element multipliers for elemental synergy."""

    name: str
    water: float = 1.0
    fire: float = 1.0
    earth: float = 1.0
    air: float = 1.0
    void: float = 1.0

    def weight(self, element: Element) -> float:
        return float(getattr(self, element.value.lower()))


STANDARD_WEIGHTING = SynergyWeighting("standard")
FIRE_WEIGHTED = SynergyWeighting("fire_weighted", fire=1.5)

SYNERGY_WEIGHTINGS: dict[str, SynergyWeighting] = {
    weighting.name: weighting for weighting in (STANDARD_WEIGHTING, FIRE_WEIGHTED)
}


def get_synergy_weighting(name: str | None) -> SynergyWeighting:
    """
    Look up a weighting by name; None selects the standard one.

    Raises:
        KnownError: If the name is not a known weighting
    """
    if not name:
        return STANDARD_WEIGHTING
    weighting = SYNERGY_WEIGHTINGS.get(name.lower())
    if weighting is None:
        raise KnownError(
            FailureKind.INVALID_INPUT,
            f"Unknown synergy weighting: {name}",
            detail=f"Valid: {sorted(SYNERGY_WEIGHTINGS)}",
        )
    return weighting


def calculate_elemental_synergy(
    card: Card,
    deck: Sequence[Card],
    weighting: SynergyWeighting = STANDARD_WEIGHTING,
) -> float:
    """Credit each of the candidate's elements by how many deck cards share it (capped)."""
    if not card.elements or not deck:
        return 0.0
    counts = Counter(element for deck_card in deck for element in deck_card.elements)
    return sum(
        min(counts[element], ELEMENT_COUNT_CAP) * weighting.weight(element)
        for element in card.elements
    )


def calculate_cost_curve_synergy(card: Card, deck: Sequence[Card]) -> float:
    """
    Reward filling a thin cost slot, penalize piling onto a crowded one.

    The desired count at a cost is max(6 - cost, 2).
    """
    current = sum(1 for deck_card in deck if deck_card.mana_cost == card.mana_cost)
    desired = max(6 - card.mana_cost, 2)
    if current < desired:
        return 2.0
    if current > desired * 1.5:
        return -1.0
    return 0.0


@dataclass(frozen=True, slots=True)
class SynergyBreakdown:
    """Unweighted component scores and the clamped weighted total."""

    mechanical: float = 0.0
    elemental: float = 0.0
    cost_curve: float = 0.0
    combo: float = 0.0
    archetype: float = 0.0

    @property
    def total(self) -> float:
        weighted = (
            self.mechanical * MECHANICAL_WEIGHT
            + self.elemental * ELEMENTAL_WEIGHT
            + self.cost_curve * COST_CURVE_WEIGHT
            + self.combo * COMBO_WEIGHT
            + self.archetype * ARCHETYPE_WEIGHT
        )
        return max(0.0, weighted)


class SynergyScorer:
    """
    Scores candidates against decks.

    Deck-level analysis (combos and archetypes) goes through the injected
    cache, so repeated scoring against an unchanged deck analyzes it once.
    """

    def __init__(
        self,
        weighting: SynergyWeighting = STANDARD_WEIGHTING,
        cache: DeckAnalysisCache | None = None,
    ):
        self.weighting = weighting
        self.cache = cache if cache is not None else DeckAnalysisCache()

    def breakdown(self, card: Card, deck: Sequence[Card]) -> SynergyBreakdown:
        if not deck:
            return SynergyBreakdown()

        combined = [card, *deck]
        archetype = 0.0
        strongest = self.cache.analyze(deck).strongest_archetype
        if strongest is not None:
            archetype = calculate_archetype_synergy(combined, strongest.archetype)

        return SynergyBreakdown(
            mechanical=calculate_mechanical_synergy(card, deck),
            elemental=calculate_elemental_synergy(card, deck, self.weighting),
            cost_curve=calculate_cost_curve_synergy(card, deck),
            combo=calculate_combo_synergy(combined),
            archetype=archetype,
        )

    def score(self, card: Card, deck: Sequence[Card]) -> float:
        return self.breakdown(card, deck).total

    def total_synergy(self, cards: Sequence[Card]) -> float:
        """Sum of each card's score against the whole list."""
        return sum(self.score(card, cards) for card in cards)


def calculate_synergy(card: Card, deck: Sequence[Card]) -> float:
    """Score with the standard weighting and a fresh cache."""
    return SynergyScorer().score(card, deck)
