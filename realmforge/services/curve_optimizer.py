"""
Mana-curve optimization.

Runs a spellbook through four stages:

    ANALYZE -> REMOVE_EXCESS -> ADD_DEFICIT -> FINALIZE

ANALYZE compares the cost histogram against fixed per-cost minimums.
REMOVE_EXCESS trims badly overcrowded costs, never more than a third of a
cost bucket. ADD_DEFICIT fills short costs from the pool, cheapest first.
FINALIZE truncates to the spellbook size and logs playability diagnostics.

Nothing here raises. A pool too thin to fix the curve yields a smaller or
lumpier deck, which the validator reports.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from realmforge.analysis.combos import is_combo_piece
from realmforge.analysis.elements import (
    analyze_elemental_requirements,
    calculate_deficit_contribution,
)
from realmforge.analysis.mechanics import (
    MIXED_STRATEGY,
    determine_regional_strategy,
    is_card_compatible_with_avatar,
    matches_region,
)
from realmforge.analysis.synergy import SynergyScorer
from realmforge.config import SPELLBOOK_SIZE
from realmforge.models.analysis import ElementalDeficiency
from realmforge.models.card import Card, Element

logger = logging.getLogger(__name__)

# Costs at or above this share one bucket
MAX_COST_BUCKET = 7

# Ideal share of the spellbook per cost bucket
AGGRO_CURVE: dict[int, float] = {
    0: 0.05, 1: 0.20, 2: 0.25, 3: 0.25, 4: 0.15, 5: 0.06, 6: 0.03, 7: 0.01,
}
CONTROL_CURVE: dict[int, float] = {
    0: 0.03, 1: 0.10, 2: 0.15, 3: 0.20, 4: 0.22, 5: 0.15, 6: 0.10, 7: 0.05,
}
COMBO_CURVE: dict[int, float] = {
    0: 0.06, 1: 0.14, 2: 0.22, 3: 0.22, 4: 0.18, 5: 0.10, 6: 0.05, 7: 0.03,
}
BALANCED_CURVE: dict[int, float] = {
    0: 0.04, 1: 0.12, 2: 0.20, 3: 0.24, 4: 0.18, 5: 0.12, 6: 0.06, 7: 0.04,
}

# Fewest cards a playable spellbook wants at each cost
CRITICAL_MINIMUMS: dict[int, int] = {0: 1, 1: 5, 2: 6, 3: 6, 4: 5, 5: 3, 6: 2, 7: 1}

RARITY_WEIGHTS: dict[str, int] = {"unique": 4, "elite": 3, "exceptional": 2, "ordinary": 1}

# Text that makes a slightly pricier card an acceptable stand-in for a cheap one
FLEXIBLE_TERMS = ("draw a card", "cycle", "search your", "alternative cost", "instead of paying")

# Cheapest costs whose shortage may be filled from the next cost up
FLEXIBLE_COST_LIMIT = 2

REGIONAL_BONUS = 10.0
DEFICIT_RANK_WEIGHT = 2


class OptimizerStage(str, Enum):
    ANALYZE = "analyze"
    REMOVE_EXCESS = "remove_excess"
    ADD_DEFICIT = "add_deficit"
    FINALIZE = "finalize"


@dataclass
class CurvePlan:
    """What ANALYZE decided: the target curve and per-cost adjustments."""

    archetype: str | None
    ideal_curve: dict[int, float]
    current_curve: dict[int, int]
    adjustments: dict[int, int] = field(default_factory=dict)


@dataclass
class OptimizationResult:
    spells: list[Card]
    plan: CurvePlan
    removed: list[Card] = field(default_factory=list)
    added: list[Card] = field(default_factory=list)
    removed_by_cost: dict[int, int] = field(default_factory=dict)
    diagnostics: list[str] = field(default_factory=list)
    stages: list[OptimizerStage] = field(default_factory=list)


def cost_bucket(card: Card) -> int:
    return min(card.mana_cost, MAX_COST_BUCKET)


def calculate_mana_curve(cards: Sequence[Card]) -> dict[int, int]:
    """Cost histogram with every bucket present, costs of 7+ folded into 7."""
    curve = {cost: 0 for cost in range(MAX_COST_BUCKET + 1)}
    for card in cards:
        curve[cost_bucket(card)] += 1
    return curve


def select_ideal_curve(archetype: str | None) -> dict[int, float]:
    """
    Ideal curve for an archetype name.

    Aggro and Control have their own curves; Combo and any "Synergy"
    archetype share one; everything else is balanced.
    """
    if not archetype:
        return BALANCED_CURVE
    name = archetype.lower()
    if name == "aggro":
        return AGGRO_CURVE
    if name == "control":
        return CONTROL_CURVE
    if name == "combo" or "synergy" in name:
        return COMBO_CURVE
    return BALANCED_CURVE


def calculate_curve_adjustments(curve: dict[int, int]) -> dict[int, int]:
    """
    Per-cost adjustments against the critical minimums.

    Positive means that many cards short. Negative means overcrowded: more
    than 1.5x the minimum and more than 5 cards, and only half the excess is
    offered for removal.
    """
    adjustments: dict[int, int] = {}
    for cost, minimum in CRITICAL_MINIMUMS.items():
        count = curve.get(cost, 0)
        if count < minimum:
            adjustments[cost] = minimum - count
        elif count > minimum * 1.5 and count > 5:
            excess = count - math.ceil(minimum * 1.5)
            adjustments[cost] = -(excess // 2)
        else:
            adjustments[cost] = 0
    return adjustments


def rarity_weight(card: Card) -> int:
    return RARITY_WEIGHTS.get((card.rarity or "").lower(), 1)


class CurveOptimizer:
    """Reshapes a spellbook's mana curve using cards from the pool."""

    def __init__(self, scorer: SynergyScorer | None = None, deck_size: int = SPELLBOOK_SIZE):
        self.scorer = scorer or SynergyScorer()
        self.deck_size = deck_size

    def optimize(
        self,
        spells: Sequence[Card],
        pool: Sequence[Card],
        avatar: Card | None = None,
        preferred_archetype: str | None = None,
        sites: Sequence[Card] | None = None,
    ) -> OptimizationResult:
        """
        Run all four stages.

        Args:
            spells: Spellbook to optimize (not modified)
            pool: Every spell the deck may draw replacements from
            avatar: Chosen avatar, for compatibility checks
            preferred_archetype: Overrides the deck's detected archetype
            sites: Chosen atlas; its affinity is the threshold supply

        Returns:
            OptimizationResult with at most `deck_size` spells
        """
        deck = list(spells)
        plan = self.analyze(deck, preferred_archetype, sites)
        result = OptimizationResult(spells=deck, plan=plan, stages=[OptimizerStage.ANALYZE])

        self.remove_excess(result)
        result.stages.append(OptimizerStage.REMOVE_EXCESS)

        self.add_deficit(result, pool, avatar, sites)
        result.stages.append(OptimizerStage.ADD_DEFICIT)

        self.finalize(result)
        result.stages.append(OptimizerStage.FINALIZE)
        return result

    def analyze(
        self,
        deck: Sequence[Card],
        preferred_archetype: str | None = None,
        sites: Sequence[Card] | None = None,
    ) -> CurvePlan:
        analysis = analyze_elemental_requirements(deck, sites)
        if analysis.deficiencies:
            for element, info in analysis.deficiencies.items():
                logger.info(
                    "Threshold shortfall %s: %d/%d (deficit %d)",
                    element.value,
                    info.current,
                    info.required,
                    info.deficit,
                )
        else:
            logger.info("Elemental thresholds are satisfactory")

        archetype = preferred_archetype
        if not archetype:
            strongest = self.scorer.cache.analyze(deck).strongest_archetype
            if strongest is not None and strongest.strength > 1:
                archetype = strongest.archetype

        ideal = select_ideal_curve(archetype)
        logger.info("Optimizing curve for %s archetype", archetype or "balanced")

        curve = calculate_mana_curve(deck)
        adjustments = calculate_curve_adjustments(curve)
        for cost, adjustment in adjustments.items():
            if adjustment > 0:
                logger.debug("Need %d more %d-cost cards", adjustment, cost)
            elif adjustment < 0:
                logger.debug("Can remove up to %d %d-cost cards", -adjustment, cost)

        return CurvePlan(
            archetype=archetype,
            ideal_curve=ideal,
            current_curve=curve,
            adjustments=adjustments,
        )

    def remove_excess(self, result: OptimizationResult) -> None:
        """Trim overcrowded costs, at most a third of each bucket."""
        deck = result.spells
        combos = self.scorer.cache.analyze(deck).combos

        for cost, adjustment in result.plan.adjustments.items():
            if adjustment >= 0:
                continue
            bucket = [(index, card) for index, card in enumerate(deck) if cost_bucket(card) == cost]
            limit = min(-adjustment, len(bucket) // 3)
            if limit <= 0:
                continue

            # Cheapest to lose first: non-combo, low rarity, low synergy, later position
            ranked = sorted(
                bucket,
                key=lambda item: (
                    is_combo_piece(item[1], combos),
                    rarity_weight(item[1]),
                    self.scorer.score(item[1], deck),
                    -item[0],
                ),
            )
            doomed = sorted((index for index, _ in ranked[:limit]), reverse=True)
            for index in doomed:
                result.removed.append(deck.pop(index))
            result.removed_by_cost[cost] = len(doomed)
            logger.debug("Removed %d %d-cost cards", len(doomed), cost)

    def _candidates(
        self,
        cost: int,
        needed: int,
        deck: Sequence[Card],
        pool: Sequence[Card],
        avatar: Card | None,
    ) -> list[Card]:
        in_deck = {card.base_name for card in deck}
        candidates = [
            card
            for card in pool
            if cost_bucket(card) == cost
            and card.base_name not in in_deck
            and is_card_compatible_with_avatar(card, avatar)
        ]
        if len(candidates) >= needed or cost > FLEXIBLE_COST_LIMIT:
            return candidates

        taken = in_deck | {card.base_name for card in candidates}
        flexible = [
            card
            for card in pool
            if card.base_name not in taken
            and card.mana_cost <= cost + 1
            and any(term in (card.text or "").lower() for term in FLEXIBLE_TERMS)
            and is_card_compatible_with_avatar(card, avatar)
        ]
        if flexible:
            logger.debug("Found %d flexible alternatives for %d-cost slots", len(flexible), cost)
        return candidates + flexible

    def _rank(
        self,
        card: Card,
        deck: Sequence[Card],
        deficiencies: dict[Element, ElementalDeficiency],
        strategy: str,
    ) -> float:
        """Synergy + power per mana + 2x threshold help + regional bonus."""
        value = self.scorer.score(card, deck)
        value += (card.power or 0) / max(card.mana_cost, 1)
        value += DEFICIT_RANK_WEIGHT * calculate_deficit_contribution(card, deficiencies)
        if strategy != MIXED_STRATEGY and matches_region(card, strategy):
            value += REGIONAL_BONUS
        return value

    def add_deficit(
        self,
        result: OptimizationResult,
        pool: Sequence[Card],
        avatar: Card | None = None,
        sites: Sequence[Card] | None = None,
    ) -> None:
        """Fill short costs, all costs up to 3 before any higher cost."""
        deck = result.spells
        short = sorted(
            ((cost, adj) for cost, adj in result.plan.adjustments.items() if adj > 0),
            key=lambda item: (item[0] > 3, item[0]),
        )
        if short:
            logger.info("Adding cards at costs: %s", ", ".join(str(cost) for cost, _ in short))

        for cost, needed in short:
            candidates = self._candidates(cost, needed, deck, pool, avatar)
            if not candidates:
                continue

            deficiencies = analyze_elemental_requirements(deck, sites).deficiencies
            strategy = determine_regional_strategy(deck)
            ranked = [
                (self._rank(card, deck, deficiencies, strategy), card) for card in candidates
            ]
            ranked.sort(key=lambda pair: pair[0], reverse=True)

            for _value, card in ranked[:needed]:
                held = sum(1 for c in deck if c.base_name == card.base_name)
                if held < card.max_copies and len(deck) < self.deck_size:
                    deck.append(card)
                    result.added.append(card)

    def finalize(self, result: OptimizationResult) -> None:
        """Truncate to the spellbook size and log observational diagnostics."""
        del result.spells[self.deck_size :]
        deck = result.spells
        curve = calculate_mana_curve(deck)

        early = curve[0] + curve[1] + curve[2]
        mid = curve[3] + curve[4]
        late = curve[5] + curve[6] + curve[7]

        def mentions(card: Card, *terms: str) -> bool:
            text = (card.text or "").lower()
            return any(term in text for term in terms)

        card_advantage = sum(1 for card in deck if mentions(card, "draw", "search", "cycle"))
        acceleration = sum(
            1
            for card in deck
            if "add" in (card.text or "").lower() and "mana" in (card.text or "").lower()
        )

        if early < 12:
            result.diagnostics.append(
                f"Only {early} early game cards (0-2 mana). Consider adding more low-cost cards."
            )
        if mid < 10:
            result.diagnostics.append(
                f"Only {mid} mid-game cards (3-4 mana). This could create a weak mid-game."
            )
        if card_advantage < 5:
            result.diagnostics.append(
                f"Only {card_advantage} cards that provide card advantage. "
                "Consider adding more card draw."
            )
        if acceleration < 3 and late > 8:
            result.diagnostics.append(
                f"Deck has {acceleration} mana acceleration cards but {late} high-cost cards."
            )

        for message in result.diagnostics:
            logger.warning(message)
        logger.info(
            "Optimized spellbook: %d cards (%d removed, %d added)",
            len(deck),
            len(result.removed),
            len(result.added),
        )


def optimize_deck(
    spells: Sequence[Card],
    pool: Sequence[Card],
    preferred_archetype: str | None = None,
    avatar: Card | None = None,
    sites: Sequence[Card] | None = None,
) -> list[Card]:
    """Optimize with a default scorer and return just the spells."""
    return CurveOptimizer().optimize(spells, pool, avatar, preferred_archetype, sites).spells
