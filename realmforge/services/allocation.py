"""
Spellbook allocation.

Splits the spellbook build target into per-category budgets and shifts slots
toward artifacts when the pool supports a utility-artifact combo deck.
"""

import logging
from collections.abc import Callable, Sequence

from realmforge.models.analysis import AllocationResult, Combo
from realmforge.models.card import Card

logger = logging.getLogger(__name__)

# Sums to 55: the 50-card spellbook plus headroom for the optimizer to trim
DEFAULT_ALLOCATION = AllocationResult(minions=24, artifacts=10, auras=6, magics=15)

UTILITY_COMBO_MARKERS: tuple[str, ...] = (
    "Utility",
    "Cost Reduction",
    "Core",
    "Threshold",
    "Artifact",
)

# A utility combo only reshapes the deck when the pool has this many combos
MIN_COMBOS_FOR_UTILITY_SHIFT = 3

UTILITY_SHIFT_REASON = "Utility combo archetype detected - increased artifact allocation"

UTILITY_ARTIFACT_NAMES: tuple[str, ...] = (
    "ring of morrigan",
    "amulet of niniane",
    "philosopher's stone",
    "amethyst core",
    "onyx core",
    "ruby core",
    "aquamarine core",
)


def has_utility_combo(combos: Sequence[Combo]) -> bool:
    return any(marker in combo.name for combo in combos for marker in UTILITY_COMBO_MARKERS)


def calculate_card_allocation(
    combos: Sequence[Combo],
    base: AllocationResult = DEFAULT_ALLOCATION,
) -> AllocationResult:
    """
    Per-category budgets for the greedy selector.

    With a utility combo among at least three combos, artifacts gain up to 5
    slots (capped at 15) while minions and magics give up 3 and 2 (floored
    at 20 and 12). No category ever goes negative.

    Args:
        combos: Combos detected in the card pool
        base: Starting budgets

    Returns:
        AllocationResult, with `reason` set when budgets were adjusted
    """
    minions, artifacts, auras, magics = base.minions, base.artifacts, base.auras, base.magics
    reason = None

    if has_utility_combo(combos) and len(combos) >= MIN_COMBOS_FOR_UTILITY_SHIFT:
        logger.info("Detected utility combo archetype, favoring artifacts")
        artifacts = min(15, artifacts + 5)
        minions = max(20, minions - 3)
        magics = max(12, magics - 2)
        reason = UTILITY_SHIFT_REASON

    return AllocationResult(
        minions=max(0, minions),
        artifacts=max(0, artifacts),
        auras=max(0, auras),
        magics=max(0, magics),
        reason=reason,
    )


def is_utility_artifact(card: Card) -> bool:
    base_name = card.base_name.lower()
    return any(name in base_name for name in UTILITY_ARTIFACT_NAMES)


def sort_artifacts_with_utility_priority(
    artifacts: Sequence[Card],
    selected: Sequence[Card],
    utility_combo: bool,
    combo_pieces: set[str],
    score: Callable[[Card, Sequence[Card]], float],
) -> list[Card]:
    """
    Order unselected artifacts for the greedy selector.

    Utility artifacts first (only in utility combo decks), then combo pieces,
    then by synergy with the cards selected so far.
    """
    chosen = {card.base_name for card in selected}
    remaining = [card for card in artifacts if card.base_name not in chosen]
    return sorted(
        remaining,
        key=lambda card: (
            not (utility_combo and is_utility_artifact(card)),
            card.base_name.lower() not in combo_pieces,
            -score(card, selected),
        ),
    )
