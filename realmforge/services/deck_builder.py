"""
Spellbook building service.

Builds a spellbook from a card pool in stages:
1. Find the strongest combos in the pool; their cards are selected first
2. Fill each category budget greedily by synergy with the deck so far
3. Add cards that cover elemental threshold shortfalls
4. Top up to the build target with the best remaining cards
5. Hand the result to the curve optimizer, which trims it to size
6. Refill any slots the optimizer freed, back up to the spellbook size

INVARIANT: no base name is ever held in more copies than its rarity allows.
"""

import logging
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from realmforge.analysis.combos import identify_card_combos
from realmforge.analysis.elements import recommend_threshold_cards
from realmforge.analysis.mechanics import is_card_compatible_with_avatar
from realmforge.analysis.playability import PlayabilityAnalysis, analyze_deck_playability
from realmforge.analysis.synergy import SynergyScorer
from realmforge.config import SPELLBOOK_BUILD_TARGET, SPELLBOOK_SIZE, SPELLBOOK_SOFT_CEILING
from realmforge.models.analysis import AllocationResult, Combo
from realmforge.models.card import Card
from realmforge.services.allocation import (
    DEFAULT_ALLOCATION,
    calculate_card_allocation,
    has_utility_combo,
    sort_artifacts_with_utility_priority,
)
from realmforge.services.card_database import CardPool
from realmforge.services.curve_optimizer import CurveOptimizer

logger = logging.getLogger(__name__)

# Combos whose cards get selection priority
PRIORITY_COMBO_COUNT = 3

# Threshold balancer inserts at most this many cards
MAX_THRESHOLD_ADDITIONS = 5


@dataclass(frozen=True, slots=True)
class ComboPriority:
    """Combos found in the pool and the card names that jump the queue."""

    combos: list[Combo]
    pieces: set[str]
    utility: bool

    def is_priority(self, card: Card) -> bool:
        return card.base_name.lower() in self.pieces or card.name.lower() in self.pieces


@dataclass
class SpellbookResult:
    """A built spellbook and the figures behind it."""

    spells: list[Card]
    copies_in_deck: dict[str, int]
    total_synergy: float
    playability: PlayabilityAnalysis
    allocation: AllocationResult
    combos: list[Combo] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


def add_card_with_copies(
    card: Card | None,
    deck: list[Card],
    max_to_add: int,
    copies_in_deck: dict[str, int],
    avatar: Card | None = None,
    ceiling: int = SPELLBOOK_SIZE,
) -> int:
    """
    Add as many copies of a card as rarity, request and deck size allow.

    Copies added = min(rarity limit - copies held, max_to_add, ceiling - deck
    size). Cards the avatar cannot use are skipped.

    Args:
        card: Card to add; None is ignored
        deck: Deck to extend in place
        max_to_add: Copies requested
        copies_in_deck: Copies held per base name, updated in place
        avatar: Chosen avatar, for compatibility checks
        ceiling: Deck size at which nothing more is added

    Returns:
        Number of copies added
    """
    if card is None or len(deck) >= ceiling:
        return 0
    if not is_card_compatible_with_avatar(card, avatar):
        logger.debug("Skipping %s: incompatible with avatar", card.name)
        return 0

    held = copies_in_deck.get(card.base_name, 0)
    to_add = max(0, min(card.max_copies - held, max_to_add, ceiling - len(deck)))
    deck.extend([card] * to_add)
    copies_in_deck[card.base_name] = held + to_add
    return to_add


def enforce_rarity_limits(cards: Sequence[Card]) -> list[Card]:
    """Drop copies past each card's rarity limit, keeping the earliest ones."""
    seen: Counter[str] = Counter()
    kept: list[Card] = []
    for card in cards:
        if seen[card.base_name] < card.max_copies:
            kept.append(card)
            seen[card.base_name] += 1
    return kept


def analyze_card_combos(pool: Sequence[Card], top: int = PRIORITY_COMBO_COUNT) -> ComboPriority:
    """Detect combos in the pool, strongest first, and collect the top ones' cards."""
    combos = sorted(identify_card_combos(pool), key=lambda combo: combo.synergy, reverse=True)
    logger.info("Identified %d potential card combos in the card pool", len(combos))
    for combo in combos[:top]:
        logger.info("Top combo: %s - %s", combo.name, combo.description)

    pieces = {name.lower() for combo in combos[:top] for name in combo.cards}
    return ComboPriority(combos=combos, pieces=pieces, utility=has_utility_combo(combos))


def _sort_by_priority(
    cards: Sequence[Card],
    deck: Sequence[Card],
    priority: ComboPriority,
    score: Callable[[Card, Sequence[Card]], float],
) -> list[Card]:
    chosen = {card.base_name for card in deck}
    return sorted(
        (card for card in cards if card.base_name not in chosen),
        key=lambda card: (not priority.is_priority(card), -score(card, deck)),
    )


def _fill_category(
    ordered: Sequence[Card],
    budget: int,
    deck: list[Card],
    copies_in_deck: dict[str, int],
    avatar: Card | None,
) -> int:
    added = 0
    for card in ordered:
        remaining = budget - added
        if remaining <= 0:
            break
        added += add_card_with_copies(card, deck, remaining, copies_in_deck, avatar)
    return added


def _balance_thresholds(
    pool: Sequence[Card],
    deck: list[Card],
    copies_in_deck: dict[str, int],
    avatar: Card | None,
    sites: Sequence[Card] | None = None,
) -> int:
    """Insert single copies of cards that ease elemental shortfalls."""
    added = 0
    inserted: set[str] = set()
    for card, score in recommend_threshold_cards(pool, deck, sites):
        if added >= MAX_THRESHOLD_ADDITIONS or len(deck) >= SPELLBOOK_SOFT_CEILING:
            break
        if card.base_name in inserted:
            continue
        if add_card_with_copies(
            card, deck, 1, copies_in_deck, avatar, ceiling=SPELLBOOK_SOFT_CEILING
        ):
            logger.debug("Adding %s for elemental thresholds (score %.1f)", card.name, score)
            inserted.add(card.base_name)
            added += 1
    return added


def _complete_deck(
    pool: Sequence[Card],
    deck: list[Card],
    copies_in_deck: dict[str, int],
    avatar: Card | None,
    score: Callable[[Card, Sequence[Card]], float],
    target: int = SPELLBOOK_BUILD_TARGET,
) -> int:
    """Fill up to the build target with single copies of the best unused cards."""
    remaining = max(0, target - len(deck))
    if remaining == 0:
        return 0
    logger.info("Filling %d remaining slots with high-synergy cards", remaining)

    chosen = {card.base_name for card in deck}
    available = [
        card
        for card in pool
        if card.base_name not in chosen and is_card_compatible_with_avatar(card, avatar)
    ]
    available.sort(key=lambda card: score(card, deck), reverse=True)

    added = 0
    for card in available:
        if added >= remaining:
            break
        if card.base_name in chosen:
            continue
        deck.append(card)
        chosen.add(card.base_name)
        copies_in_deck[card.base_name] = copies_in_deck.get(card.base_name, 0) + 1
        added += 1
    return added


def _top_up(
    pool: Sequence[Card],
    deck: list[Card],
    avatar: Card | None,
    score: Callable[[Card, Sequence[Card]], float],
    target: int = SPELLBOOK_SIZE,
) -> int:
    """
    Refill slots the optimizer freed, unused cards first and then extra
    copies of the best cards already in the deck.
    """
    copies_in_deck = dict(Counter(card.base_name for card in deck))
    added = _complete_deck(pool, deck, copies_in_deck, avatar, score, target=target)
    if len(deck) >= target:
        return added

    for card in sorted(pool, key=lambda card: score(card, deck), reverse=True):
        if len(deck) >= target:
            break
        added += add_card_with_copies(
            card, deck, target - len(deck), copies_in_deck, avatar, ceiling=target
        )
    return added


def build_spellbook(
    pool: CardPool,
    avatar: Card | None = None,
    preferred_archetype: str | None = None,
    scorer: SynergyScorer | None = None,
    allocation: AllocationResult | None = None,
    sites: Sequence[Card] | None = None,
) -> SpellbookResult:
    """
    Build a spellbook from the pool's minions, artifacts, auras and magics.

    Args:
        pool: Loaded card pool
        avatar: Chosen avatar; cards it cannot use are never selected
        preferred_archetype: Archetype to shape the mana curve for
        scorer: Synergy scorer, a standard one when omitted
        allocation: Category budgets; derived from the pool's combos when omitted
        sites: Chosen atlas; its affinity is the supply for threshold balancing

    Returns:
        SpellbookResult with the optimized spells and their scores
    """
    scorer = scorer or SynergyScorer()
    notes: list[str] = []
    spells = pool.spells

    priority = analyze_card_combos(spells)
    if allocation is None:
        allocation = calculate_card_allocation(priority.combos, DEFAULT_ALLOCATION)
    if allocation.reason:
        notes.append(allocation.reason)

    deck: list[Card] = []
    copies_in_deck: dict[str, int] = {}

    logger.info("Selecting %d minions", allocation.minions)
    ordered = _sort_by_priority(pool.minions, deck, priority, scorer.score)
    _fill_category(ordered, allocation.minions, deck, copies_in_deck, avatar)

    logger.info("Selecting %d artifacts", allocation.artifacts)
    ordered = sort_artifacts_with_utility_priority(
        pool.artifacts, deck, priority.utility, priority.pieces, scorer.score
    )
    _fill_category(ordered, allocation.artifacts, deck, copies_in_deck, avatar)

    logger.info("Selecting %d auras", allocation.auras)
    ordered = _sort_by_priority(pool.auras, deck, priority, scorer.score)
    _fill_category(ordered, allocation.auras, deck, copies_in_deck, avatar)

    logger.info("Selecting %d magic spells", allocation.magics)
    ordered = _sort_by_priority(pool.magics, deck, priority, scorer.score)
    _fill_category(ordered, allocation.magics, deck, copies_in_deck, avatar)

    balanced = _balance_thresholds(spells, deck, copies_in_deck, avatar, sites)
    if balanced:
        notes.append(f"Added {balanced} cards to meet elemental thresholds")

    _complete_deck(spells, deck, copies_in_deck, avatar, scorer.score)

    logger.info("Running deck optimization on %d cards", len(deck))
    optimized = CurveOptimizer(scorer).optimize(
        deck, spells, avatar=avatar, preferred_archetype=preferred_archetype, sites=sites
    )
    final = enforce_rarity_limits(optimized.spells)
    refilled = _top_up(spells, final, avatar, scorer.score)
    if refilled:
        logger.info("Refilled %d spellbook slots after optimization", refilled)

    total_synergy = scorer.total_synergy(final)
    playability = analyze_deck_playability(final)
    logger.info(
        "Built spellbook with %d cards, total synergy %.2f, playability %d",
        len(final),
        total_synergy,
        playability.playability_score,
    )

    return SpellbookResult(
        spells=final,
        copies_in_deck=dict(Counter(card.base_name for card in final)),
        total_synergy=total_synergy,
        playability=playability,
        allocation=allocation,
        combos=priority.combos,
        notes=notes + optimized.diagnostics,
    )
