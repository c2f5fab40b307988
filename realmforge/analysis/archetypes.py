"""
Archetype classification.

Scores a card list against Control, Aggro, Midrange and Combo from its
type and cost composition and its named combos.
"""

from collections import Counter
from collections.abc import Callable, Sequence

from realmforge.analysis.combos import combo_member_names, identify_card_combos
from realmforge.models.analysis import ArchetypeMatch, Combo
from realmforge.models.card import Card, CardType

COMBO_ARCHETYPE = "Combo"
COMBO_DESCRIPTION = "Relies on specific card combinations for powerful effects"

# (archetype, member predicate, ratio that must be exceeded, description)
COMPOSITION_ARCHETYPES: list[tuple[str, Callable[[Card], bool], float, str]] = [
    (
        "Control",
        lambda card: card.type in (CardType.MAGIC, CardType.AURA),
        0.4,
        "Focuses on controlling the game through spells and auras",
    ),
    (
        "Aggro",
        lambda card: card.mana_cost <= 3,
        0.6,
        "Focuses on early pressure and quick victories",
    ),
    (
        "Midrange",
        lambda card: 3 <= card.mana_cost <= 6,
        0.5,
        "Balanced approach with strong mid-game presence",
    ),
]


def _combo_members(cards: Sequence[Card], combos: Sequence[Combo]) -> list[Card]:
    members = combo_member_names(combos)
    return [c for c in cards if c.name.lower() in members or c.base_name.lower() in members]


def identify_deck_archetypes(
    cards: Sequence[Card],
    combos: Sequence[Combo] | None = None,
) -> list[ArchetypeMatch]:
    """
    Archetypes the card list qualifies for, strongest first.

    Args:
        cards: Cards to classify
        combos: Pre-computed combos for `cards`; detected when omitted

    Returns:
        Matches sorted by strength descending; ties keep discovery order
        (Control, Aggro, Midrange, Combo). Empty input gives [].
    """
    if not cards:
        return []

    total = len(cards)
    matches: list[ArchetypeMatch] = []
    for archetype, is_member, threshold, description in COMPOSITION_ARCHETYPES:
        members = [card for card in cards if is_member(card)]
        ratio = len(members) / total
        if ratio > threshold:
            matches.append(
                ArchetypeMatch(
                    archetype=archetype,
                    strength=min(100.0, ratio * 100),
                    cards=[card.name for card in members],
                    description=description,
                )
            )

    if combos is None:
        combos = identify_card_combos(cards)
    if combos:
        matches.append(
            ArchetypeMatch(
                archetype=COMBO_ARCHETYPE,
                strength=min(100.0, sum(combo.synergy for combo in combos) / 10),
                cards=[card.name for card in _combo_members(cards, combos)],
                description=COMBO_DESCRIPTION,
            )
        )

    return sorted(matches, key=lambda match: match.strength, reverse=True)


def archetype_members(
    cards: Sequence[Card],
    archetype: str,
    combos: Sequence[Combo] | None = None,
) -> list[Card]:
    """Cards in `cards` that drive the named archetype."""
    wanted = archetype.lower()
    for name, is_member, _threshold, _description in COMPOSITION_ARCHETYPES:
        if name.lower() == wanted:
            return [card for card in cards if is_member(card)]
    if wanted == COMBO_ARCHETYPE.lower():
        if combos is None:
            combos = identify_card_combos(cards)
        return _combo_members(cards, combos)
    return []


def calculate_archetype_synergy(
    cards: Sequence[Card],
    target_archetype: str,
    combos: Sequence[Combo] | None = None,
) -> float:
    """
    How well a card list realizes a target archetype.

    Starts from the archetype's strength, adds up to 20 for element focus
    among the archetype's cards, and 3 for each of those cards whose text
    names the dominant element. Zero if the list does not qualify.
    """
    if combos is None:
        # Composition archetypes do not depend on combos
        is_combo = target_archetype.lower() == COMBO_ARCHETYPE.lower()
        combos = identify_card_combos(cards) if is_combo else []
    match = next(
        (
            m
            for m in identify_deck_archetypes(cards, combos)
            if m.archetype.lower() == target_archetype.lower()
        ),
        None,
    )
    if match is None:
        return 0.0

    synergy = match.strength
    members = archetype_members(cards, match.archetype, combos)
    element_counts = Counter(element for card in members for element in card.elements)
    if element_counts:
        element, count = element_counts.most_common(1)[0]
        synergy += (count / len(members)) * 20
        element_name = element.value.lower()
        synergy += 3 * sum(1 for card in members if element_name in (card.text or "").lower())

    return synergy
