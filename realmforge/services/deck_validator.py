"""
Deck validation.

Final rules pass over a built deck. Size and copy-limit violations are
errors and make the deck invalid; everything else is a warning for the
player to review. Validation never raises and never changes the deck.
"""

import logging
import re
from collections import Counter
from collections.abc import Sequence

from realmforge.config import ATLAS_SIZE, SHUFFLE_WARNING_SIZE, SPELLBOOK_SIZE
from realmforge.models.card import Card, CardType, Element, parse_element, parse_threshold
from realmforge.models.deck import DeckValidationResult

logger = logging.getLogger(__name__)

THRESHOLD_PHRASE = re.compile(r"(\d+)\s+(Water|Fire|Earth|Air|Void)", re.IGNORECASE)

# Magic-heavy decks want at least this many spellcasters, the avatar included
MAGIC_HEAVY_COUNT = 20
MIN_SPELLCASTERS = 3

# A region counts as part of the deck's plan past this many cards
REGION_PRESENCE = 5
REGION_TERMS: dict[str, tuple[str, ...]] = {
    "underground": ("underground", "burrowing"),
    "underwater": ("underwater", "submerge"),
    "airborne": ("airborne", "flying"),
}

AVATAR_RESTRICTION_TERMS = ("cannot", "may not", "only")


def validate_copy_limits(cards: Sequence[Card]) -> list[str]:
    """One error per base name held in more copies than its rarity allows."""
    errors: list[str] = []
    counts = Counter(card.base_name for card in cards)
    first: dict[str, Card] = {}
    for card in cards:
        first.setdefault(card.base_name, card)
    for name, count in counts.items():
        card = first[name]
        if count > card.max_copies:
            rarity = card.rarity or "Ordinary"
            errors.append(f"{name} exceeds the {rarity} copy limit ({count}/{card.max_copies})")
    return errors


def _threshold_demands(card: Card) -> dict[Element, int]:
    demands = dict(parse_threshold(card.threshold))
    for amount, name in THRESHOLD_PHRASE.findall(card.threshold or ""):
        element = parse_element(name)
        if element is not None:
            demands[element] = max(demands.get(element, 0), int(amount))
    return demands


def validate_elemental_thresholds(sites: Sequence[Card], spells: Sequence[Card]) -> list[str]:
    """Warn when a spell demands more of an element than the deck's cards carry."""
    available = Counter(element for card in [*sites, *spells] for element in card.elements)
    warnings: list[str] = []
    for card in spells:
        for element, required in _threshold_demands(card).items():
            if available[element] < required:
                warnings.append(
                    f"Deck may struggle to meet {element.value} threshold ({required}) for "
                    f'"{card.name}" - only {available[element]} sources available'
                )
    return warnings


def validate_spellcasters(spells: Sequence[Card]) -> list[str]:
    magic = sum(1 for card in spells if card.type == CardType.MAGIC)
    # The avatar is always a spellcaster
    casters = 1 + sum(
        1
        for card in spells
        if card.type == CardType.MINION and "spellcaster" in (card.text or "").lower()
    )
    if magic > MAGIC_HEAVY_COUNT and casters < MIN_SPELLCASTERS:
        return [
            f"Deck contains {magic} magic spells but only {casters} total spellcasters "
            "(including Avatar) - consider adding spellcaster minions"
        ]
    return []


def validate_regional_strategy(spells: Sequence[Card]) -> list[str]:
    present = [
        region
        for region, terms in REGION_TERMS.items()
        if sum(1 for card in spells if any(t in (card.text or "").lower() for t in terms))
        > REGION_PRESENCE
    ]
    if len(present) >= 2:
        return [
            "Deck mixes multiple positional strategies - consider focusing on one primary position"
        ]
    return []


def validate_avatar(avatar: Card | None) -> list[str]:
    if avatar is None:
        return []
    text = (avatar.text or "").lower()
    if any(term in text for term in AVATAR_RESTRICTION_TERMS):
        return [
            f'Avatar "{avatar.name}" may have deck building restrictions - '
            "manual review recommended"
        ]
    return []


def validate_deck(
    avatar: Card | None,
    sites: Sequence[Card],
    spells: Sequence[Card],
    spellbook_size: int = SPELLBOOK_SIZE,
    atlas_size: int = ATLAS_SIZE,
) -> DeckValidationResult:
    """
    Check a deck against the construction rules.

    The spellbook must hold exactly `spellbook_size` cards and the atlas
    exactly `atlas_size` sites. The avatar counts toward neither.

    Args:
        avatar: The deck's avatar, if any
        sites: Atlas
        spells: Spellbook

    Returns:
        DeckValidationResult; `is_valid` is False whenever there are errors
    """
    errors: list[str] = []
    warnings: list[str] = []

    if len(sites) < atlas_size:
        errors.append(
            f"Atlas must contain at least {atlas_size} sites (currently has {len(sites)})"
        )
    elif len(sites) > atlas_size:
        errors.append(f"Atlas must contain at most {atlas_size} sites (currently has {len(sites)})")

    if len(spells) < spellbook_size:
        errors.append(
            f"Spellbook must contain at least {spellbook_size} cards (currently has {len(spells)})"
        )
    elif len(spells) > spellbook_size:
        errors.append(
            f"Spellbook must contain at most {spellbook_size} cards (currently has {len(spells)})"
        )

    if len(sites) > SHUFFLE_WARNING_SIZE:
        warnings.append(f"Atlas is very large ({len(sites)} cards) - may be difficult to shuffle")
    if len(spells) > SHUFFLE_WARNING_SIZE:
        warnings.append(
            f"Spellbook is very large ({len(spells)} cards) - may be difficult to shuffle"
        )

    errors.extend(validate_copy_limits(sites))
    errors.extend(validate_copy_limits(spells))

    warnings.extend(validate_elemental_thresholds(sites, spells))
    warnings.extend(validate_spellcasters(spells))
    warnings.extend(validate_regional_strategy(spells))
    warnings.extend(validate_avatar(avatar))

    result = DeckValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        total_cards=len(sites) + len(spells) + (1 if avatar else 0),
        spellbook_size=len(spells),
        site_count=len(sites),
    )
    if errors:
        logger.warning("Deck failed validation with %d errors", len(errors))
    return result
