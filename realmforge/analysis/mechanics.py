"""
Card mechanics.

Derives boolean mechanic flags from rules text through a rule table, scores
how well a candidate's mechanics complement a deck, and applies
avatar restrictions.

All matching is case-insensitive substring matching on rules text.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import lru_cache

from realmforge.models.card import Card


@dataclass(frozen=True, slots=True)
class TextRule:
    """
    A free-text predicate.

    Matches when every `all_of` term appears, at least one `any_of` term
    appears (if any are given), and no `none_of` term appears.
    """

    all_of: tuple[str, ...] = ()
    any_of: tuple[str, ...] = ()
    none_of: tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        lowered = text.lower()
        if not all(term in lowered for term in self.all_of):
            return False
        if self.any_of and not any(term in lowered for term in self.any_of):
            return False
        return not any(term in lowered for term in self.none_of)


@dataclass(frozen=True, slots=True)
class CardMechanics:
    """Mechanic flags for one card."""

    operates_underground: bool = False
    operates_underwater: bool = False
    operates_void: bool = False
    deals_aoe_damage: bool = False
    draws_cards: bool = False
    deals_direct_damage: bool = False
    produces_resources: bool = False
    controls_minions: bool = False
    enhances_minions: bool = False
    triggers_on_spells: bool = False
    has_airborne: bool = False
    has_burrowing: bool = False
    has_charge: bool = False
    supports_defense: bool = False
    has_strike_first: bool = False
    has_lethal: bool = False
    has_intercept_advantage: bool = False


MECHANIC_RULES: dict[str, TextRule] = {
    "operates_underground": TextRule(any_of=("burrowing", "underground")),
    "operates_underwater": TextRule(any_of=("submerge", "underwater")),
    "operates_void": TextRule(any_of=("voidwalk", "void")),
    "deals_aoe_damage": TextRule(all_of=("deals",), any_of=("each", "all", "grid")),
    "draws_cards": TextRule(all_of=("draw",), none_of=("drawback",)),
    "deals_direct_damage": TextRule(all_of=("damage",), any_of=("enemy", "opponent")),
    "produces_resources": TextRule(all_of=("add",), any_of=("mana", "energy")),
    "controls_minions": TextRule(any_of=("destroy", "exile", "return to hand")),
    "enhances_minions": TextRule(all_of=("gain",), any_of=("power", "health")),
    "triggers_on_spells": TextRule(all_of=("when", "cast", "spell")),
    "has_airborne": TextRule(all_of=("airborne",)),
    "has_burrowing": TextRule(all_of=("burrowing",)),
    "has_charge": TextRule(all_of=("charge",)),
    "supports_defense": TextRule(any_of=("defend", "protection", "shield")),
    "has_strike_first": TextRule(any_of=("strike first", "lance")),
    "has_lethal": TextRule(all_of=("lethal",)),
    "has_intercept_advantage": TextRule(any_of=("intercept", "ranged")),
}


@lru_cache(maxsize=4096)
def identify_card_mechanics(card: Card) -> CardMechanics:
    """Evaluate every mechanic rule against the card's text."""
    text = card.text or ""
    return CardMechanics(**{name: rule.matches(text) for name, rule in MECHANIC_RULES.items()})


# =============================================================================
# MECHANICAL COMPLEMENTARITY
# =============================================================================

MechanicPairing = Callable[[CardMechanics, CardMechanics], bool]

# (candidate flags, deck card flags) -> bonus when the pairing holds
MECHANIC_PAIRINGS: list[tuple[str, MechanicPairing, float]] = [
    ("draw feeds on resources", lambda c, d: c.draws_cards and d.produces_resources, 2.0),
    ("damage backs control", lambda c, d: c.deals_direct_damage and d.controls_minions, 1.5),
    ("sweepers behind defense", lambda c, d: c.deals_aoe_damage and d.supports_defense, 1.5),
    (
        "pump evasive attackers",
        lambda c, d: c.enhances_minions and (d.has_charge or d.has_airborne),
        2.0,
    ),
    (
        "combat keywords",
        lambda c, d: (c.has_strike_first or c.has_lethal) and (d.has_strike_first or d.has_lethal),
        1.0,
    ),
    ("underground", lambda c, d: c.operates_underground and d.operates_underground, 2.0),
    ("underwater", lambda c, d: c.operates_underwater and d.operates_underwater, 2.0),
    ("void", lambda c, d: c.operates_void and d.operates_void, 2.0),
]


def calculate_mechanical_synergy(card: Card, deck: Sequence[Card]) -> float:
    """Sum pairing bonuses between the candidate and every deck card."""
    mechanics = identify_card_mechanics(card)
    synergy = 0.0
    for deck_card in deck:
        deck_mechanics = identify_card_mechanics(deck_card)
        for _name, pairing, bonus in MECHANIC_PAIRINGS:
            if pairing(mechanics, deck_mechanics):
                synergy += bonus
    return synergy


# =============================================================================
# REGIONAL STRATEGY
# =============================================================================

# A deck commits to a region once more than this many cards operate there
REGIONAL_STRATEGY_THRESHOLD = 10

MIXED_STRATEGY = "mixed"


# Checked in this order when deciding a deck's strategy
REGION_PREDICATES: dict[str, Callable[[Card], bool]] = {
    "underground": lambda card: identify_card_mechanics(card).operates_underground,
    "underwater": lambda card: identify_card_mechanics(card).operates_underwater,
    "airborne": lambda card: "airborne" in (card.text or "").lower(),
}


def matches_region(card: Card, region: str) -> bool:
    predicate = REGION_PREDICATES.get(region)
    return predicate is not None and predicate(card)


def determine_regional_strategy(cards: Sequence[Card]) -> str:
    """
    The region the deck has clearly committed to.

    Regions are checked in a fixed order; the first with more than
    REGIONAL_STRATEGY_THRESHOLD cards wins. Otherwise "mixed".
    """
    for region in REGION_PREDICATES:
        if sum(1 for card in cards if matches_region(card, region)) > REGIONAL_STRATEGY_THRESHOLD:
            return region
    return MIXED_STRATEGY


# =============================================================================
# AVATAR RESTRICTIONS
# =============================================================================

# (card name fragments, required avatar name fragment)
AVATAR_RESTRICTIONS: list[tuple[tuple[str, ...], str]] = [
    (("tawny", "bruin"), "druid"),
]


def is_card_compatible_with_avatar(card: Card | None, avatar: Card | None) -> bool:
    """
    Whether the card may be played under the avatar.

    Unknown cards or avatars are always compatible.
    """
    if card is None or avatar is None:
        return True
    card_name = card.name.lower()
    avatar_name = avatar.name.lower()
    for fragments, required in AVATAR_RESTRICTIONS:
        if any(fragment in card_name for fragment in fragments) and required not in avatar_name:
            return False
    return True
