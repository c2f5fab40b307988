"""
Card model.

A normalized Sorcery: Contested Realm card plus the rarity and threshold rules
derived from its raw fields.

INVARIANT: `base_name` is the deduplication and copy-count key. Two printings
of the same card (e.g. "Fireball (Foil)" and "Fireball") share one base name.
"""

import re
from dataclasses import dataclass, field
from enum import Enum


class Element(str, Enum):
    """The five elements."""

    WATER = "Water"
    FIRE = "Fire"
    EARTH = "Earth"
    AIR = "Air"
    VOID = "Void"


class CardType(str, Enum):
    """Card types as printed in the `extCardType` column."""

    AVATAR = "Avatar"
    SITE = "Site"
    MINION = "Minion"
    MAGIC = "Magic"
    ARTIFACT = "Artifact"
    AURA = "Aura"


# Threshold strings spell requirements as one letter per element, e.g. "WWF"
THRESHOLD_LETTERS: dict[str, Element] = {
    "W": Element.WATER,
    "F": Element.FIRE,
    "E": Element.EARTH,
    "A": Element.AIR,
    "V": Element.VOID,
}

# Keywords surfaced in deck statistics and reports
KEYWORD_PATTERN = re.compile(
    r"\b(Airborne|Burrowing|Charge|Deathrite|Spellcaster|Stealth|Submerge|Voidwalk"
    r"|Movement \+\d+|Ranged \d+|Lethal|Lance|Waterbound)\b"
)

_PARENTHETICAL_SUFFIX = re.compile(r"\s*\([^)]*\)\s*$")


@dataclass(frozen=True, slots=True)
class Card:
    """
    A card as used by the deck builder.

    Attributes:
        id: TCGplayer product id
        name: Printed product name, possibly with a "(Foil)"-style suffix
        base_name: Name with any trailing parenthetical suffix stripped
        type: Card type
        elements: Element tags printed on the card
        mana_cost: Casting cost; "X" costs are stored as 0
        rarity: Ordinary, Exceptional, Elite or Unique (None when unknown)
        text: Rules text, the source of every heuristic pattern match
        threshold: Raw element requirement string such as "WW"
        elemental_affinity: Element supply, sites only
        mana_generation: Mana supplied per turn, sites only
    """

    id: str
    name: str
    base_name: str
    type: CardType
    elements: tuple[Element, ...] = ()
    mana_cost: int = 0
    rarity: str | None = None
    text: str = ""
    power: int | None = None
    life: int | None = None
    defense: int | None = None
    threshold: str = ""
    set_name: str | None = None
    clean_name: str | None = None
    elemental_affinity: dict[Element, int] = field(default_factory=dict, hash=False)
    mana_generation: int = 0

    @property
    def is_site(self) -> bool:
        return self.type == CardType.SITE

    @property
    def max_copies(self) -> int:
        return get_max_copies_for_rarity(self.rarity)

    @property
    def threshold_requirements(self) -> dict[Element, int]:
        """Element counts demanded by the threshold string (spells only)."""
        if self.is_site:
            return {}
        return parse_threshold(self.threshold)

    @property
    def keywords(self) -> list[str]:
        return extract_keywords(self.text)

    def has_element(self, element: Element) -> bool:
        return element in self.elements


def get_base_card_name(name: str) -> str:
    """Strip a trailing parenthetical suffix: "Fireball (Foil)" -> "Fireball"."""
    if not name:
        return ""
    return _PARENTHETICAL_SUFFIX.sub("", name).strip()


def get_max_copies_for_rarity(rarity: str | None) -> int:
    """
    Maximum copies of one card allowed in a deck.

    Matching is case-insensitive and by substring, so decorated rarity strings
    ("Unique Foil") still resolve. Unknown or missing rarities count as
    Ordinary.
    """
    if not rarity:
        return 4
    lowered = rarity.lower()
    if "unique" in lowered:
        return 1
    if "elite" in lowered:
        return 2
    if "exceptional" in lowered:
        return 3
    return 4


def parse_element(value: str | None) -> Element | None:
    """Resolve an element name case-insensitively; None if unrecognized."""
    if not value:
        return None
    normalized = value.strip().capitalize()
    try:
        return Element(normalized)
    except ValueError:
        return None


def parse_threshold(threshold: str | None) -> dict[Element, int]:
    """Count element letters in a threshold string: "WWF" -> {Water: 2, Fire: 1}."""
    counts: dict[Element, int] = {}
    if not threshold:
        return counts
    for letter in threshold.upper():
        element = THRESHOLD_LETTERS.get(letter)
        if element is not None:
            counts[element] = counts.get(element, 0) + 1
    return counts


def extract_keywords(text: str | None) -> list[str]:
    if not text:
        return []
    return KEYWORD_PATTERN.findall(text)
