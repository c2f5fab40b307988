"""
Combo detection.

The combo catalog is a rule table. Three rule shapes cover every entry:

- NamedComboRule: a checklist of known combo pieces, matched by exact
  (case-insensitive) card name
- KeywordComboRule: any card whose name or rules text satisfies a matcher
- PairedComboRule: two matchers that must both reach a count, scored over
  the union of their cards

A rule that reaches its threshold yields one Combo whose synergy is
`member count x rule weight`. Rules are independent and may share cards.
Detection depends only on the set of cards given, never on their order.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache

from realmforge.analysis.mechanics import TextRule
from realmforge.models.analysis import Combo
from realmforge.models.card import Card, CardType

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CardMatcher:
    """Matches a card when any one of its criteria holds."""

    text_terms: tuple[str, ...] = ()
    name_terms: tuple[str, ...] = ()
    text_rules: tuple[TextRule, ...] = ()
    card_types: tuple[CardType, ...] = ()
    min_elements: int = 0

    def matches(self, card: Card) -> bool:
        return _card_matches(self, card)


@lru_cache(maxsize=65536)
def _card_matches(matcher: CardMatcher, card: Card) -> bool:
    text = (card.text or "").lower()
    name = card.name.lower()
    if any(term in name for term in matcher.name_terms):
        return True
    if any(term in text for term in matcher.text_terms):
        return True
    if any(rule.matches(text) for rule in matcher.text_rules):
        return True
    if card.type in matcher.card_types:
        return True
    return matcher.min_elements > 0 and len(card.elements) >= matcher.min_elements


@dataclass(frozen=True, slots=True)
class NamedComboRule:
    name: str
    pieces: tuple[str, ...]
    threshold: int
    weight: float
    description: str
    strategy: str | None = None

    def detect(self, cards_by_name: Mapping[str, Card]) -> Combo | None:
        found = [piece for piece in self.pieces if piece.lower() in cards_by_name]
        if len(found) < self.threshold:
            return None
        return Combo(
            name=self.name,
            cards=found,
            synergy=len(found) * self.weight,
            description=self.description,
            strategy=self.strategy,
        )


@dataclass(frozen=True, slots=True)
class KeywordComboRule:
    name: str
    matcher: CardMatcher
    threshold: int
    weight: float
    description: str
    strategy: str | None = None

    def detect(self, cards: Sequence[Card]) -> Combo | None:
        members = [card.name for card in cards if self.matcher.matches(card)]
        if len(members) < self.threshold:
            return None
        return Combo(
            name=self.name,
            cards=members,
            synergy=len(members) * self.weight,
            description=self.description,
            strategy=self.strategy,
        )


@dataclass(frozen=True, slots=True)
class PairedComboRule:
    """
    Two card groups that pay off together.

    Qualifies when both groups reach their minimums, or when the primary
    group alone reaches `primary_alone` (if set).
    """

    name: str
    primary: CardMatcher
    primary_min: int
    secondary: CardMatcher
    secondary_min: int
    weight: float
    description: str
    strategy: str | None = None
    primary_alone: int | None = None

    def detect(self, cards: Sequence[Card]) -> Combo | None:
        primary = [card.name for card in cards if self.primary.matches(card)]
        secondary = [card.name for card in cards if self.secondary.matches(card)]
        together = len(primary) >= self.primary_min and len(secondary) >= self.secondary_min
        alone = self.primary_alone is not None and len(primary) >= self.primary_alone
        if not (together or alone):
            return None
        members = list(dict.fromkeys(primary + secondary))
        return Combo(
            name=self.name,
            cards=members,
            synergy=len(members) * self.weight,
            description=self.description,
            strategy=self.strategy,
        )


ComboRule = NamedComboRule | KeywordComboRule | PairedComboRule


# =============================================================================
# COMBO CATALOG
# =============================================================================

CORE_ARTIFACTS: tuple[str, ...] = ("amethyst core", "onyx core", "ruby core", "aquamarine core")

POSITION_TERMS: tuple[str, ...] = (
    "back row",
    "front row",
    "position",
    "adjacent",
    "nearby",
    "location",
)
MOVEMENT_TERMS: tuple[str, ...] = ("move", "teleport", "step", "movement")

COMBO_RULES: list[ComboRule] = [
    # Named piece checklists
    NamedComboRule(
        "Elemental Lock Engine",
        ("Elemental Lock", "Prismatic Lock", "Mana Drain"),
        2,
        15,
        "Combines elemental restriction effects to limit opponent's options",
        "Use early to restrict opponent's mana base and card choices",
    ),
    NamedComboRule(
        "Mana Acceleration Engine",
        ("Mana Crystal", "Elemental Surge", "Ancient Wellspring", "Ley Line"),
        2,
        12,
        "Accelerates mana production for explosive turns",
        "Play early to enable high-cost threats ahead of curve",
    ),
    NamedComboRule(
        "Recursion Engine",
        ("Resurrection", "Return to Hand", "Eternal Return", "Phoenix Revival"),
        2,
        10,
        "Provides card advantage through repeated use of key cards",
        "Focus on high-value targets for recursion effects",
    ),
    NamedComboRule(
        "Control Package",
        ("Counterspell", "Dispel", "Control Magic", "Nullify"),
        3,
        8,
        "Comprehensive control suite to manage threats",
        "Hold up mana to respond to opponent's key plays",
    ),
    NamedComboRule(
        "Swarm Strategy",
        ("Token Generator", "Swarm of Creatures", "Mass Summon", "Creature Horde"),
        2,
        11,
        "Overwhelms opponent with numerous creatures",
        "Deploy quickly and apply pressure before opponent can stabilize",
    ),
    NamedComboRule(
        "Site Defense Network",
        ("Site Ward", "Defensive Barrier", "Protective Aura", "Guardian Spirit"),
        2,
        9,
        "Protects key sites from opponent attacks",
        "Use to secure important sites and maintain territorial advantage",
    ),
    NamedComboRule(
        "Underground Network",
        (
            "Underground Network",
            "Tunnel System",
            "Subterranean Route",
            "Hidden Passage",
            "Secret Tunnel",
            "Hidden Route",
            "Subterranean Path",
        ),
        2,
        13,
        "Enables surprise attacks and positional advantages",
        "Use for unexpected tactical maneuvers and site access",
    ),
    NamedComboRule(
        "Water Dominance",
        ("Water Mastery", "Tidal Wave", "Ocean Control", "Aquatic Dominance"),
        2,
        14,
        "Controls water-based positions and effects",
        "Dominate aquatic sites and use water-based advantages",
    ),
    NamedComboRule(
        "Water Dominance Engine",
        ("Water Engine", "Aquatic Control", "Ocean Mastery", "Tidal Control"),
        2,
        17,
        "Establishes complete control over water-based strategies",
        "Focus on water sites and aquatic creature synergies",
    ),
    NamedComboRule(
        "Airborne Dominance",
        ("Flying Creatures", "Air Superiority", "Wind Control", "Sky Dominance"),
        2,
        12,
        "Controls the skies and aerial combat",
        "Use flying units to bypass ground defenses",
    ),
    NamedComboRule(
        "Aerial Superiority Chamber",
        ("Aerial Chamber", "Sky Control", "Wind Mastery", "Flight Superiority"),
        2,
        15,
        "Dominates aerial combat and sky-based positions",
        "Control high-ground positions and flying creature interactions",
    ),
    NamedComboRule(
        "Multi-Position Mastery",
        ("Position Master", "Tactical Advantage", "Strategic Placement", "Positional Control"),
        2,
        16,
        "Enables control of multiple strategic positions",
        "Coordinate attacks across multiple fronts",
    ),
    NamedComboRule(
        "Positional Control",
        ("Position Control", "Territory Lock", "Area Denial", "Strategic Hold"),
        2,
        14,
        "Maintains strategic control over key battlefield positions",
        "Deny opponent access to crucial sites and positions",
    ),
    NamedComboRule(
        "Elemental Convergence",
        ("Elemental Convergence", "Multi-Element Synergy", "Elemental Fusion", "Element Harmony"),
        2,
        20,
        "Combines multiple elements for powerful synergistic effects",
        "Build towards multi-element thresholds for maximum impact",
    ),
    NamedComboRule(
        "Elemental Threshold",
        ("Threshold Bonus", "Element Mastery", "Power Threshold", "Elemental Peak"),
        2,
        16,
        "Rewards reaching specific elemental thresholds",
        "Focus deck building around threshold requirements",
    ),
    NamedComboRule(
        "Elemental Core Engine",
        ("Amethyst Core", "Onyx Core", "Ruby Core", "Aquamarine Core"),
        2,
        15,
        "Core artifacts that enhance elemental strategies",
        "Use cores to accelerate elemental play patterns and thresholds",
    ),
    # Control
    KeywordComboRule(
        "Disable Control",
        CardMatcher(
            text_terms=("disabled", "sleep", "constricts and disables", "tap", "disable")
        ),
        2,
        11,
        "Controls opponents through disable effects and sleep mechanics",
        "Lock down key enemy threats while developing your own board",
    ),
    KeywordComboRule(
        "Immobilize Control",
        CardMatcher(
            text_terms=(
                "immobile",
                "immobilize",
                "can't move",
                "cannot move",
                "restricted",
                "unable to move",
            )
        ),
        2,
        10,
        "Controls the battlefield through movement restriction",
        "Lock down enemy units while maintaining your own mobility",
    ),
    KeywordComboRule(
        "Mind Control",
        CardMatcher(
            text_terms=(
                "gain control",
                "controlled by",
                "puppet",
                "control of all",
                "each player is controlled",
                "steal",
            )
        ),
        1,
        18,
        "Gains control of enemy units and manipulates opponents",
        "Turn enemy threats against them through control effects",
    ),
    PairedComboRule(
        "Aura Control Matrix",
        primary=CardMatcher(text_terms=("aura",), card_types=(CardType.AURA,)),
        primary_min=3,
        secondary=CardMatcher(
            text_terms=("dispel", "remove aura", "destroy aura", "banish aura")
        ),
        secondary_min=1,
        weight=12,
        description="Manages powerful auras and provides selective dispel options",
        strategy="Use auras for value while keeping dispel available for opponent's auras",
    ),
    PairedComboRule(
        "Curse Affliction",
        primary=CardMatcher(text_terms=("curse", "hex", "afflict")),
        primary_min=1,
        secondary=CardMatcher(
            text_terms=("target avatar", "target player", "opponent loses", "enemy avatar")
        ),
        secondary_min=2,
        weight=13,
        description="Applies persistent debuffs and targeted effects on opponents",
        strategy="Weaken opponents with curses and direct avatar damage",
        primary_alone=2,
    ),
    KeywordComboRule(
        "Transformation Control",
        CardMatcher(
            text_terms=("transform", "pollimorph", "frog token", "into a", "becomes", "morph")
        ),
        1,
        13,
        "Controls threats through creature transformation",
        "Neutralize key enemy threats by transforming them",
    ),
    KeywordComboRule(
        "Magic Protection Package",
        CardMatcher(
            name_terms=("niniane", "amulet"),
            text_terms=(
                "magic immunity",
                "immune to magic",
                "protection",
                "ward",
                "resist",
                "deflect",
                "counter",
                "spell immunity",
            ),
        ),
        1,
        17,
        "Provides protection from magical effects and spells",
        "Use to counter spell-heavy control decks",
    ),
    # Elemental
    KeywordComboRule(
        "Multi-Element Synergy",
        CardMatcher(
            min_elements=2,
            text_terms=(
                "aefw",
                "air;earth;fire;water",
                "all elements",
                "multi",
                "pristine paradise",
                "colour out of space",
            ),
        ),
        2,
        16,
        "Leverages multiple elemental sources for flexibility",
        "Build multi-color decks with strong fixing and splash options",
    ),
    # Resources
    KeywordComboRule(
        "Cost Reduction Engine",
        CardMatcher(
            text_terms=("for (1) less", "cost", "for (0)", "reduced", "cheaper", "discount")
        ),
        2,
        11,
        "Reduces casting costs for efficient resource usage",
        "Enable expensive cards earlier through cost reduction",
    ),
    KeywordComboRule(
        "Mana/Threshold Acceleration Engine",
        CardMatcher(
            name_terms=CORE_ARTIFACTS,
            text_terms=("mana", "threshold", "element", "acceleration"),
        ),
        2,
        14,
        "Provides both mana fixing and threshold acceleration for consistent plays",
        "Include to enable multi-element strategies and expensive threats",
    ),
    KeywordComboRule(
        "Spell Cost Reduction Engine",
        CardMatcher(
            name_terms=("stone",),
            text_terms=(
                "spells cost",
                "cost (1) less",
                "reduce",
                "discount",
                "cheaper",
                "per element",
            ),
            text_rules=(TextRule(all_of=("cost",), any_of=("less", "reduction")),),
        ),
        2,
        13,
        "Reduces spell costs for efficient resource usage and powerful turns",
        "Build around expensive spells and high-impact effects",
    ),
    # Card advantage
    KeywordComboRule(
        "Voidwalk Resurrection",
        CardMatcher(
            text_terms=("voidwalk", "summon each other dead", "resurrection", "return", "void")
        ),
        2,
        16,
        "Uses voidwalk creatures and resurrection effects for value",
        "Build graveyard value and recurring threats through voidwalk",
    ),
    KeywordComboRule(
        "Deathrite Synergy",
        CardMatcher(text_terms=("deathrite", "genesis", "geistwood")),
        2,
        13,
        "Combines genesis and deathrite abilities for versatile effects",
        "Maximize value from cards with dual genesis/deathrite abilities",
    ),
    KeywordComboRule(
        "Spell-Triggered Value Engine",
        CardMatcher(
            name_terms=("morrigan", "ring"),
            text_terms=(
                "when bearer casts",
                "when you cast",
                "spell trigger",
                "triggered by",
                "whenever",
                "each time",
            ),
            text_rules=(TextRule(all_of=("cast",), any_of=("gain", "deal", "draw")),),
        ),
        1,
        11,
        "Generates value whenever spells are cast",
        "Build around spell-heavy strategies for consistent value",
    ),
    # Positioning
    PairedComboRule(
        "Tactical Positioning",
        primary=CardMatcher(text_terms=POSITION_TERMS),
        primary_min=3,
        secondary=CardMatcher(text_terms=MOVEMENT_TERMS),
        secondary_min=2,
        weight=9,
        description="Exploits position-based effects with strategic movement",
        strategy="Maximize positional advantages with careful unit placement",
    ),
    KeywordComboRule(
        "Movement Control Engine",
        CardMatcher(
            text_terms=("teleport", "move", "step", "movement", "nearby", "location", "position")
        ),
        3,
        8,
        "Manipulates unit positioning and movement for tactical advantage",
        "Control the battlefield through strategic positioning and movement denial",
    ),
]


def _index_by_name(cards: Iterable[Card]) -> tuple[dict[str, Card], list[Card]]:
    """
    Deduplicate by base name and index by lowercased name and base name.

    Cards are visited in sorted order so the result is independent of input
    order.
    """
    unique: dict[str, Card] = {}
    for card in sorted(cards, key=lambda c: (c.base_name.lower(), c.name.lower(), c.id)):
        key = (card.base_name or card.name).lower()
        if key:
            unique.setdefault(key, card)

    by_name: dict[str, Card] = {}
    for key, card in unique.items():
        by_name[key] = card
        by_name.setdefault(card.name.lower(), card)
    return by_name, list(unique.values())


def identify_card_combos(
    cards: Iterable[Card],
    rules: Sequence[ComboRule] | None = None,
) -> list[Combo]:
    """
    Run every combo rule over a card list.

    Duplicate copies of a card count once. Cards the catalog names but the
    pool lacks are simply not found.

    Args:
        cards: Cards to scan (a pool or a deck)
        rules: Catalog override, defaults to COMBO_RULES

    Returns:
        Combos in catalog order
    """
    by_name, unique = _index_by_name(cards)
    if not unique:
        return []

    combos: list[Combo] = []
    for rule in rules if rules is not None else COMBO_RULES:
        if isinstance(rule, NamedComboRule):
            combo = rule.detect(by_name)
        else:
            combo = rule.detect(unique)
        if combo is not None:
            logger.debug("%s: %d cards, synergy %.1f", combo.name, len(combo.cards), combo.synergy)
            combos.append(combo)
    return combos


def combo_member_names(combos: Iterable[Combo]) -> set[str]:
    """Lowercased names of every card in any of the combos."""
    return {name.lower() for combo in combos for name in combo.cards}


def is_combo_piece(card: Card, combos: Iterable[Combo]) -> bool:
    members = combo_member_names(combos)
    return card.base_name.lower() in members or card.name.lower() in members


def calculate_combo_synergy(cards: Sequence[Card]) -> float:
    """
    Structural synergy of a card group, independent of the named catalog.

    Rewards group size, a one- or two-element spread, a shared card type and
    a smooth cost progression (each adjacent pair of sorted costs within 2).
    """
    if len(cards) < 2:
        return 0.0

    synergy = (len(cards) - 1) * 5.0

    elements = {element for card in cards for element in card.elements}
    if len(elements) == 1:
        synergy += 10
    elif len(elements) == 2:
        synergy += 15

    if len({card.type for card in cards}) == 1:
        synergy += 8

    costs = sorted(card.mana_cost for card in cards)
    synergy += 3 * sum(1 for low, high in zip(costs, costs[1:]) if high - low <= 2)

    return synergy


def calculate_combo_contribution(card: Card, deck: Sequence[Card]) -> float:
    """
    How much adding the card advances named combos.

    Each combo containing the card after it is added counts: 10% of its
    synergy when the deck already had that combo one member short (the card
    extends it), 30% otherwise (the card completes it).
    """
    if not deck:
        return 0.0

    names = {card.base_name.lower(), card.name.lower()}
    existing = identify_card_combos(deck)
    potential = identify_card_combos([*deck, card])

    contribution = 0.0
    for combo in potential:
        if not names & {member.lower() for member in combo.cards}:
            continue
        is_new = not any(
            prior.name == combo.name and len(prior.cards) == len(combo.cards) - 1
            for prior in existing
        )
        contribution += combo.synergy * (0.3 if is_new else 0.1)
    return contribution
