"""
Human-readable deck reports.

Formats a built deck as plain text for the CLI and the API: summary,
mana curve bars, archetype and strategy, key keywords, mulligan targets,
win conditions, rarity breakdown, validation results and the deck list.
"""

from collections import Counter
from collections.abc import Callable, Sequence

from realmforge.analysis.stats import get_deck_stats
from realmforge.config import ATLAS_SIZE, SPELLBOOK_SIZE
from realmforge.models.card import Card, CardType
from realmforge.models.deck import Deck, DeckValidationResult

REPORT_HEADER = "=== SORCERY: CONTESTED REALM DECK SUMMARY ==="
REPORT_RULE = "=" * 50

FULL_BAR = "█"
EMPTY_BAR = "░"

# (label, card type, share of the spellbook that must be exceeded, strategy)
ARCHETYPE_LABELS: list[tuple[str, CardType, float, str]] = [
    (
        "Minion-Heavy",
        CardType.MINION,
        0.6,
        "Control the board with numerous minions and establish territorial advantage.",
    ),
    (
        "Spell-Heavy Control",
        CardType.MAGIC,
        0.4,
        "Control with powerful spells while setting up game-winning combos.",
    ),
    (
        "Artifact Combo",
        CardType.ARTIFACT,
        0.3,
        "Build a powerful artifact engine to overwhelm with value.",
    ),
]
BALANCED_LABEL = ("Balanced", "Maintain flexibility and adapt based on opponent's strategy.")

MULLIGAN_MAX_COST = 2
WIN_CONDITION_POWER = 5
TOP_ENTRIES = 3


def curve_bar(percentage: float) -> str:
    """One block per 5%, padded with light blocks to at least four characters."""
    filled = int(percentage // 5)
    return FULL_BAR * filled + EMPTY_BAR * max(0, 4 - filled)


def format_mana_curve(spells: Sequence[Card]) -> list[str]:
    curve = get_deck_stats(spells).mana_curve
    lines = ["Mana Curve:"]
    for cost in sorted(curve):
        count = curve[cost]
        percentage = count / len(spells) * 100 if spells else 0.0
        lines.append(
            f"  {cost} mana: {count:2} cards ({percentage:2.0f}%) {curve_bar(percentage)}"
        )
    return lines


def classify_spellbook(spells: Sequence[Card]) -> tuple[str, str]:
    """Report label and strategy text from the spellbook's type mix."""
    types = Counter(card.type for card in spells)
    for label, card_type, share, strategy in ARCHETYPE_LABELS:
        if types[card_type] > len(spells) * share:
            return label, strategy
    return BALANCED_LABEL


def mulligan_targets(
    spells: Sequence[Card],
    score: Callable[[Card, Sequence[Card]], float],
) -> list[Card]:
    """Best cheap cards to keep in an opening hand, by synergy."""
    cheap = {card.base_name: card for card in spells if card.mana_cost <= MULLIGAN_MAX_COST}
    ranked = sorted(cheap.values(), key=lambda card: score(card, spells), reverse=True)
    return ranked[:TOP_ENTRIES]


def win_conditions(spells: Sequence[Card]) -> list[Card]:
    strong = {
        card.base_name: card for card in spells if (card.power or 0) >= WIN_CONDITION_POWER
    }
    return sorted(strong.values(), key=lambda card: card.power or 0, reverse=True)[:TOP_ENTRIES]


def format_deck_list(cards: Sequence[Card]) -> list[str]:
    """Cards grouped by name, most copies first, then alphabetically."""
    counts = Counter(card.name for card in cards)
    entries = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [f"- {name}" if count == 1 else f"- {name} {count}x" for name, count in entries]


def format_validation(result: DeckValidationResult) -> list[str]:
    lines = ["Validation:"]
    for error in result.errors:
        lines.append(f"  ERROR: {error}")
    for warning in result.warnings:
        lines.append(f"  WARNING: {warning}")
    if result.is_valid:
        lines.append("  Deck passes all construction rules.")
    else:
        lines.append("  Deck has rule violations that must be fixed before play.")
    return lines


def format_deck_report(
    deck: Deck,
    dominant_element: str,
    element_pair: tuple[str, str] | None = None,
    score: Callable[[Card, Sequence[Card]], float] | None = None,
    validation: DeckValidationResult | None = None,
) -> str:
    """
    Render the full deck report.

    Args:
        deck: Built deck
        dominant_element: Element the deck was built around
        element_pair: Most frequent element pairing in the pool
        score: Synergy function used to rank mulligan targets; cost order when omitted
        validation: Validation result to include, if any

    Returns:
        Multi-line report text
    """
    spells = deck.spellbook
    lines = [REPORT_HEADER, ""]

    if deck.avatar is not None:
        lines.append(f"Avatar: {deck.avatar.name}")
    lines.append(f"Spellbook: {len(spells)} cards")
    lines.append(f"Sites: {len(deck.sites)} cards")
    lines.append(f"Primary Element: {dominant_element}")
    if element_pair and element_pair[1]:
        lines.append(f"Element Combo: {element_pair[0]} + {element_pair[1]}")

    lines.append("")
    lines.extend(format_mana_curve(spells))

    label, strategy = classify_spellbook(spells)
    lines.extend(["", f"Archetype: {label}", f"Strategy: {strategy}"])

    keywords = Counter(get_deck_stats(spells).keywords).most_common(TOP_ENTRIES)
    if keywords:
        lines.extend(["", "Key Synergies:"])
        lines.extend(f"  - {keyword}: {count} cards" for keyword, count in keywords)

    rank = score or (lambda card, _deck: -float(card.mana_cost))
    targets = mulligan_targets(spells, rank)
    if targets:
        lines.extend(["", "Mulligan Targets (early game):"])
        lines.extend(f"  - {card.name} ({card.mana_cost} mana)" for card in targets)

    threats = win_conditions(spells)
    if threats:
        lines.extend(["", "Win Conditions:"])
        lines.extend(f"  - {card.name} ({card.power} power)" for card in threats)

    rarities = Counter(get_deck_stats(spells).rarities).most_common()
    lines.extend(["", "Rarity: " + ", ".join(f"{count} {rarity}" for rarity, count in rarities)])

    if validation is not None:
        lines.append("")
        lines.extend(format_validation(validation))

    lines.extend(["", "Deck List:"])
    if deck.avatar is not None:
        lines.append(f"Avatar: {deck.avatar.name}")
    lines.append(f"Spellbook ({len(spells)}):")
    lines.extend(format_deck_list(spells))
    lines.append(f"Atlas ({len(deck.sites)}):")
    lines.extend(format_deck_list(deck.sites))

    lines.extend(["", REPORT_RULE])
    return "\n".join(lines)


def format_rules_summary() -> str:
    """Deck construction rules the builder and validator enforce."""
    return "\n".join(
        [
            "=== DECK CONSTRUCTION RULES ===",
            "- One Avatar, which counts toward neither pile.",
            f"- Spellbook: exactly {SPELLBOOK_SIZE} minions, magics, auras and artifacts.",
            f"- Atlas: exactly {ATLAS_SIZE} sites.",
            "- Copy limits by rarity: Ordinary 4, Exceptional 3, Elite 2, Unique 1.",
            "- Sites supply elemental threshold; spells need enough of their elements to cast.",
            "- Every Avatar is a Spellcaster.",
        ]
    )
