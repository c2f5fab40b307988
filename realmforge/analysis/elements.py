"""
Elemental threshold analysis.

Compares the element supply a deck can count on against the thresholds its
spells demand, and ranks candidates by how much of the shortfall they cover.

Supply comes from site affinity when sites are known, otherwise from the
element tags of the spells themselves. Requirements come from a spell's
threshold letters and from "requires N <element>" phrases in its text,
whichever is larger per element.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from realmforge.models.analysis import ElementalDeficiency
from realmforge.models.card import Card, Element, parse_element

REQUIREMENT_PATTERN = re.compile(r"requires?\s+(\d+)\s+(water|fire|earth|air|void)", re.IGNORECASE)

# Each point of deficit a candidate's element covers is worth this much
DEFICIT_WEIGHT = 2


@dataclass
class ElementAnalysis:
    """Per-element supply, demand and the shortfalls between them."""

    supply: dict[Element, int] = field(default_factory=dict)
    thresholds: dict[Element, int] = field(default_factory=dict)
    requirements: dict[Element, list[tuple[str, int]]] = field(default_factory=dict)
    deficiencies: dict[Element, ElementalDeficiency] = field(default_factory=dict)


def card_requirements(card: Card) -> dict[Element, int]:
    """Element thresholds a spell demands. Sites demand nothing."""
    if card.is_site:
        return {}
    required = dict(card.threshold_requirements)
    for amount, name in REQUIREMENT_PATTERN.findall(card.text or ""):
        element = parse_element(name)
        if element is not None:
            required[element] = max(required.get(element, 0), int(amount))
    return required


def calculate_element_supply(
    deck: Iterable[Card],
    sites: Iterable[Card] | None = None,
) -> dict[Element, int]:
    supply = {element: 0 for element in Element}
    if sites is not None:
        for site in sites:
            for element, amount in site.elemental_affinity.items():
                supply[element] += amount
        return supply
    for card in deck:
        for element in card.elements:
            supply[element] += 1
    return supply


def analyze_elemental_requirements(
    deck: Sequence[Card],
    sites: Sequence[Card] | None = None,
) -> ElementAnalysis:
    """
    Find elements whose supply falls below the highest threshold demanded.

    Args:
        deck: Spells in the deck (sites in it are skipped for demand)
        sites: Chosen sites, if any; their affinity replaces tag counting

    Returns:
        ElementAnalysis with a deficiency entry per short element
    """
    analysis = ElementAnalysis(supply=calculate_element_supply(deck, sites))
    for card in deck:
        for element, amount in card_requirements(card).items():
            if amount <= 0:
                continue
            analysis.thresholds[element] = max(analysis.thresholds.get(element, 0), amount)
            analysis.requirements.setdefault(element, []).append((card.name, amount))

    for element, required in analysis.thresholds.items():
        current = analysis.supply.get(element, 0)
        if current < required:
            analysis.deficiencies[element] = ElementalDeficiency(
                current=current,
                required=required,
                deficit=required - current,
                cards=[name for name, _ in analysis.requirements[element]],
            )
    return analysis


def calculate_deficit_contribution(
    card: Card,
    deficiencies: dict[Element, ElementalDeficiency],
) -> float:
    """Sum of deficit x 2 over the card's elements that are in deficiency."""
    return float(
        sum(
            deficiencies[element].deficit * DEFICIT_WEIGHT
            for element in card.elements
            if element in deficiencies
        )
    )


def recommend_threshold_cards(
    candidates: Iterable[Card],
    deck: Sequence[Card],
    sites: Sequence[Card] | None = None,
) -> list[tuple[Card, float]]:
    """
    Candidates that ease the deck's elemental shortfalls, best first.

    Cards already in the deck and cards that cover no deficit are left out.
    """
    deficiencies = analyze_elemental_requirements(deck, sites).deficiencies
    if not deficiencies:
        return []

    in_deck = {card.base_name for card in deck}
    scored = [
        (card, calculate_deficit_contribution(card, deficiencies))
        for card in candidates
        if card.base_name not in in_deck
    ]
    recommendations = [(card, score) for card, score in scored if score > 0]
    recommendations.sort(key=lambda pair: pair[1], reverse=True)
    return recommendations
