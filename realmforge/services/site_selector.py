"""
Site selection for the atlas.

Balances sites across elements with the deck's dominant element weighted
most heavily, then tops up by site quality.
"""

import logging
import math
from collections.abc import Sequence

from realmforge.config import ATLAS_SIZE
from realmforge.models.card import Card, Element, parse_element

logger = logging.getLogger(__name__)

EXCLUDED_SITE_NAME = "rubble"

DOMINANT_RATIO = 0.4
SECONDARY_RATIO = 0.15


def filter_out_rubble(sites: Sequence[Card]) -> list[Card]:
    return [site for site in sites if EXCLUDED_SITE_NAME not in site.name.lower()]


def group_sites_by_element(sites: Sequence[Card]) -> dict[Element, list[Card]]:
    """Sites per element; a multi-element site is listed under each of its elements."""
    groups: dict[Element, list[Card]] = {element: [] for element in Element}
    for site in sites:
        for element in site.elements:
            groups[element].append(site)
    return groups


def calculate_element_ratios(dominant: Element | None) -> dict[Element, float]:
    """Target share per element, normalized to sum to 1."""
    ratios = {
        element: DOMINANT_RATIO if element == dominant else SECONDARY_RATIO
        for element in Element
    }
    total = sum(ratios.values())
    return {element: ratio / total for element, ratio in ratios.items()}


def calculate_site_score(site: Card, dominant: Element | None) -> float:
    score = 1.0
    if dominant is not None and dominant in site.elements:
        score += 3
    score += 0.5 * len(site.elements)

    text = (site.text or "").lower()
    if "draw" in text or "search" in text:
        score += 2
    if "mana" in text or "threshold" in text:
        score += 1
    if site.mana_cost > 3:
        score -= 0.5
    return score


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def select_sites(
    sites: Sequence[Card],
    dominant_element: Element | str | None,
    min_required: int = ATLAS_SIZE,
) -> list[Card]:
    """
    Choose sites for the atlas.

    Each element gets its best round(min_required x ratio) sites by score,
    the dominant element first. A site already chosen for another element is
    skipped. Any shortfall is filled with the best remaining sites. The
    selection never exceeds `min_required`; it falls short only when the
    pool does.

    Args:
        sites: Candidate sites from the pool
        dominant_element: The deck's main element
        min_required: Atlas size

    Returns:
        Selected sites, never including Rubble
    """
    dominant = (
        dominant_element
        if isinstance(dominant_element, Element) or dominant_element is None
        else parse_element(dominant_element)
    )
    candidates = filter_out_rubble(sites)
    groups = group_sites_by_element(candidates)
    logger.info(
        "Available sites by element: %s",
        ", ".join(f"{len(groups[e])} {e.value}" for e in Element),
    )

    ratios = calculate_element_ratios(dominant)
    order = sorted(Element, key=lambda element: element != dominant)

    selected: list[Card] = []
    chosen_ids: set[str] = set()

    def take(site: Card) -> None:
        selected.append(site)
        chosen_ids.add(site.id)

    for element in order:
        target = _round_half_up(min_required * ratios[element])
        ranked = sorted(
            groups[element], key=lambda site: calculate_site_score(site, dominant), reverse=True
        )
        added = 0
        for site in ranked:
            if added >= target or len(selected) >= min_required:
                break
            if site.id in chosen_ids:
                continue
            take(site)
            added += 1

    if len(selected) < min_required:
        remaining = sorted(
            (site for site in candidates if site.id not in chosen_ids),
            key=lambda site: calculate_site_score(site, dominant),
            reverse=True,
        )
        for site in remaining[: min_required - len(selected)]:
            take(site)

    if len(selected) < min_required:
        logger.warning("Only %d sites available, atlas needs %d", len(selected), min_required)
    logger.info("Selected %d sites", len(selected))
    return selected
