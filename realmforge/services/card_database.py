"""
Card database service.

Loads set CSVs, deduplicates printings by base name and categorizes the
result by card type.
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from realmforge.config import settings
from realmforge.models.card import Card, CardType
from realmforge.models.failure import DataAbsenceError
from realmforge.parsers.card_csv import parse_products_csv

logger = logging.getLogger(__name__)

CSV_SUFFIX = "ProductsAndPrices.csv"


@dataclass
class CardPool:
    """Deduplicated cards split by type, plus raw keyword and element tallies."""

    unique_cards: list[Card] = field(default_factory=list)
    avatars: list[Card] = field(default_factory=list)
    sites: list[Card] = field(default_factory=list)
    minions: list[Card] = field(default_factory=list)
    artifacts: list[Card] = field(default_factory=list)
    auras: list[Card] = field(default_factory=list)
    magics: list[Card] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    elements: list[str] = field(default_factory=list)

    @property
    def spells(self) -> list[Card]:
        return self.minions + self.artifacts + self.auras + self.magics


def set_file_path(set_name: str, data_dir: Path | None = None) -> Path:
    return (data_dir or settings.data_dir) / f"{set_name}{CSV_SUFFIX}"


def read_card_data(data_sets: Iterable[str], data_dir: Path | None = None) -> list[Card]:
    """
    Read every requested set's CSV.

    A missing set file is logged and skipped so one absent set does not
    prevent building from the others.
    """
    cards: list[Card] = []
    for set_name in data_sets:
        path = set_file_path(set_name, data_dir)
        if not path.exists():
            logger.error("Card data for set %s not found at %s", set_name, path)
            continue
        cards.extend(parse_products_csv(path, set_name))
    return cards


def deduplicate_cards(cards: Iterable[Card]) -> list[Card]:
    """
    Keep one printing per base name.

    Printings whose clean name marks them as preconstructed lose to any other
    printing; otherwise the first one seen wins.
    """
    by_name: dict[str, list[Card]] = {}
    for card in cards:
        by_name.setdefault(card.base_name, []).append(card)

    unique: list[Card] = []
    for versions in by_name.values():
        # sorted() is stable, so ties keep file order
        versions = sorted(versions, key=lambda c: "Preconstructed" in (c.clean_name or ""))
        unique.append(versions[0])
    return unique


def categorize_cards(unique_cards: list[Card]) -> CardPool:
    """Split cards by type and tally keywords and elements across the pool."""
    pool = CardPool(unique_cards=unique_cards)
    buckets: dict[CardType, list[Card]] = {
        CardType.AVATAR: pool.avatars,
        CardType.SITE: pool.sites,
        CardType.MINION: pool.minions,
        CardType.ARTIFACT: pool.artifacts,
        CardType.AURA: pool.auras,
        CardType.MAGIC: pool.magics,
    }
    for card in unique_cards:
        buckets[card.type].append(card)
        pool.keywords.extend(card.keywords)
        pool.elements.extend(element.value for element in card.elements)
    return pool


def build_card_pool(cards: Iterable[Card]) -> CardPool:
    """
    Deduplicate and categorize already-parsed cards.

    Raises:
        DataAbsenceError: If no cards are given
    """
    unique = deduplicate_cards(cards)
    if not unique:
        raise DataAbsenceError(
            "No cards were loaded. Please check the card data.",
        )
    pool = categorize_cards(unique)
    logger.info(
        "Card pool: %d unique cards (%d avatars, %d sites, %d minions, "
        "%d artifacts, %d auras, %d magics)",
        len(pool.unique_cards),
        len(pool.avatars),
        len(pool.sites),
        len(pool.minions),
        len(pool.artifacts),
        len(pool.auras),
        len(pool.magics),
    )
    return pool


async def load_card_pool(
    data_sets: Iterable[str] | None = None,
    data_dir: Path | None = None,
) -> CardPool:
    """
    Load the card pool for the given sets.

    File parsing runs in a worker thread; callers await this once before the
    (synchronous) deck-building pipeline starts.

    Args:
        data_sets: Set names, defaults to settings.default_data_sets
        data_dir: Directory holding the CSVs, defaults to settings.data_dir

    Returns:
        Categorized CardPool

    Raises:
        DataAbsenceError: If no cards could be loaded
        CardDataError: If a set file is malformed
    """
    sets = list(data_sets) if data_sets else list(settings.default_data_sets)
    logger.info("Loading card data for sets: %s", ", ".join(sets))
    cards = await asyncio.to_thread(read_card_data, sets, data_dir)
    return build_card_pool(cards)
