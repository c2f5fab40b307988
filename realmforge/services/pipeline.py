"""
Deck building pipeline.

Runs the whole build for one set of options:

    avatar -> sites -> spellbook -> validation -> deck

The card pool must already be loaded (see card_database.load_card_pool);
everything here is synchronous.
"""

import logging
import time
from dataclasses import dataclass, field

from realmforge.analysis.cache import DeckAnalysisCache
from realmforge.analysis.stats import analyze_elemental_synergy
from realmforge.analysis.synergy import SynergyScorer, get_synergy_weighting
from realmforge.config import ATLAS_SIZE
from realmforge.models.card import Element
from realmforge.models.deck import BuildOptions, Deck, DeckMetadata, DeckValidationResult
from realmforge.services.avatar_selector import select_avatar
from realmforge.services.card_database import CardPool
from realmforge.services.deck_builder import SpellbookResult, build_spellbook
from realmforge.services.deck_report import format_deck_report
from realmforge.services.deck_validator import validate_deck
from realmforge.services.site_selector import select_sites

logger = logging.getLogger(__name__)


@dataclass
class DeckBuildResult:
    """Everything one build produced."""

    deck: Deck
    dominant_element: Element
    element_pair: tuple[str, str]
    validation: DeckValidationResult
    spellbook: SpellbookResult
    report: str = ""
    elapsed_seconds: float = 0.0
    notes: list[str] = field(default_factory=list)


def build_complete_deck(pool: CardPool, options: BuildOptions | None = None) -> DeckBuildResult:
    """
    Build, validate and describe a deck from a loaded pool.

    Rule violations do not raise: the deck comes back with a failing
    validation result.

    Args:
        pool: Loaded card pool
        options: Build options, defaults when omitted

    Returns:
        DeckBuildResult with the deck, its validation and the text report

    Raises:
        DataAbsenceError: If the pool has no avatars
        KnownError: If an option names an unknown element or weighting
    """
    options = options or BuildOptions()
    started = time.perf_counter()
    scorer = SynergyScorer(get_synergy_weighting(options.synergy_weighting), DeckAnalysisCache())

    avatar, dominant = select_avatar(pool.avatars, pool.elements, options.preferred_element)
    sites = select_sites(pool.sites, dominant, ATLAS_SIZE)
    spellbook = build_spellbook(
        pool,
        avatar=avatar,
        preferred_archetype=options.preferred_archetype,
        scorer=scorer,
        sites=sites,
    )
    validation = validate_deck(avatar, sites, spellbook.spells)

    synergies = analyze_elemental_synergy(pool.unique_cards)
    element_pair = synergies[0][0] if synergies else (dominant.value, "")

    deck = Deck(
        avatar=avatar,
        sites=sites,
        spellbook=spellbook.spells,
        metadata=DeckMetadata(
            name=f"Generated Deck - {dominant.value}",
            description=(
                f"Auto-generated deck with {len(spellbook.spells)} spellbook cards "
                f"and {len(sites)} sites."
            ),
            total_synergy=spellbook.total_synergy,
            playability_score=spellbook.playability.playability_score,
        ),
    )
    report = format_deck_report(
        deck,
        dominant.value,
        element_pair,
        score=scorer.score,
        validation=validation,
    )

    elapsed = time.perf_counter() - started
    logger.info("Deck building completed in %.2f seconds", elapsed)
    return DeckBuildResult(
        deck=deck,
        dominant_element=dominant,
        element_pair=element_pair,
        validation=validation,
        spellbook=spellbook,
        report=report,
        elapsed_seconds=elapsed,
        notes=list(spellbook.notes),
    )
