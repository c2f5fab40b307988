"""
RealmForge services.

Card loading, spellbook and atlas construction, validation and export.
"""

from realmforge.services.avatar_selector import select_avatar
from realmforge.services.card_database import CardPool, build_card_pool, load_card_pool
from realmforge.services.curve_optimizer import CurveOptimizer, optimize_deck
from realmforge.services.deck_builder import (
    SpellbookResult,
    add_card_with_copies,
    build_spellbook,
    enforce_rarity_limits,
)
from realmforge.services.deck_exporter import export_deck, read_deck_json, write_deck_json
from realmforge.services.deck_report import format_deck_report, format_rules_summary
from realmforge.services.deck_validator import validate_deck
from realmforge.services.pipeline import DeckBuildResult, build_complete_deck
from realmforge.services.site_selector import select_sites

__all__ = [
    "CardPool",
    "CurveOptimizer",
    "DeckBuildResult",
    "SpellbookResult",
    "add_card_with_copies",
    "build_card_pool",
    "build_complete_deck",
    "build_spellbook",
    "enforce_rarity_limits",
    "export_deck",
    "format_deck_report",
    "format_rules_summary",
    "load_card_pool",
    "optimize_deck",
    "read_deck_json",
    "select_avatar",
    "select_sites",
    "validate_deck",
]
