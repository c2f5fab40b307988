from realmforge.analysis.archetypes import calculate_archetype_synergy, identify_deck_archetypes
from realmforge.analysis.cache import DeckAnalysisCache
from realmforge.analysis.combos import (
    COMBO_RULES,
    calculate_combo_contribution,
    calculate_combo_synergy,
    identify_card_combos,
)
from realmforge.analysis.elements import analyze_elemental_requirements, recommend_threshold_cards
from realmforge.analysis.mechanics import identify_card_mechanics, is_card_compatible_with_avatar
from realmforge.analysis.playability import (
    analyze_deck_playability,
    calculate_card_playability_score,
    get_playability_recommendations,
)
from realmforge.analysis.stats import analyze_elemental_synergy, get_deck_stats
from realmforge.analysis.synergy import SynergyScorer, calculate_synergy, get_synergy_weighting

__all__ = [
    "COMBO_RULES",
    "DeckAnalysisCache",
    "SynergyScorer",
    "analyze_deck_playability",
    "analyze_elemental_requirements",
    "analyze_elemental_synergy",
    "calculate_archetype_synergy",
    "calculate_card_playability_score",
    "calculate_combo_contribution",
    "calculate_combo_synergy",
    "calculate_synergy",
    "get_deck_stats",
    "get_playability_recommendations",
    "get_synergy_weighting",
    "identify_card_combos",
    "identify_card_mechanics",
    "identify_deck_archetypes",
    "is_card_compatible_with_avatar",
    "recommend_threshold_cards",
]
