from realmforge.models.analysis import (
    AllocationResult,
    ArchetypeMatch,
    Combo,
    DeckAnalysis,
    ElementalDeficiency,
)
from realmforge.models.card import (
    Card,
    CardType,
    Element,
    extract_keywords,
    get_base_card_name,
    get_max_copies_for_rarity,
    parse_element,
    parse_threshold,
)
from realmforge.models.deck import BuildOptions, Deck, DeckMetadata, DeckValidationResult
from realmforge.models.failure import (
    ApiResponse,
    CardDataError,
    DataAbsenceError,
    FailureDetail,
    FailureKind,
    KnownError,
    OutcomeType,
)

__all__ = [
    "AllocationResult",
    "ApiResponse",
    "ArchetypeMatch",
    "BuildOptions",
    "Card",
    "CardDataError",
    "CardType",
    "Combo",
    "DataAbsenceError",
    "Deck",
    "DeckAnalysis",
    "DeckMetadata",
    "DeckValidationResult",
    "Element",
    "ElementalDeficiency",
    "FailureDetail",
    "FailureKind",
    "KnownError",
    "OutcomeType",
    "extract_keywords",
    "get_base_card_name",
    "get_max_copies_for_rarity",
    "parse_element",
    "parse_threshold",
]
