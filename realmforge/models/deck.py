from dataclasses import dataclass, field
from datetime import UTC, datetime

from realmforge.models.card import Card


@dataclass
class DeckMetadata:
    """Descriptive and scoring information attached to a built deck."""

    name: str = ""
    description: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    total_synergy: float = 0.0
    playability_score: int = 0


@dataclass
class Deck:
    """
    A complete deck.

    The avatar counts toward neither the spellbook nor the atlas.
    """

    avatar: Card | None
    sites: list[Card] = field(default_factory=list)
    spellbook: list[Card] = field(default_factory=list)
    metadata: DeckMetadata = field(default_factory=DeckMetadata)

    @property
    def total_cards(self) -> int:
        return len(self.sites) + len(self.spellbook) + (1 if self.avatar else 0)


@dataclass
class BuildOptions:
    """
    Parameters for one deck build.

    Passed explicitly into the pipeline; nothing reads process-wide flags.
    """

    data_sets: list[str] = field(default_factory=lambda: ["Beta", "ArthurianLegends"])
    preferred_element: str | None = None
    preferred_archetype: str | None = None
    export_json: bool = False
    show_rules: bool = False
    synergy_weighting: str = "standard"


@dataclass
class DeckValidationResult:
    """Outcome of the final rules pass. Errors make a deck invalid; warnings do not."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    total_cards: int = 0
    spellbook_size: int = 0
    site_count: int = 0
