"""
Deck analysis results.

Plain value types passed between the combo detector, archetype classifier,
allocation planner and synergy scorer.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Combo:
    """A named cluster of cards scored as bonus synergy when played together."""

    name: str
    cards: list[str]
    synergy: float
    description: str
    strategy: str | None = None


@dataclass(frozen=True, slots=True)
class ArchetypeMatch:
    """How strongly a card list fits one named archetype (strength 0-100)."""

    archetype: str
    strength: float
    cards: list[str]
    description: str


@dataclass(frozen=True, slots=True)
class DeckAnalysis:
    """Combos and archetypes for one card list; the unit stored in the cache."""

    combos: list[Combo] = field(default_factory=list)
    archetypes: list[ArchetypeMatch] = field(default_factory=list)

    @property
    def strongest_archetype(self) -> ArchetypeMatch | None:
        return self.archetypes[0] if self.archetypes else None


@dataclass(frozen=True, slots=True)
class AllocationResult:
    """Per-category spellbook budget."""

    minions: int
    artifacts: int
    auras: int
    magics: int
    reason: str | None = None

    @property
    def total(self) -> int:
        return self.minions + self.artifacts + self.auras + self.magics


@dataclass(frozen=True, slots=True)
class ElementalDeficiency:
    """An element whose supply falls short of what the deck's spells demand."""

    current: int
    required: int
    deficit: int
    cards: list[str]

