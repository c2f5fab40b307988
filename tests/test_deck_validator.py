"""Tests for deck validation."""

from collections.abc import Callable

import pytest

from realmforge.models.card import Card, CardType, Element
from realmforge.services.deck_validator import (
    validate_avatar,
    validate_copy_limits,
    validate_deck,
    validate_elemental_thresholds,
    validate_regional_strategy,
    validate_spellcasters,
)

CardFactory = Callable[..., Card]


@pytest.fixture
def legal_sites(make_card: CardFactory) -> list[Card]:
    return [make_card(f"Site {i}", CardType.SITE, (Element.FIRE,), 0) for i in range(30)]


@pytest.fixture
def legal_spells(make_card: CardFactory) -> list[Card]:
    """Fifty spells, at most four copies of any one."""
    return [
        make_card(f"Imp {i // 4}", elements=(Element.FIRE,), id=f"imp-{i // 4}")
        for i in range(50)
    ]


class TestValidateDeck:
    def test_legal_deck(
        self, make_card: CardFactory, legal_sites: list[Card], legal_spells: list[Card]
    ) -> None:
        """Thirty sites and fifty spells within copy limits is valid."""
        avatar = make_card("Flamecaller", CardType.AVATAR)

        result = validate_deck(avatar, legal_sites, legal_spells)

        assert result.is_valid
        assert result.errors == []
        assert result.total_cards == 81
        assert result.spellbook_size == 50
        assert result.site_count == 30

    def test_short_atlas(self, legal_sites: list[Card], legal_spells: list[Card]) -> None:
        result = validate_deck(None, legal_sites[:29], legal_spells)

        assert not result.is_valid
        assert "Atlas must contain at least 30 sites (currently has 29)" in result.errors

    def test_large_atlas(
        self, make_card: CardFactory, legal_sites: list[Card], legal_spells: list[Card]
    ) -> None:
        """The atlas must be exactly thirty, not merely at least thirty."""
        extra = make_card("Site extra", CardType.SITE, (Element.FIRE,), 0)

        result = validate_deck(None, [*legal_sites, extra], legal_spells)

        assert "Atlas must contain at most 30 sites (currently has 31)" in result.errors

    def test_short_spellbook(self, legal_sites: list[Card], legal_spells: list[Card]) -> None:
        result = validate_deck(None, legal_sites, legal_spells[:40])

        assert "Spellbook must contain at least 50 cards (currently has 40)" in result.errors

    def test_large_spellbook(
        self, make_card: CardFactory, legal_sites: list[Card], legal_spells: list[Card]
    ) -> None:
        spells = [*legal_spells, make_card("Bat")]

        result = validate_deck(None, legal_sites, spells)

        assert "Spellbook must contain at most 50 cards (currently has 51)" in result.errors

    def test_shuffle_warning(self, make_card: CardFactory, legal_spells: list[Card]) -> None:
        """Huge piles are an error for size and a warning for shuffling."""
        sites = [make_card(f"Site {i}", CardType.SITE, (Element.FIRE,), 0) for i in range(101)]

        result = validate_deck(None, sites, legal_spells)

        assert "Atlas is very large (101 cards) - may be difficult to shuffle" in result.warnings

    def test_does_not_modify_deck(
        self, legal_sites: list[Card], legal_spells: list[Card]
    ) -> None:
        sites, spells = list(legal_sites), list(legal_spells)

        validate_deck(None, sites, spells)

        assert sites == legal_sites
        assert spells == legal_spells


class TestCopyLimits:
    def test_exceeding_limit(self, make_card: CardFactory) -> None:
        knight = make_card("Knight", rarity="Elite")

        errors = validate_copy_limits([knight] * 3)

        assert errors == ["Knight exceeds the Elite copy limit (3/2)"]

    def test_missing_rarity_is_ordinary(self, make_card: CardFactory) -> None:
        imp = make_card("Imp", rarity=None)

        assert validate_copy_limits([imp] * 5) == ["Imp exceeds the Ordinary copy limit (5/4)"]

    def test_printings_share_a_limit(self, make_card: CardFactory) -> None:
        """Foil and regular printings count toward one limit."""
        regular = make_card("Archmage", rarity="Unique")
        foil = make_card("Archmage (Foil)", rarity="Unique")

        assert len(validate_copy_limits([regular, foil])) == 1


class TestWarnings:
    def test_threshold_shortfall(self, make_card: CardFactory) -> None:
        """A spell demanding more of an element than the deck carries is flagged."""
        sites = [make_card("Spring", CardType.SITE, (Element.WATER,), 0)]
        spells = [make_card("Inferno", CardType.MAGIC, (Element.FIRE,), threshold="FFF")]

        warnings = validate_elemental_thresholds(sites, spells)

        assert warnings == [
            'Deck may struggle to meet Fire threshold (3) for "Inferno" - only 1 sources available'
        ]

    def test_threshold_met(self, make_card: CardFactory) -> None:
        sites = [make_card(f"Volcano {i}", CardType.SITE, (Element.FIRE,), 0) for i in range(3)]
        spells = [make_card("Inferno", CardType.MAGIC, (Element.FIRE,), threshold="FFF")]

        assert validate_elemental_thresholds(sites, spells) == []

    def test_spellcasters(self, make_card: CardFactory) -> None:
        """Magic-heavy decks want spellcasters besides the avatar."""
        magics = [make_card(f"Bolt {i}", CardType.MAGIC) for i in range(21)]
        caster = make_card("Apprentice", text="Spellcaster")

        assert len(validate_spellcasters(magics)) == 1
        assert "21 magic spells but only 1 total spellcasters" in validate_spellcasters(magics)[0]
        assert validate_spellcasters([*magics, caster, caster]) == []

    def test_mixed_regions(self, make_card: CardFactory) -> None:
        moles = [make_card(f"Mole {i}", text="Burrowing") for i in range(6)]
        eels = [make_card(f"Eel {i}", text="Submerge") for i in range(6)]

        assert validate_regional_strategy(moles) == []
        assert len(validate_regional_strategy([*moles, *eels])) == 1

    def test_avatar_restrictions(self, make_card: CardFactory) -> None:
        restricted = make_card("Druid", CardType.AVATAR, text="You may only play Earth sites.")
        plain = make_card("Sorcerer", CardType.AVATAR, text="Tap: draw a spell.")

        assert validate_avatar(restricted) == [
            'Avatar "Druid" may have deck building restrictions - manual review recommended'
        ]
        assert validate_avatar(plain) == []
        assert validate_avatar(None) == []

    def test_warnings_keep_deck_valid(
        self, make_card: CardFactory, legal_sites: list[Card], legal_spells: list[Card]
    ) -> None:
        avatar = make_card("Druid", CardType.AVATAR, text="Cannot cast Air spells.")

        result = validate_deck(avatar, legal_sites, legal_spells)

        assert result.is_valid
        assert result.warnings
