"""Tests for the card, deck and failure models."""

from collections.abc import Callable

import pytest

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
from realmforge.models.deck import Deck
from realmforge.models.failure import (
    CardDataError,
    DataAbsenceError,
    FailureKind,
    KnownError,
    OutcomeType,
)

CardFactory = Callable[..., Card]


class TestBaseCardName:
    def test_strips_parenthetical_suffix(self) -> None:
        """Printing suffixes are removed."""
        assert get_base_card_name("Fireball (Foil)") == "Fireball"

    def test_plain_name_unchanged(self) -> None:
        """Names without a suffix pass through."""
        assert get_base_card_name("Fireball") == "Fireball"

    def test_only_trailing_suffix(self) -> None:
        """Parentheses in the middle of a name are kept."""
        assert get_base_card_name("Mask (of) Shadows") == "Mask (of) Shadows"

    def test_empty(self) -> None:
        assert get_base_card_name("") == ""


class TestCopyLimits:
    @pytest.mark.parametrize(
        ("rarity", "expected"),
        [
            ("Ordinary", 4),
            ("Exceptional", 3),
            ("Elite", 2),
            ("Unique", 1),
            ("unique foil", 1),
            ("ELITE", 2),
            (None, 4),
            ("", 4),
            ("Promo", 4),
        ],
    )
    def test_max_copies(self, rarity: str | None, expected: int) -> None:
        """Rarity matching is case-insensitive and by substring."""
        assert get_max_copies_for_rarity(rarity) == expected

    def test_card_property(self, make_card: CardFactory) -> None:
        """Cards expose their own copy limit."""
        assert make_card("Relic", rarity="Elite").max_copies == 2


class TestThresholds:
    def test_parse_threshold_counts_letters(self) -> None:
        """Each letter is one point of its element."""
        assert parse_threshold("WWF") == {Element.WATER: 2, Element.FIRE: 1}

    def test_parse_threshold_ignores_unknown(self) -> None:
        """Unknown letters are ignored and case does not matter."""
        assert parse_threshold("ax?") == {Element.AIR: 1}

    def test_parse_threshold_empty(self) -> None:
        assert parse_threshold(None) == {}
        assert parse_threshold("") == {}

    def test_sites_have_no_requirements(self, make_card: CardFactory) -> None:
        """A site's threshold letters describe supply, not demand."""
        site = make_card("Spring", CardType.SITE, (Element.WATER,), 0, threshold="W")
        assert site.threshold_requirements == {}

    def test_spell_requirements(self, make_card: CardFactory) -> None:
        spell = make_card("Tide", CardType.MAGIC, (Element.WATER,), 3, threshold="WW")
        assert spell.threshold_requirements == {Element.WATER: 2}


class TestParseElement:
    def test_case_insensitive(self) -> None:
        assert parse_element("fire") == Element.FIRE
        assert parse_element(" VOID ") == Element.VOID

    def test_unknown(self) -> None:
        assert parse_element("Plasma") is None
        assert parse_element(None) is None


class TestKeywords:
    def test_extracts_keywords(self) -> None:
        """Keywords with numbers keep their number."""
        text = "Airborne. Ranged 2. Movement +1."
        assert extract_keywords(text) == ["Airborne", "Ranged 2", "Movement +1"]

    def test_no_text(self) -> None:
        assert extract_keywords(None) == []


class TestDeck:
    def test_total_cards_counts_avatar(self, make_card: CardFactory) -> None:
        """The avatar adds one card on top of both piles."""
        avatar = make_card("Sorcerer", CardType.AVATAR)
        deck = Deck(
            avatar=avatar,
            sites=[make_card("Site", CardType.SITE)],
            spellbook=[make_card("Imp")] * 2,
        )
        assert deck.total_cards == 4

    def test_total_cards_without_avatar(self) -> None:
        assert Deck(avatar=None).total_cards == 0


class TestFailures:
    def test_known_error_to_response(self) -> None:
        """Known errors convert to the failure envelope."""
        error = KnownError(FailureKind.INVALID_INPUT, "Bad element", detail="Plasma")
        response = error.to_response()

        assert response.outcome == OutcomeType.KNOWN_FAILURE
        assert response.failure is not None
        assert response.failure.kind == FailureKind.INVALID_INPUT
        assert response.failure.message == "Bad element"
        assert response.failure.detail == "Plasma"
        assert error.status_code == 400

    def test_data_absence_is_404(self) -> None:
        error = DataAbsenceError("No cards")
        assert error.kind == FailureKind.DATA_ABSENCE
        assert error.status_code == 404

    def test_card_data_error_names_file(self) -> None:
        """Malformed file errors carry the path."""
        error = CardDataError("/data/BetaProductsAndPrices.csv", "missing columns")
        assert error.kind == FailureKind.CARD_DATA
        assert "/data/BetaProductsAndPrices.csv" in error.message
        assert error.path == "/data/BetaProductsAndPrices.csv"
