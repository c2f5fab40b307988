from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from realmforge.models.card import CardType, Element
from realmforge.models.failure import CardDataError
from realmforge.parsers.card_csv import (
    load_products_csv,
    parse_products_csv,
    row_to_card,
)

CsvWriter = Callable[[Path, str, list[dict[str, Any]]], Path]


class TestLoadProductsCsv:
    def test_skips_leading_comment_line(self, tmp_path: Path) -> None:
        """A // comment before the header is ignored."""
        path = tmp_path / "BetaProductsAndPrices.csv"
        path.write_text(
            "// exported from tcgcsv\nname,extCardType\nImp,Minion\n", encoding="utf-8"
        )

        df = load_products_csv(path)

        assert list(df.columns) == ["name", "extCardType"]
        assert df.iloc[0]["name"] == "Imp"

    def test_blank_values_are_empty_strings(self, tmp_path: Path) -> None:
        """Missing cells read as '' rather than NaN."""
        path = tmp_path / "x.csv"
        path.write_text("name,extCardType,extCost\nImp,Minion,\n", encoding="utf-8")

        df = load_products_csv(path)

        assert df.iloc[0]["extCost"] == ""

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file yields no rows."""
        path = tmp_path / "x.csv"
        path.write_text("", encoding="utf-8")

        assert len(load_products_csv(path)) == 0


class TestParseProductsCsv:
    def test_filters_foil_sealed_and_precon(
        self,
        tmp_path: Path,
        write_products_csv: CsvWriter,
        sample_csv_rows: list[dict[str, Any]],
    ) -> None:
        """Foils, sealed product and preconstructed decks are dropped."""
        path = write_products_csv(tmp_path, "Beta", sample_csv_rows)

        cards = parse_products_csv(path, "Beta")
        names = {card.name for card in cards}

        assert "Beta Booster Box" not in names
        assert "Fireball (Foil)" not in names
        assert "Fire Preconstructed Deck" not in names
        assert len(cards) == 1 + 35 + 30 + 10

    def test_stamps_set_name(
        self,
        tmp_path: Path,
        write_products_csv: CsvWriter,
        sample_csv_rows: list[dict[str, Any]],
    ) -> None:
        path = write_products_csv(tmp_path, "Beta", sample_csv_rows)

        cards = parse_products_csv(path, "Beta")

        assert all(card.set_name == "Beta" for card in cards)

    def test_sealed_filter_matches_whole_words(
        self, tmp_path: Path, write_products_csv: CsvWriter
    ) -> None:
        """Card names merely containing 'pack' or 'box' survive the sealed filter."""
        rows = [
            {"productId": 1, "name": "Packmule", "extCardType": "Minion"},
            {"productId": 2, "name": "Tinderbox Imp", "extCardType": "Minion"},
            {"productId": 3, "name": "Beta Booster Pack", "extCardType": "Minion"},
        ]
        path = write_products_csv(tmp_path, "Beta", rows)

        names = [card.name for card in parse_products_csv(path)]

        assert names == ["Packmule", "Tinderbox Imp"]

    def test_missing_required_columns(self, tmp_path: Path) -> None:
        """A file without card types cannot be parsed."""
        path = tmp_path / "BetaProductsAndPrices.csv"
        path.write_text("productId,name\n1,Imp\n", encoding="utf-8")

        with pytest.raises(CardDataError) as exc_info:
            parse_products_csv(path)

        assert "extCardType" in exc_info.value.message

    def test_unknown_card_type_skipped(self, tmp_path: Path, write_products_csv: CsvWriter) -> None:
        rows = [
            {"productId": 1, "name": "Token", "extCardType": "Token"},
            {"productId": 2, "name": "Imp", "extCardType": "minion"},
        ]
        path = write_products_csv(tmp_path, "Beta", rows)

        cards = parse_products_csv(path)

        assert [card.name for card in cards] == ["Imp"]
        assert cards[0].type == CardType.MINION


class TestRowToCard:
    def test_minion_fields(self) -> None:
        """Numeric fields are parsed and element lists split."""
        card = row_to_card(
            {
                "productId": "42",
                "name": "Lava Wyrm (Foil)",
                "extCardType": "Minion",
                "extElement": "Fire, Earth",
                "extCost": "5",
                "extRarity": "Elite",
                "extPowerRating": "6",
                "extThreshold": "FF",
            }
        )

        assert card is not None
        assert card.id == "42"
        assert card.base_name == "Lava Wyrm"
        assert card.elements == (Element.FIRE, Element.EARTH)
        assert card.mana_cost == 5
        assert card.power == 6
        assert card.rarity == "Elite"
        assert card.elemental_affinity == {}
        assert card.mana_generation == 0

    def test_x_cost_is_zero(self) -> None:
        """'X' and blank costs count as zero."""
        x_cost = row_to_card({"name": "Blaze", "extCardType": "Magic", "extCost": "X"})
        blank = row_to_card({"name": "Spark", "extCardType": "Magic", "extCost": ""})

        assert x_cost is not None and x_cost.mana_cost == 0
        assert blank is not None and blank.mana_cost == 0

    def test_site_affinity(self) -> None:
        """Sites take the larger of tag and threshold counts per element."""
        site = row_to_card(
            {
                "name": "Geyser",
                "extCardType": "Site",
                "extElement": "Water",
                "extThreshold": "WWF",
            }
        )

        assert site is not None
        assert site.elemental_affinity == {Element.WATER: 2, Element.FIRE: 1}
        assert site.mana_generation == 1

    def test_unknown_element_dropped(self) -> None:
        card = row_to_card({"name": "Odd", "extCardType": "Minion", "extElement": "Plasma"})

        assert card is not None
        assert card.elements == ()

    def test_missing_rarity_is_none(self) -> None:
        card = row_to_card({"name": "Imp", "extCardType": "Minion", "extRarity": ""})

        assert card is not None
        assert card.rarity is None
        assert card.max_copies == 4
