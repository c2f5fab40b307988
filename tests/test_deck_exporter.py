import json
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest

from realmforge.models.card import Card, CardType, Element
from realmforge.models.deck import Deck
from realmforge.services.deck_exporter import (
    export_deck,
    export_filename,
    iso_timestamp,
    read_deck_json,
    write_deck_json,
)

CardFactory = Callable[..., Card]


@pytest.fixture
def small_deck(make_card: CardFactory) -> Deck:
    return Deck(
        avatar=make_card("Flamecaller", CardType.AVATAR, (Element.FIRE,), 0, "Unique"),
        sites=[make_card(f"Volcano {i}", CardType.SITE, (Element.FIRE,), 0) for i in range(3)],
        spellbook=[
            make_card("Imp", elements=(Element.FIRE,), mana_cost=1, power=1),
            make_card("Relic", CardType.ARTIFACT, mana_cost=3, rarity=None),
        ],
    )


class TestTimestamps:
    def test_iso_timestamp(self) -> None:
        """Milliseconds and a Z suffix."""
        moment = datetime(2024, 3, 1, 12, 30, 45, 123456, tzinfo=UTC)

        assert iso_timestamp(moment) == "2024-03-01T12:30:45.123Z"

    def test_filename_is_path_safe(self) -> None:
        moment = datetime(2024, 3, 1, 12, 30, 45, 123000, tzinfo=UTC)

        assert export_filename(moment) == "deck-2024-03-01T12-30-45-123Z.json"


class TestExportDeck:
    def test_export_shape(self, small_deck: Deck) -> None:
        data = export_deck(small_deck)

        assert data["avatar"] == {"name": "Flamecaller", "type": "Avatar", "rarity": "Unique"}
        assert data["sites"][0] == {"name": "Volcano 0", "type": "Site", "elements": ["Fire"]}
        assert data["spells"][0] == {
            "name": "Imp",
            "type": "Minion",
            "mana_cost": 1,
            "elements": ["Fire"],
            "rarity": "Ordinary",
            "power": 1,
        }
        assert data["spells"][1]["rarity"] is None
        assert data["metadata"]["cardCount"] == 2
        assert data["metadata"]["siteCount"] == 3
        assert data["metadata"]["created"].endswith("Z")

    def test_no_avatar(self) -> None:
        assert export_deck(Deck(avatar=None))["avatar"] is None


class TestWriteDeckJson:
    def test_written_file_reads_back(self, small_deck: Deck, tmp_path: Path) -> None:
        """A written deck parses back with the same card counts."""
        path = write_deck_json(small_deck, tmp_path)

        exported = read_deck_json(path)

        assert path.parent == tmp_path
        assert path.name.startswith("deck-")
        assert len(exported.spells) == 2
        assert len(exported.sites) == 3
        assert exported.metadata.card_count == 2
        assert json.loads(path.read_text())["metadata"]["siteCount"] == 3

    def test_explicit_filename(self, small_deck: Deck, tmp_path: Path) -> None:
        path = write_deck_json(small_deck, tmp_path, "mine.json")

        assert path == tmp_path / "mine.json"
        assert path.exists()
