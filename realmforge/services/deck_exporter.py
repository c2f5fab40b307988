"""
Deck JSON export.

Writes the portable deck format:

    {
      "avatar": {"name", "type", "rarity"} | null,
      "sites": [{"name", "type", "elements"}],
      "spells": [{"name", "type", "mana_cost", "elements", "rarity", "power"}],
      "metadata": {"created", "cardCount", "siteCount"}
    }
"""

import json
import logging
import re
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from realmforge.models.card import Card
from realmforge.models.deck import Deck

logger = logging.getLogger(__name__)

_FILENAME_UNSAFE = re.compile(r"[:.]")


class ExportedAvatar(BaseModel):
    name: str
    type: str
    rarity: str | None = None


class ExportedSite(BaseModel):
    name: str
    type: str
    elements: list[str] = Field(default_factory=list)


class ExportedSpell(BaseModel):
    name: str
    type: str
    mana_cost: int = 0
    elements: list[str] = Field(default_factory=list)
    rarity: str | None = None
    power: int | None = None


class ExportMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    created: str
    card_count: int = Field(alias="cardCount")
    site_count: int = Field(alias="siteCount")


class ExportedDeck(BaseModel):
    """A deck in export form."""

    avatar: ExportedAvatar | None = None
    sites: list[ExportedSite] = Field(default_factory=list)
    spells: list[ExportedSpell] = Field(default_factory=list)
    metadata: ExportMetadata


def iso_timestamp(moment: datetime | None = None) -> str:
    """UTC timestamp in millisecond ISO form with a Z suffix."""
    moment = moment or datetime.now(UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def export_filename(moment: datetime | None = None) -> str:
    """deck-<timestamp>.json with ':' and '.' in the timestamp replaced by '-'."""
    return f"deck-{_FILENAME_UNSAFE.sub('-', iso_timestamp(moment))}.json"


def _element_names(card: Card) -> list[str]:
    return [element.value for element in card.elements]


def to_exported_deck(deck: Deck) -> ExportedDeck:
    avatar = None
    if deck.avatar is not None:
        avatar = ExportedAvatar(
            name=deck.avatar.name,
            type=deck.avatar.type.value,
            rarity=deck.avatar.rarity,
        )
    return ExportedDeck(
        avatar=avatar,
        sites=[
            ExportedSite(name=site.name, type=site.type.value, elements=_element_names(site))
            for site in deck.sites
        ],
        spells=[
            ExportedSpell(
                name=spell.name,
                type=spell.type.value,
                mana_cost=spell.mana_cost,
                elements=_element_names(spell),
                rarity=spell.rarity,
                power=spell.power,
            )
            for spell in deck.spellbook
        ],
        metadata=ExportMetadata(
            created=iso_timestamp(),
            card_count=len(deck.spellbook),
            site_count=len(deck.sites),
        ),
    )


def export_deck(deck: Deck) -> dict:
    """The deck as a JSON-ready dict in export form."""
    return to_exported_deck(deck).model_dump(by_alias=True)


def write_deck_json(deck: Deck, directory: Path | None = None, filename: str | None = None) -> Path:
    """
    Write the deck to a JSON file.

    Args:
        deck: Deck to export
        directory: Target directory, the working directory by default
        filename: File name, a timestamped one by default

    Returns:
        Path of the written file
    """
    path = (directory or Path.cwd()) / (filename or export_filename())
    path.write_text(json.dumps(export_deck(deck), indent=2), encoding="utf-8")
    logger.info("Deck exported to %s", path)
    return path


def read_deck_json(path: Path) -> ExportedDeck:
    """Parse a file written by write_deck_json."""
    return ExportedDeck.model_validate_json(path.read_text(encoding="utf-8"))
