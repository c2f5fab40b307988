from collections.abc import Callable
from itertools import count
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from realmforge.models.card import Card, CardType, Element, get_base_card_name
from realmforge.services.card_database import CardPool, build_card_pool

CardFactory = Callable[..., Card]

CSV_COLUMNS = [
    "productId",
    "name",
    "cleanName",
    "subTypeName",
    "extCardType",
    "extElement",
    "extCost",
    "extRarity",
    "extDescription",
    "extPowerRating",
    "extThreshold",
]


@pytest.fixture
def make_card() -> CardFactory:
    """Factory for cards with unique ids and sensible defaults."""
    ids = count(1)

    def factory(
        name: str,
        type: CardType = CardType.MINION,
        elements: tuple[Element, ...] = (),
        mana_cost: int = 2,
        rarity: str | None = "Ordinary",
        text: str = "",
        power: int | None = None,
        threshold: str = "",
        **kwargs: Any,
    ) -> Card:
        affinity = kwargs.pop("elemental_affinity", None)
        if affinity is None and type == CardType.SITE:
            affinity = {element: 1 for element in elements}
        return Card(
            id=kwargs.pop("id", f"card-{next(ids)}"),
            name=name,
            base_name=get_base_card_name(name),
            type=type,
            elements=elements,
            mana_cost=mana_cost,
            rarity=rarity,
            text=text,
            power=power,
            threshold=threshold,
            elemental_affinity=affinity or {},
            mana_generation=1 if type == CardType.SITE else 0,
            **kwargs,
        )

    return factory


@pytest.fixture
def sample_pool(make_card: CardFactory) -> CardPool:
    """
    A small but complete pool: two avatars, 40 sites (two of them Rubble)
    and enough spells at every cost to fill a spellbook.
    """
    cards: list[Card] = [
        make_card("Geomancer", CardType.AVATAR, (Element.EARTH,), 0, "Unique"),
        make_card("Flamecaller", CardType.AVATAR, (Element.FIRE,), 0, "Unique"),
    ]

    site_elements = [Element.FIRE, Element.WATER, Element.EARTH, Element.AIR]
    for i in range(38):
        element = site_elements[i % 4]
        text = "Draw a card." if i % 5 == 0 else ""
        cards.append(
            make_card(f"{element.value} Site {i}", CardType.SITE, (element,), 0, text=text)
        )
    cards.append(make_card("Rubble", CardType.SITE, (), 0))
    cards.append(make_card("Smoking Rubble", CardType.SITE, (Element.FIRE,), 0))

    for i in range(24):
        element = Element.FIRE if i % 3 else Element.EARTH
        cards.append(
            make_card(
                f"Minion {i}",
                CardType.MINION,
                (element,),
                mana_cost=i % 8,
                rarity=["Ordinary", "Exceptional", "Elite", "Unique"][i % 4],
                power=(i % 8) + 1,
            )
        )
    for i in range(8):
        cards.append(make_card(f"Artifact {i}", CardType.ARTIFACT, (), mana_cost=i % 5))
    for i in range(6):
        cards.append(make_card(f"Aura {i}", CardType.AURA, (Element.FIRE,), mana_cost=1 + i % 4))
    for i in range(14):
        text = "Deal 2 damage to an enemy minion." if i % 2 else "Draw a card."
        cards.append(
            make_card(f"Magic {i}", CardType.MAGIC, (Element.FIRE,), mana_cost=i % 6, text=text)
        )

    return build_card_pool(cards)


def _csv_row(card: dict[str, Any]) -> dict[str, str]:
    return {column: str(card.get(column, "")) for column in CSV_COLUMNS}


@pytest.fixture
def write_products_csv() -> Callable[[Path, str, list[dict[str, Any]]], Path]:
    """Write a ProductsAndPrices CSV for a set and return its path."""

    def writer(directory: Path, set_name: str, rows: list[dict[str, Any]]) -> Path:
        path = directory / f"{set_name}ProductsAndPrices.csv"
        pd.DataFrame([_csv_row(row) for row in rows], columns=CSV_COLUMNS).to_csv(
            path, index=False
        )
        return path

    return writer


@pytest.fixture
def sample_csv_rows() -> list[dict[str, Any]]:
    """Rows covering every card type plus rows the parser must drop."""
    rows: list[dict[str, Any]] = [
        {"productId": 1, "name": "Sparkmage", "extCardType": "Avatar", "extElement": "Fire",
         "extRarity": "Unique"},
        {"productId": 2, "name": "Beta Booster Box", "extCardType": "", "extRarity": ""},
        {"productId": 3, "name": "Fireball (Foil)", "subTypeName": "Foil",
         "extCardType": "Magic", "extElement": "Fire", "extCost": "3"},
        {"productId": 4, "name": "Fire Preconstructed Deck",
         "cleanName": "Fire Preconstructed Deck", "extCardType": "Minion"},
    ]
    for i in range(35):
        rows.append(
            {"productId": 100 + i, "name": f"Volcano {i}", "extCardType": "Site",
             "extElement": "Fire", "extThreshold": "F", "extRarity": "Ordinary"}
        )
    for i in range(30):
        rows.append(
            {"productId": 200 + i, "name": f"Imp {i}", "extCardType": "Minion",
             "extElement": "Fire", "extCost": str(i % 7), "extRarity": "Ordinary",
             "extPowerRating": str(1 + i % 6), "extThreshold": "F"}
        )
    for i in range(10):
        rows.append(
            {"productId": 300 + i, "name": f"Blaze {i}", "extCardType": "Magic",
             "extElement": "Fire", "extCost": "X" if i == 0 else str(1 + i % 4),
             "extRarity": "Exceptional", "extDescription": "Deal 3 damage to an enemy."}
        )
    return rows
