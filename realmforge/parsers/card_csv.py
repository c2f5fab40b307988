"""Parse TCGplayer "ProductsAndPrices" CSV exports into cards.

One file per card set. Exports sometimes start with a `//` comment line,
which is skipped. Foils, sealed product and preconstructed decks are
filtered out before rows are normalized.
"""

import io
import logging
from pathlib import Path

import pandas as pd

from realmforge.models.card import (
    Card,
    CardType,
    Element,
    get_base_card_name,
    parse_element,
    parse_threshold,
)
from realmforge.models.failure import CardDataError

logger = logging.getLogger(__name__)

# Columns without which a file cannot describe cards at all
REQUIRED_COLUMNS = frozenset(["name", "extCardType"])

SEALED_PRODUCT_PATTERN = r"\b(?:booster|pack|box|case)\b"
PRECON_PATTERN = r"preconstructed|precon deck"


def load_products_csv(file_path: Path) -> pd.DataFrame:
    """Load a ProductsAndPrices CSV with every column as a string.

    Args:
        file_path: Path to the CSV file

    Returns:
        DataFrame with blank strings in place of missing values
    """
    content = file_path.read_text(encoding="utf-8")
    if content.startswith("//"):
        content = content.split("\n", 1)[1] if "\n" in content else ""
    if not content.strip():
        return pd.DataFrame(columns=sorted(REQUIRED_COLUMNS))
    return pd.read_csv(io.StringIO(content), dtype=str, keep_default_na=False)


def validate_schema(df: pd.DataFrame, file_path: Path) -> None:
    """Validate that DataFrame has the columns needed to build cards.

    Raises:
        CardDataError: If required columns are missing
    """
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise CardDataError(str(file_path), f"missing required columns: {sorted(missing)}")


def _column(df: pd.DataFrame, name: str) -> pd.Series:
    if name in df.columns:
        return df[name].fillna("").astype(str)
    return pd.Series("", index=df.index, dtype=str)


def filter_card_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Drop foils, sealed product, preconstructed decks and untyped rows."""
    name = _column(df, "name").str.lower()
    clean_name = _column(df, "cleanName").str.lower()

    is_foil = (_column(df, "subTypeName") == "Foil") | clean_name.str.contains(
        "foil", regex=False
    )
    is_sealed = name.str.contains(SEALED_PRODUCT_PATTERN) | clean_name.str.contains(
        SEALED_PRODUCT_PATTERN
    )
    is_precon = name.str.contains(PRECON_PATTERN) | clean_name.str.contains(PRECON_PATTERN)
    has_type = _column(df, "extCardType").str.strip() != ""

    kept = df[~is_foil & ~is_sealed & ~is_precon & has_type].copy()
    logger.debug(
        "Filtered %d rows: %d foil, %d sealed, %d preconstructed",
        len(df) - len(kept),
        int(is_foil.sum()),
        int(is_sealed.sum()),
        int(is_precon.sum()),
    )
    return kept


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _parse_card_type(value: str | None) -> CardType | None:
    if not value:
        return None
    try:
        return CardType(value.strip().capitalize())
    except ValueError:
        return None


def _parse_elements(value: str | None) -> tuple[Element, ...]:
    if not value:
        return ()
    parsed = (parse_element(part) for part in value.split(","))
    return tuple(dict.fromkeys(element for element in parsed if element is not None))


def row_to_card(row: dict[str, str], set_name: str | None = None) -> Card | None:
    """
    Normalize one CSV row into a Card.

    Returns None for rows whose card type is not one of the six known types.
    Sites gain an elemental affinity (element tags and threshold letters,
    whichever is larger per element) and generate one mana.
    """
    card_type = _parse_card_type(row.get("extCardType"))
    if card_type is None:
        return None

    name = (row.get("name") or "").strip()
    elements = _parse_elements(row.get("extElement"))
    threshold = (row.get("extThreshold") or "").strip()

    affinity: dict[Element, int] = {}
    mana_generation = 0
    if card_type == CardType.SITE:
        affinity = {element: 1 for element in elements}
        for element, count in parse_threshold(threshold).items():
            affinity[element] = max(affinity.get(element, 0), count)
        mana_generation = 1

    return Card(
        id=(row.get("productId") or name).strip(),
        name=name,
        base_name=get_base_card_name(name),
        type=card_type,
        elements=elements,
        # "X" costs and blanks count as zero
        mana_cost=max(_parse_int(row.get("extCost")) or 0, 0),
        rarity=(row.get("extRarity") or "").strip() or None,
        text=row.get("extDescription") or "",
        power=_parse_int(row.get("extPowerRating")),
        life=_parse_int(row.get("extLife")),
        defense=_parse_int(row.get("extDefensePower")),
        threshold=threshold,
        set_name=set_name or (row.get("setName") or None),
        clean_name=(row.get("cleanName") or "").strip() or None,
        elemental_affinity=affinity,
        mana_generation=mana_generation,
    )


def parse_products_csv(file_path: Path, set_name: str | None = None) -> list[Card]:
    """Load, filter and normalize one set's CSV.

    Args:
        file_path: Path to the CSV file
        set_name: Set to stamp on each card (e.g. "Beta")

    Returns:
        Cards in file order

    Raises:
        CardDataError: If the file lacks required columns
    """
    df = load_products_csv(file_path)
    validate_schema(df, file_path)
    rows = filter_card_rows(df)

    cards: list[Card] = []
    for row in rows.to_dict(orient="records"):
        card = row_to_card(row, set_name)
        if card is not None:
            cards.append(card)

    logger.info("Parsed %d cards from %s", len(cards), file_path.name)
    return cards
