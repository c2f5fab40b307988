from realmforge.parsers.card_csv import (
    filter_card_rows,
    load_products_csv,
    parse_products_csv,
    row_to_card,
)

__all__ = [
    "filter_card_rows",
    "load_products_csv",
    "parse_products_csv",
    "row_to_card",
]
