from deckledger.analysis.reconcile import (
    build_buylist,
    format_price,
    get_card_price,
    reconcile,
    resolve_collection_numbers,
)

__all__ = [
    "build_buylist",
    "format_price",
    "get_card_price",
    "reconcile",
    "resolve_collection_numbers",
]
