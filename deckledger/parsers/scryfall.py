"""
Scryfall card JSON -> CardMetadata.

Card objects: https://scryfall.com/docs/api/cards
"""

import logging
from collections.abc import Iterable
from typing import Any

from deckledger.models.card import CardMetadata
from deckledger.parsers.card_identity import name_to_id

logger = logging.getLogger(__name__)

PRICE_CURRENCIES = ("usd", "eur", "tix")


def _parse_prices(raw: dict[str, Any] | None) -> dict[str, float]:
    """Keep the prices Scryfall reports; it sends null for unpriced currencies."""
    prices: dict[str, float] = {}
    for currency in PRICE_CURRENCIES:
        value = (raw or {}).get(currency)
        if value is None:
            continue
        try:
            prices[currency] = float(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring unparseable %s price %r", currency, value)
    return prices


def card_metadata_from_scryfall(card: dict[str, Any]) -> CardMetadata:
    """
    Build CardMetadata from a Scryfall card object.

    Args:
        card: Scryfall card JSON

    Returns:
        CardMetadata. Missing fields fall back to empty values.
    """
    faces = card.get("card_faces") or []
    return CardMetadata(
        name=card.get("name", ""),
        prices=_parse_prices(card.get("prices")),
        purchase_uri=card.get("scryfall_uri"),
        image_uris=dict(card.get("image_uris") or {}),
        face_image_uris=tuple(dict(face.get("image_uris") or {}) for face in faces),
        set_code=card.get("set", ""),
        collector_number=card.get("collector_number", ""),
    )


def index_by_card_id(cards: Iterable[dict[str, Any]]) -> dict[str, CardMetadata]:
    """
    Index Scryfall cards by card id.

    Cards without a name are skipped. Later printings replace earlier ones.
    """
    index: dict[str, CardMetadata] = {}
    for card in cards:
        if card is None or not card.get("name"):
            continue
        index[name_to_id(card["name"])] = card_metadata_from_scryfall(card)
    return index


def index_by_collector_number(cards: Iterable[dict[str, Any]]) -> dict[str, CardMetadata]:
    """Index Scryfall cards of one set by collector number."""
    index: dict[str, CardMetadata] = {}
    for card in cards:
        if card is None or not card.get("name"):
            continue
        index[str(card.get("collector_number", ""))] = card_metadata_from_scryfall(card)
    return index
