"""
Scryfall card lookup.

Resolves card names, or (set code, collector number) pairs, to CardMetadata
through the /cards/collection endpoint. Lookups are best effort: a failed
batch is logged and left out, so callers always get a (possibly partial)
mapping back.

API docs: https://scryfall.com/docs/api/cards/collection
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from deckledger.config import MAX_SCRYFALL_BATCH_SIZE, settings
from deckledger.models.card import CardMetadata
from deckledger.parsers.card_identity import name_to_id
from deckledger.parsers.scryfall import index_by_card_id, index_by_collector_number

logger = logging.getLogger(__name__)

USER_AGENT = "DeckLedger/1.0"


def batched(items: list[Any], size: int = MAX_SCRYFALL_BATCH_SIZE) -> list[list[Any]]:
    """Split items into consecutive batches of at most `size`."""
    return [items[i : i + size] for i in range(0, len(items), size)]


class ScryfallClient:
    """
    Batch card lookups against Scryfall.

    Each call opens its own httpx.AsyncClient, so one instance can serve
    concurrent renders.
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        self.base_url = (base_url or settings.scryfall_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.scryfall_timeout

    async def _fetch_collection(
        self, client: httpx.AsyncClient, identifiers: list[dict[str, str]]
    ) -> list[dict[str, Any]]:
        """POST one batch of identifiers. Returns [] if the request fails."""
        try:
            response = await client.post(
                f"{self.base_url}/cards/collection",
                json={"identifiers": identifiers},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Scryfall lookup of %d cards failed: %s", len(identifiers), e)
            return []

        try:
            data = response.json()
        except ValueError as e:
            logger.warning(
                "Scryfall returned a non-JSON body for %d cards: %s", len(identifiers), e
            )
            return []
        if not isinstance(data, dict):
            logger.warning("Scryfall returned an unexpected payload for %d cards", len(identifiers))
            return []

        not_found = data.get("not_found") or []
        if not_found:
            logger.info("Scryfall could not find %d of %d cards", len(not_found), len(identifiers))
        cards = data.get("data") or []
        if not isinstance(cards, list):
            return []
        return [card for card in cards if isinstance(card, dict)]

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, headers={"User-Agent": USER_AGENT})

    async def lookup_by_names(self, names: Iterable[str]) -> dict[str, CardMetadata]:
        """
        Look up cards by name.

        Args:
            names: Card names; blanks and repeats are ignored

        Returns:
            Dict mapping card ids to CardMetadata. Unresolved names are absent.
        """
        card_ids = list(dict.fromkeys(name_to_id(name) for name in names if name))
        if not card_ids:
            return {}

        batches = batched(card_ids)
        logger.info("Looking up %d cards in %d batches", len(card_ids), len(batches))

        async with self._client() as client:
            results = await asyncio.gather(
                *(
                    self._fetch_collection(client, [{"name": card_id} for card_id in batch])
                    for batch in batches
                )
            )

        card_data_by_id: dict[str, CardMetadata] = {}
        for cards in results:
            card_data_by_id.update(index_by_card_id(cards))
        return card_data_by_id

    async def lookup_by_collector_numbers(
        self, numbers_by_set: Mapping[str, list[str]]
    ) -> dict[str, dict[str, CardMetadata]]:
        """
        Look up cards by set code and collector number.

        Args:
            numbers_by_set: {set_code: [collector_number, ...]}; repeats are ignored

        Returns:
            {set_code: {collector_number: CardMetadata}}. Every requested set
            has an entry, empty if nothing resolved.
        """
        cards_by_set_number: dict[str, dict[str, CardMetadata]] = {}
        async with self._client() as client:
            for set_code, numbers in numbers_by_set.items():
                cards_by_set_number[set_code] = {}
                for batch in batched(list(dict.fromkeys(numbers))):
                    identifiers = [
                        {"set": set_code, "collector_number": number} for number in batch
                    ]
                    cards = await self._fetch_collection(client, identifiers)
                    cards_by_set_number[set_code].update(index_by_collector_number(cards))
        return cards_by_set_number
