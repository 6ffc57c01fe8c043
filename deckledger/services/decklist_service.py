"""
Decklist rendering pipeline.

text -> parsed lines -> catalog lookup -> reconciliation result.

The catalog lookup is the only step that waits on I/O. It runs before the
pure reconciliation and its failures degrade to an empty catalog.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping

from deckledger.analysis.reconcile import reconcile
from deckledger.config import DecklistSettings
from deckledger.models.card import CardMetadata
from deckledger.models.reconciliation import ListMode, ReconciliationResult
from deckledger.parsers.decklist import (
    build_distinct_card_names,
    build_distinct_card_numbers_by_set,
    parse_text,
)
from deckledger.services.scryfall_client import ScryfallClient

logger = logging.getLogger(__name__)

NameFetcher = Callable[[list[str]], Awaitable[dict[str, CardMetadata]]]
NumberFetcher = Callable[[dict[str, list[str]]], Awaitable[dict[str, dict[str, CardMetadata]]]]


async def render_decklist(
    text: str,
    card_counts: Mapping[str, int],
    settings: DecklistSettings | None = None,
    fetcher: NameFetcher | None = None,
) -> ReconciliationResult:
    """
    Reconcile a decklist whose cards are written by name.

    Args:
        text: Raw decklist text
        card_counts: Ownership ledger {card_id: owned}; empty disables tracking
        settings: Render options
        fetcher: Name lookup; defaults to ScryfallClient().lookup_by_names
    """
    lines = parse_text(text, card_counts)
    names = build_distinct_card_names(lines)
    fetcher = fetcher or ScryfallClient().lookup_by_names

    card_data_by_id: dict[str, CardMetadata] = {}
    if names:
        try:
            card_data_by_id = await fetcher(names)
        except Exception as e:
            logger.warning("Error fetching card data, rendering without it: %s", e)

    return reconcile(lines, card_data_by_id, card_counts, settings, ListMode.DECKLIST)


async def render_collection(
    text: str,
    card_counts: Mapping[str, int],
    settings: DecklistSettings | None = None,
    fetcher: NumberFetcher | None = None,
) -> ReconciliationResult:
    """
    Reconcile a collection list whose cards are written as collector numbers.

    Args:
        text: Raw collection list, using "# set=<code>" comments
        card_counts: Ownership ledger {card_id: owned}; empty disables tracking
        settings: Render options
        fetcher: Set/number lookup; defaults to
            ScryfallClient().lookup_by_collector_numbers
    """
    lines = parse_text(text, card_counts)
    numbers_by_set = build_distinct_card_numbers_by_set(lines)
    fetcher = fetcher or ScryfallClient().lookup_by_collector_numbers

    cards_by_set_number: dict[str, dict[str, CardMetadata]] = {}
    if numbers_by_set:
        try:
            cards_by_set_number = await fetcher(numbers_by_set)
        except Exception as e:
            logger.warning("Error fetching card data, rendering without it: %s", e)

    return reconcile(
        lines,
        {},
        card_counts,
        settings,
        ListMode.COLLECTION,
        cards_by_set_number=cards_by_set_number,
    )
