from deckledger.services.decklist_service import render_collection, render_decklist
from deckledger.services.scryfall_client import ScryfallClient

__all__ = [
    "ScryfallClient",
    "render_collection",
    "render_decklist",
]
