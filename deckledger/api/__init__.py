from deckledger.api.decklist import router as decklist_router
from deckledger.api.health import router as health_router

__all__ = [
    "decklist_router",
    "health_router",
]
