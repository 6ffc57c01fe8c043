import pytest

from deckledger.models.card import CardMetadata


@pytest.fixture
def sample_decklist() -> str:
    """Sample decklist with a main deck, sideboard and comments."""
    return """Deck:
4 Lightning Bolt # best burn
2 Negate
3 Shock

Sideboard:
2 Negate
1 Mystery Card"""


@pytest.fixture
def card_catalog() -> dict[str, CardMetadata]:
    """Card metadata keyed by card id."""
    return {
        "lightning bolt": CardMetadata(
            name="Lightning Bolt",
            prices={"usd": 1.5, "eur": 1.25, "tix": 0.05},
            purchase_uri="https://scryfall.com/card/leb/163/lightning-bolt",
            image_uris={"large": "https://img.example/bolt-large.jpg"},
            set_code="leb",
            collector_number="163",
        ),
        "negate": CardMetadata(
            name="Negate",
            prices={"usd": 0.25},
            purchase_uri="https://scryfall.com/card/rix/44/negate",
            set_code="rix",
            collector_number="44",
        ),
        "shock": CardMetadata(
            name="Shock",
            prices={"usd": 0.1, "eur": 0.08},
            set_code="war",
            collector_number="144",
        ),
    }


@pytest.fixture
def scryfall_bolt() -> dict:
    """Scryfall card object for Lightning Bolt."""
    return {
        "object": "card",
        "name": "Lightning Bolt",
        "set": "leb",
        "collector_number": "163",
        "scryfall_uri": "https://scryfall.com/card/leb/163/lightning-bolt",
        "image_uris": {
            "small": "https://img.example/bolt-small.jpg",
            "large": "https://img.example/bolt-large.jpg",
        },
        "prices": {"usd": "1.50", "usd_foil": None, "eur": "1.25", "tix": None},
    }


@pytest.fixture
def scryfall_delver() -> dict:
    """Scryfall card object for a double-faced card."""
    return {
        "object": "card",
        "name": "Delver of Secrets // Insectile Aberration",
        "set": "isd",
        "collector_number": "51",
        "scryfall_uri": "https://scryfall.com/card/isd/51/delver-of-secrets",
        "card_faces": [
            {
                "name": "Delver of Secrets",
                "image_uris": {"large": "https://img.example/delver-front.jpg"},
            },
            {
                "name": "Insectile Aberration",
                "image_uris": {"large": "https://img.example/delver-back.jpg"},
            },
        ],
        "prices": {"usd": "0.40", "eur": None, "tix": "0.02"},
    }
