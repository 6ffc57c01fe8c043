from typing import Literal

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

Currency = Literal["usd", "eur", "tix"]


class DecklistSettings(BaseModel):
    """Per-render options consumed by the reconciliation engine."""

    preferred_currency: Currency = "usd"
    hide_prices: bool = False
    show_buylist: bool = True
    # Presentation only; they decide which display fields get filled in
    show_card_names_as_hyperlinks: bool = True
    show_card_previews: bool = True


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="DECKLEDGER_")

    app_name: str = "DeckLedger"
    debug: bool = False

    preferred_currency: Currency = "usd"
    hide_prices: bool = False
    show_buylist: bool = True
    show_card_names_as_hyperlinks: bool = True
    show_card_previews: bool = True

    # Columns read from ownership ledger CSV exports
    ledger_name_column: str = "Name"
    ledger_count_column: str = "Count"

    scryfall_api_url: str = "https://api.scryfall.com"
    scryfall_timeout: float = 30.0

    def decklist_settings(self) -> DecklistSettings:
        return DecklistSettings(
            preferred_currency=self.preferred_currency,
            hide_prices=self.hide_prices,
            show_buylist=self.show_buylist,
            show_card_names_as_hyperlinks=self.show_card_names_as_hyperlinks,
            show_card_previews=self.show_card_previews,
        )


settings = Settings()


# =============================================================================
# LIST FORMAT CONSTANTS
# =============================================================================

CURRENCY_SYMBOLS: dict[str, str] = {
    "usd": "$",
    "eur": "€",
    "tix": "Tx",
}

DEFAULT_SECTION_NAME = "Deck:"
COLLECTION_SECTION_NAME = "Collection: "

COMMENT_DELIMITER = "#"

UNKNOWN_CARD = "Unknown card"

# Scryfall's /cards/collection endpoint accepts at most 75 identifiers
MAX_SCRYFALL_BATCH_SIZE = 75
