"""
Decklist API endpoints.

Render a decklist or collection list against an ownership ledger.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, NonNegativeInt

from deckledger.config import DecklistSettings, settings
from deckledger.models.failure import KnownError
from deckledger.models.reconciliation import ReconciliationResult, SyncEntry
from deckledger.parsers.card_identity import name_to_id
from deckledger.parsers.ledger import merge_ledgers, parse_ledger_csv
from deckledger.services.decklist_service import render_collection, render_decklist
from deckledger.services.scryfall_client import ScryfallClient

router = APIRouter(prefix="/decklist", tags=["decklist"])


class RenderRequest(BaseModel):
    """Request model for rendering a list."""

    text: str = Field(
        ...,
        description="Raw decklist or collection list text",
        examples=["Deck:\n4 Lightning Bolt\n\nSideboard:\n2 Negate"],
    )
    ledger: dict[str, NonNegativeInt] = Field(
        default_factory=dict,
        description="Owned quantities keyed by card name or card id",
        examples=[{"Lightning Bolt": 2}],
    )
    ledger_csv: str | None = Field(
        default=None,
        description="Collection CSV export, merged into the ledger",
    )
    settings: DecklistSettings | None = Field(
        default=None,
        description="Render options; server defaults apply when omitted",
    )

    def card_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for name, count in self.ledger.items():
            card_id = name_to_id(name)
            counts[card_id] = counts.get(card_id, 0) + count
        if self.ledger_csv:
            counts = merge_ledgers(counts, parse_ledger_csv(self.ledger_csv))
        return counts


class EntryResponse(BaseModel):
    """One line of a section."""

    kind: str
    count: int = 0
    owned: int | None = None
    deficit: int = 0
    name: str | None = None
    display_name: str | None = None
    card_id: str | None = None
    unit_price: float | None = None
    total_price: float | None = None
    amount_owned: float | None = None
    link_uri: str | None = None
    image_uri: str | None = None
    comments: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    set_code: str | None = None
    collector_number: str | None = None


class SectionResponse(BaseModel):
    """A section with its totals."""

    name: str
    entries: list[EntryResponse] = Field(default_factory=list)
    total_count: int = 0
    total_cost: float = 0.0
    owned_count: int = 0
    owned_cost: float = 0.0
    missing_card_counts: dict[str, int] = Field(default_factory=dict)


class BuylistEntryResponse(BaseModel):
    """A card to buy."""

    card_id: str
    quantity: int
    label: str
    known: bool
    unit_price: float | None = None


class BuylistResponse(BaseModel):
    """Consolidated buylist."""

    entries: list[BuylistEntryResponse] = Field(default_factory=list)
    total_count: int = 0
    total_cost: float = 0.0
    text: str = ""


class RenderResponse(BaseModel):
    """Response model for a rendered list."""

    mode: str
    currency: str
    currency_symbol: str
    prices_shown: bool
    sections: list[SectionResponse] = Field(default_factory=list)
    missing_card_counts: dict[str, int] = Field(default_factory=dict)
    buylist: BuylistResponse | None = None
    sync_payload: str | None = None


def get_card_lookup() -> ScryfallClient:
    """Card catalog dependency; overridden in tests."""
    return ScryfallClient()


def to_response(result: ReconciliationResult) -> RenderResponse:
    """Convert a ReconciliationResult to its API shape."""
    sections = [
        SectionResponse(
            name=section.name,
            entries=[
                EntryResponse(
                    kind=entry.kind,
                    count=entry.count,
                    owned=entry.owned,
                    deficit=entry.deficit,
                    name=entry.name,
                    display_name=entry.display_name,
                    card_id=entry.card_id,
                    unit_price=entry.unit_price,
                    total_price=entry.total_price,
                    amount_owned=entry.amount_owned,
                    link_uri=entry.link_uri,
                    image_uri=entry.image_uri,
                    comments=list(entry.comments),
                    errors=list(entry.errors),
                    set_code=entry.set_code,
                    collector_number=entry.collector_number,
                )
                for entry in section.entries
            ],
            total_count=section.summary.total_count,
            total_cost=section.summary.total_cost,
            owned_count=section.summary.owned_count,
            owned_cost=section.summary.owned_cost,
            missing_card_counts=section.missing_card_counts,
        )
        for section in result.sections
    ]

    buylist = None
    if result.buylist is not None:
        buylist = BuylistResponse(
            entries=[
                BuylistEntryResponse(
                    card_id=entry.card_id,
                    quantity=entry.quantity,
                    label=entry.label,
                    known=entry.is_known,
                    unit_price=entry.unit_price,
                )
                for entry in result.buylist.entries
            ],
            total_count=result.buylist.total_count,
            total_cost=result.buylist.total_cost,
            text=result.buylist.to_text(),
        )

    sync_payload = None
    if result.sync_entries:
        sync_payload = SyncEntry.encode_all(result.sync_entries)

    return RenderResponse(
        mode=result.mode.value,
        currency=result.currency,
        currency_symbol=result.currency_symbol,
        prices_shown=result.prices_shown,
        sections=sections,
        missing_card_counts=result.missing_card_counts,
        buylist=buylist,
        sync_payload=sync_payload,
    )


@router.post("/render", response_model=RenderResponse)
async def render_decklist_endpoint(
    request: RenderRequest,
    lookup: Annotated[ScryfallClient, Depends(get_card_lookup)],
) -> RenderResponse:
    """
    Render a decklist written by card name.

    Cards are looked up by name; lookup failures render without prices.
    """
    try:
        result = await render_decklist(
            request.text,
            request.card_counts(),
            request.settings or settings.decklist_settings(),
            lookup.lookup_by_names,
        )
    except KnownError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.to_detail().model_dump(mode="json"),
        ) from e
    return to_response(result)


@router.post("/collection", response_model=RenderResponse)
async def render_collection_endpoint(
    request: RenderRequest,
    lookup: Annotated[ScryfallClient, Depends(get_card_lookup)],
) -> RenderResponse:
    """
    Render a collection list written as "# set=<code>" plus collector numbers.
    """
    try:
        result = await render_collection(
            request.text,
            request.card_counts(),
            request.settings or settings.decklist_settings(),
            lookup.lookup_by_collector_numbers,
        )
    except KnownError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.to_detail().model_dump(mode="json"),
        ) from e
    return to_response(result)
