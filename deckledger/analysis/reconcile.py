"""
Decklist reconciliation.

Groups parsed lines into sections and compares each card entry against the
ownership ledger and card catalog: per-section totals, missing copies,
monetary value, and a consolidated buylist.

Nothing here raises for missing data. Unknown cards, unpriced cards and an
absent ledger are normal states that simply contribute no price or deficit.
"""

import logging
from collections.abc import Mapping, Sequence

from deckledger.config import (
    COLLECTION_SECTION_NAME,
    CURRENCY_SYMBOLS,
    DEFAULT_SECTION_NAME,
    UNKNOWN_CARD,
    DecklistSettings,
)
from deckledger.models.card import CardMetadata
from deckledger.models.failure import ContractViolationError, require
from deckledger.models.line import (
    BlankLine,
    CardByNumberLine,
    CardLine,
    CommentLine,
    ErrorLine,
    Line,
    SectionHeaderLine,
)
from deckledger.models.reconciliation import (
    Buylist,
    BuylistEntry,
    LineEntry,
    ListMode,
    ReconciliationResult,
    Section,
    SectionSummary,
    SyncEntry,
)
from deckledger.parsers.card_identity import name_to_id
from deckledger.parsers.ledger import validate_ledger

logger = logging.getLogger(__name__)


def card_not_found_name(set_code: str, number: str) -> str:
    """Placeholder name for a collector number the catalog does not know."""
    return f"Card not found ({set_code}/{number})"


def get_card_price(
    card_name: str,
    card_data_by_id: Mapping[str, CardMetadata],
    settings: DecklistSettings,
) -> float | None:
    """
    Unit price of a card in the preferred currency.

    Accepts a card name or a card id. Returns None when prices are hidden,
    the card is unknown, or it has no price in that currency.
    """
    if settings.hide_prices:
        return None
    card_data = card_data_by_id.get(name_to_id(card_name))
    if card_data is None:
        return None
    return card_data.price_for(settings.preferred_currency)


def format_price(amount: float, currency: str) -> str:
    """Format an amount with its currency symbol: "$1.50", "€0.20", "Tx0.05"."""
    return f"{CURRENCY_SYMBOLS[currency]}{amount:.2f}"


def resolve_collection_numbers(
    lines: Sequence[Line],
    cards_by_set_number: Mapping[str, Mapping[str, CardMetadata]],
    card_counts: Mapping[str, int],
) -> tuple[list[Line], dict[str, CardMetadata]]:
    """
    Name every bare collector number from the catalog.

    Each CardByNumberLine becomes a one-copy CardLine. On a catalog hit it
    takes the card's canonical name; on a miss it gets a placeholder name
    and stays unpriced.

    Args:
        lines: Parsed lines
        cards_by_set_number: {set_code: {collector_number: CardMetadata}}
        card_counts: Ownership ledger; empty disables tracking

    Returns:
        (lines with numbers resolved, {card_id: CardMetadata} for the hits)
    """
    resolved: list[Line] = []
    card_data_by_id: dict[str, CardMetadata] = {}

    for line in lines:
        if not isinstance(line, CardByNumberLine):
            resolved.append(line)
            continue

        card_data = cards_by_set_number.get(line.set_code, {}).get(line.number)
        if card_data is None:
            name = card_not_found_name(line.set_code, line.number)
        else:
            name = card_data.name
            card_data_by_id[name_to_id(name)] = card_data

        global_count = None
        if card_counts:
            global_count = card_counts.get(name_to_id(name), 0)

        resolved.append(
            CardLine(
                count=1,
                name=name,
                global_count=global_count,
                set_code=line.set_code,
                collector_number=line.number,
            )
        )

    return resolved, card_data_by_id


def _card_entry(
    line: CardLine,
    card_data_by_id: Mapping[str, CardMetadata],
    settings: DecklistSettings,
) -> LineEntry:
    """Build the entry for a card line, including price and deficit."""
    card_id = name_to_id(line.name)
    card_data = card_data_by_id.get(card_id)
    unit_price = get_card_price(line.name, card_data_by_id, settings)

    entry = LineEntry(
        kind="card",
        count=line.count,
        owned=line.global_count,
        name=line.name,
        display_name=(card_data.name if card_data else None) or line.name or UNKNOWN_CARD,
        card_id=card_id,
        unit_price=unit_price,
        comments=line.comments,
        errors=line.errors,
        set_code=line.set_code,
        collector_number=line.collector_number,
    )

    if card_data is not None:
        if settings.show_card_names_as_hyperlinks:
            entry.link_uri = card_data.purchase_uri
        if settings.show_card_previews:
            entry.image_uri = card_data.preview_image_uri

    if unit_price is not None:
        entry.total_price = line.count * unit_price

    # A None global count means tracking is disabled: no deficit at all
    if line.global_count is not None and line.count > line.global_count:
        entry.deficit = line.count - line.global_count
        if unit_price is not None:
            entry.amount_owned = line.global_count * unit_price

    return entry


def _entry_for(
    line: Line,
    card_data_by_id: Mapping[str, CardMetadata],
    settings: DecklistSettings,
) -> LineEntry:
    if isinstance(line, CardLine):
        return _card_entry(line, card_data_by_id, settings)
    if isinstance(line, CardByNumberLine):
        # Unresolved outside collection mode: counted, never priced
        return LineEntry(
            kind="card",
            count=1,
            display_name=UNKNOWN_CARD,
            set_code=line.set_code,
            collector_number=line.number,
        )
    if isinstance(line, CommentLine):
        return LineEntry(kind="comment", comments=line.texts)
    if isinstance(line, ErrorLine):
        return LineEntry(kind="error", errors=line.messages)
    if isinstance(line, BlankLine):
        return LineEntry(kind="blank")
    raise ContractViolationError("parsed_lines", f"unexpected line type {type(line).__name__}")


def _add_entry(section: Section, entry: LineEntry, missing_card_counts: dict[str, int]) -> None:
    """Place an entry in its section and fold it into the running totals."""
    section.entries.append(entry)
    if entry.kind != "card":
        return

    section.summary.total_count += entry.count
    if entry.total_price is not None:
        section.summary.total_cost += entry.total_price

    if entry.deficit > 0 and entry.card_id is not None:
        section.missing_card_counts[entry.card_id] = (
            section.missing_card_counts.get(entry.card_id, 0) + entry.deficit
        )
        missing_card_counts[entry.card_id] = (
            missing_card_counts.get(entry.card_id, 0) + entry.deficit
        )


def _summarize(
    section: Section,
    card_data_by_id: Mapping[str, CardMetadata],
    settings: DecklistSettings,
) -> None:
    """Fill in the owned totals once every entry is placed."""
    summary: SectionSummary = section.summary
    if not section.missing_card_counts:
        summary.owned_count = summary.total_count
        summary.owned_cost = summary.total_cost
        return

    missing_cost = 0.0
    for card_id, count_needed in section.missing_card_counts.items():
        unit_price = get_card_price(card_id, card_data_by_id, settings) or 0.0
        missing_cost += unit_price * count_needed

    summary.has_missing = True
    summary.owned_count = summary.total_count - section.missing_count
    summary.owned_cost = summary.total_cost - missing_cost


def build_buylist(
    missing_card_counts: Mapping[str, int],
    card_data_by_id: Mapping[str, CardMetadata],
    settings: DecklistSettings,
) -> Buylist:
    """
    Consolidate deficits into a buylist.

    Unknown cards are listed by id and cost nothing.
    """
    buylist = Buylist()
    for card_id, quantity in missing_card_counts.items():
        if quantity <= 0:
            continue
        card_data = card_data_by_id.get(card_id)
        unit_price = get_card_price(card_id, card_data_by_id, settings)
        entry = BuylistEntry(
            card_id=card_id,
            quantity=quantity,
            name=card_data.name if card_data else None,
            unit_price=unit_price,
        )
        buylist.entries.append(entry)
        buylist.total_cost += entry.cost
    return buylist


def _build_sync_entries(
    sections: Sequence[Section],
    card_data_by_id: Mapping[str, CardMetadata],
) -> list[SyncEntry]:
    """One sync entry per resolved collection card, counting its entries."""
    entries: list[SyncEntry] = []
    for card_data in card_data_by_id.values():
        count = sum(
            1
            for section in sections
            for entry in section.entries
            if entry.kind == "card" and entry.name == card_data.name
        )
        entries.append(SyncEntry(card_data.set_code, card_data.collector_number, count))
    return entries


def reconcile(
    parsed_lines: Sequence[Line],
    card_data_by_id: Mapping[str, CardMetadata],
    card_counts: Mapping[str, int],
    settings: DecklistSettings | None = None,
    mode: ListMode | str = ListMode.DECKLIST,
    cards_by_set_number: Mapping[str, Mapping[str, CardMetadata]] | None = None,
) -> ReconciliationResult:
    """
    Reconcile parsed lines against the card catalog and ownership ledger.

    Args:
        parsed_lines: Output of parse_lines, in input order
        card_data_by_id: Card catalog {card_id: CardMetadata}; may be partial
        card_counts: Ownership ledger {card_id: owned}; empty disables tracking
        settings: Currency, price and buylist options. Defaults to DecklistSettings()
        mode: DECKLIST (cards by name) or COLLECTION (cards by set + number)
        cards_by_set_number: Collection mode catalog
            {set_code: {collector_number: CardMetadata}}

    Returns:
        ReconciliationResult with sections in first-seen order. Repeated
        section headers share one section.

    Raises:
        ContractViolationError: If a required argument is None, the mode or
            currency is unsupported, a ledger count is negative, or a line
            is not a parsed Line
    """
    require(parsed_lines, "parsed_lines")
    require(card_data_by_id, "card_data_by_id")
    validate_ledger(card_counts)
    if settings is None:
        settings = DecklistSettings()
    try:
        mode = ListMode(mode)
    except ValueError as e:
        raise ContractViolationError("mode", f"unsupported mode {mode!r}") from e
    if settings.preferred_currency not in CURRENCY_SYMBOLS:
        raise ContractViolationError(
            "settings", f"unsupported currency {settings.preferred_currency!r}"
        )

    card_data_by_id = dict(card_data_by_id)
    lines: Sequence[Line] = parsed_lines
    resolved_by_id: dict[str, CardMetadata] = {}
    if mode is ListMode.COLLECTION:
        lines, resolved_by_id = resolve_collection_numbers(
            parsed_lines, cards_by_set_number or {}, card_counts
        )
        card_data_by_id.update(resolved_by_id)

    default_section = DEFAULT_SECTION_NAME
    if mode is ListMode.COLLECTION:
        default_section = COLLECTION_SECTION_NAME
    sections: dict[str, Section] = {}
    missing_card_counts: dict[str, int] = {}
    current = default_section

    for idx, line in enumerate(lines):
        if isinstance(line, SectionHeaderLine):
            current = line.text or default_section
            sections.setdefault(current, Section(name=current))
            continue
        if idx == 0:
            sections.setdefault(current, Section(name=current))
        entry = _entry_for(line, card_data_by_id, settings)
        _add_entry(sections[current], entry, missing_card_counts)

    for section in sections.values():
        _summarize(section, card_data_by_id, settings)

    buylist = None
    if settings.show_buylist and missing_card_counts:
        buylist = build_buylist(missing_card_counts, card_data_by_id, settings)

    result = ReconciliationResult(
        mode=mode,
        currency=settings.preferred_currency,
        currency_symbol=CURRENCY_SYMBOLS[settings.preferred_currency],
        prices_shown=bool(card_data_by_id) and not settings.hide_prices,
        sections=list(sections.values()),
        missing_card_counts=missing_card_counts,
        buylist=buylist,
    )
    if mode is ListMode.COLLECTION:
        result.sync_entries = _build_sync_entries(result.sections, resolved_by_id)

    logger.debug(
        "Reconciled %d lines into %d sections (%d cards missing)",
        len(lines),
        len(sections),
        sum(missing_card_counts.values()),
    )
    return result
