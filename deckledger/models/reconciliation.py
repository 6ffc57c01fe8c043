"""
Reconciled decklist view.

These records are render-agnostic: a presentation layer turns them into
markup, terminal output or JSON without recomputing anything.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from deckledger.config import UNKNOWN_CARD

EntryKind = Literal["card", "comment", "blank", "error"]


class ListMode(str, Enum):
    """How card entries are identified."""

    DECKLIST = "decklist"  # by name
    COLLECTION = "collection"  # by (set code, collector number)


@dataclass
class LineEntry:
    """
    One non-header line placed in its section, with resolved display fields.

    Attributes:
        kind: Which line shape produced this entry
        count: Requested quantity (card entries only)
        owned: Owned quantity; None when ownership tracking is disabled
        deficit: max(0, count - owned) when tracking is enabled, else 0
        name: Effective card name (parsed, or resolved from set/number)
        display_name: Catalog name, else the parsed name, else UNKNOWN_CARD
        card_id: Normalized id of the effective name
        unit_price: Price per copy in the preferred currency, if resolvable
        total_price: count * unit_price
        amount_owned: owned * unit_price, only for entries with a deficit
        link_uri: Hyperlink target, when hyperlinks are enabled and known
        image_uri: Preview image, when previews are enabled and known
    """

    kind: EntryKind
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
    comments: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()
    set_code: str | None = None
    collector_number: str | None = None

    @property
    def is_insufficient(self) -> bool:
        """True if the ledger holds fewer copies than requested."""
        return self.deficit > 0


@dataclass
class SectionSummary:
    """
    Section totals.

    When nothing is missing, owned_count == total_count and
    owned_cost == total_cost.
    """

    total_count: int = 0
    total_cost: float = 0.0
    owned_count: int = 0
    owned_cost: float = 0.0
    has_missing: bool = False


@dataclass
class Section:
    """A named, ordered bucket of entries."""

    name: str
    entries: list[LineEntry] = field(default_factory=list)
    missing_card_counts: dict[str, int] = field(default_factory=dict)
    summary: SectionSummary = field(default_factory=SectionSummary)

    @property
    def missing_count(self) -> int:
        return sum(self.missing_card_counts.values())

    @property
    def warnings(self) -> list[str]:
        """Every per-line error message in this section, in order."""
        return [message for entry in self.entries for message in entry.errors]


@dataclass
class BuylistEntry:
    """A card to buy and how many copies."""

    card_id: str
    quantity: int
    name: str | None = None
    unit_price: float | None = None

    @property
    def is_known(self) -> bool:
        return self.name is not None

    @property
    def label(self) -> str:
        """Catalog name, else the card id, else the unknown-card marker."""
        return self.name or self.card_id or UNKNOWN_CARD

    @property
    def cost(self) -> float:
        if self.unit_price is None:
            return 0.0
        return self.quantity * self.unit_price


@dataclass
class Buylist:
    """Consolidated deficits across every section."""

    entries: list[BuylistEntry] = field(default_factory=list)
    total_cost: float = 0.0

    @property
    def total_count(self) -> int:
        return sum(entry.quantity for entry in self.entries)

    def to_text(self) -> str:
        """One "<quantity> <name>" line per entry, ready to paste into a store."""
        return "".join(f"{entry.quantity} {entry.label}\n" for entry in self.entries)


@dataclass(frozen=True, slots=True)
class SyncEntry:
    """A resolved collection card to sync into the ownership ledger."""

    set_code: str
    collector_number: str
    count: int

    def encode(self) -> str:
        return f"{self.set_code}:{self.collector_number}:{self.count}"

    @staticmethod
    def encode_all(entries: list["SyncEntry"]) -> str:
        """Encode as the "set:number:count//" payload used by the sync action."""
        return "".join(f"{entry.encode()}//" for entry in entries)


@dataclass
class ReconciliationResult:
    """Everything a presentation layer needs to render a decklist or collection."""

    mode: ListMode
    currency: str
    currency_symbol: str
    prices_shown: bool
    sections: list[Section] = field(default_factory=list)
    missing_card_counts: dict[str, int] = field(default_factory=dict)
    buylist: Buylist | None = None
    sync_entries: list[SyncEntry] = field(default_factory=list)

    def section(self, name: str) -> Section | None:
        """Look up a section by name."""
        for section in self.sections:
            if section.name == name:
                return section
        return None
