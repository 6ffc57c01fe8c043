from deckledger.models.card import CardMetadata
from deckledger.models.failure import (
    ContractViolationError,
    FailureDetail,
    FailureKind,
    KnownError,
)
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

__all__ = [
    "BlankLine",
    "Buylist",
    "BuylistEntry",
    "CardByNumberLine",
    "CardLine",
    "CardMetadata",
    "CommentLine",
    "ContractViolationError",
    "ErrorLine",
    "FailureDetail",
    "FailureKind",
    "KnownError",
    "Line",
    "LineEntry",
    "ListMode",
    "ReconciliationResult",
    "Section",
    "SectionHeaderLine",
    "SectionSummary",
    "SyncEntry",
]
