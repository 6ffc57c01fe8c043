"""
Ownership ledger reader.

Reads collection CSV exports into the {card_id: owned} mapping the
parser and reconciliation engine consume. The ledger is read only.

Expected layout (column names are configurable, matched case-insensitively):
    Name,Count,Set
    Lightning Bolt,4,LEB
"""

import csv
import logging
from collections.abc import Mapping
from io import StringIO

from deckledger.config import settings
from deckledger.models.failure import ContractViolationError, require
from deckledger.parsers.card_identity import name_to_id

logger = logging.getLogger(__name__)


def validate_ledger(card_counts: Mapping[str, int], argument: str = "card_counts") -> None:
    """
    Fail fast on a ledger that is not a mapping of card ids to non-negative counts.

    Raises:
        ContractViolationError: If the ledger is None or holds a negative or
            non-integer count
    """
    require(card_counts, argument)
    for card_id, count in card_counts.items():
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ContractViolationError(
                argument,
                f"owned count for {card_id!r} must be a non-negative integer, got {count!r}",
            )


def _find_column(fieldnames: list[str], wanted: str) -> str | None:
    for col in fieldnames:
        if col.strip().lower() == wanted.strip().lower():
            return col
    return None


def parse_ledger_csv(
    text: str,
    name_column: str | None = None,
    count_column: str | None = None,
) -> dict[str, int]:
    """
    Parse a collection CSV into an ownership ledger.

    Args:
        text: CSV text with a header row
        name_column: Column holding card names. Defaults to settings.ledger_name_column
        count_column: Column holding owned counts. Defaults to settings.ledger_count_column

    Returns:
        Dict mapping card ids to owned quantities. Rows for the same card are
        summed (one row per printing is common). Empty if the name or count
        column is missing.
    """
    name_column = name_column or settings.ledger_name_column
    count_column = count_column or settings.ledger_count_column

    ledger: dict[str, int] = {}
    if not text or not text.strip():
        return ledger

    reader = csv.DictReader(StringIO(text))
    if not reader.fieldnames:
        return ledger

    name_col = _find_column(reader.fieldnames, name_column)
    count_col = _find_column(reader.fieldnames, count_column)
    if not name_col or not count_col:
        logger.warning(
            "Ledger is missing column %r or %r (found %s)",
            name_column,
            count_column,
            reader.fieldnames,
        )
        return ledger

    for row_number, row in enumerate(reader, start=2):
        name = (row.get(name_col) or "").strip()
        if not name:
            continue

        count_text = (row.get(count_col) or "").strip()
        try:
            count = int(count_text)
        except ValueError:
            logger.warning("Skipping ledger row %d: invalid count %r", row_number, count_text)
            continue
        if count < 0:
            logger.warning("Skipping ledger row %d: negative count %d", row_number, count)
            continue

        card_id = name_to_id(name)
        ledger[card_id] = ledger.get(card_id, 0) + count

    return ledger


def merge_ledgers(*ledgers: dict[str, int]) -> dict[str, int]:
    """
    Merge several ledgers by summing owned counts.

    Each ledger describes a separate physical collection, so copies add up.
    """
    result: dict[str, int] = {}
    for ledger in ledgers:
        for card_id, count in ledger.items():
            result[card_id] = result.get(card_id, 0) + count
    return result
