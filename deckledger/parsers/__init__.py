from deckledger.parsers.card_identity import name_to_id
from deckledger.parsers.decklist import (
    ParserState,
    build_distinct_card_names,
    build_distinct_card_numbers_by_set,
    extract_set_code,
    parse_line,
    parse_lines,
    parse_text,
)
from deckledger.parsers.ledger import merge_ledgers, parse_ledger_csv
from deckledger.parsers.scryfall import (
    card_metadata_from_scryfall,
    index_by_card_id,
    index_by_collector_number,
)

__all__ = [
    "ParserState",
    "build_distinct_card_names",
    "build_distinct_card_numbers_by_set",
    "card_metadata_from_scryfall",
    "extract_set_code",
    "index_by_card_id",
    "index_by_collector_number",
    "merge_ledgers",
    "name_to_id",
    "parse_ledger_csv",
    "parse_line",
    "parse_lines",
    "parse_text",
]
