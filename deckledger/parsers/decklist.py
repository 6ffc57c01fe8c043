"""
Parser for free-form decklist and collection list text.

Line shapes, checked in this order (first match wins):
    <blank>                     -> BlankLine
    Sideboard:                  -> SectionHeaderLine (first char not a digit or "#")
    # set=war, note=foo         -> CommentLine (may change the current set code)
    125                         -> CardByNumberLine (uses the current set code)
    4 Lightning Bolt # comment  -> CardLine
    anything else               -> ErrorLine

Card lines may carry an inline printing annotation that is stripped before
the name is read:
    4 Lightning Bolt (LEB) 163
"""

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from deckledger.config import COMMENT_DELIMITER
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
from deckledger.parsers.card_identity import name_to_id
from deckledger.parsers.ledger import validate_ledger

logger = logging.getLogger(__name__)

# Headers start with anything but a digit or the comment delimiter
HEADING_PATTERN = re.compile(r"^[^0-9" + re.escape(COMMENT_DELIMITER) + r"]")

# A bare collector number: "125"
NUMBER_PATTERN = re.compile(r"^\d+$")

# Inline printing annotation: "(LEB) 163" or "(PLST) 12"
# Groups: (set_code, collector_number)
SET_ANNOTATION_PATTERN = re.compile(r"\(([A-Za-z0-9]{3,4})\)\s+(\d+)")

# Pattern: "4 Lightning Bolt"
# Groups: (count, rest)
CARD_PATTERN = re.compile(r"^(\d+)\s+(.*)$")


@dataclass(frozen=True, slots=True)
class ParserState:
    """
    State carried from one line to the next.

    Attributes:
        set_code: Set code from the latest "# set=" comment, "" until one is seen
    """

    set_code: str = ""


def extract_set_code(comment: str) -> str:
    """
    Read the "set" value from a "# key=value, key=value" comment.

    Returns:
        The last non-empty-keyed "set" value, or "" if there is none.
    """
    set_code = ""
    for setting in comment[len(COMMENT_DELIMITER) :].split(","):
        parts = setting.split("=")
        if len(parts) == 2 and parts[0].strip() == "set":
            set_code = parts[1].strip()
    return set_code


def parse_line(
    line: str,
    card_counts: Mapping[str, int],
    state: ParserState = ParserState(),
) -> tuple[Line, ParserState]:
    """
    Classify one raw line.

    Args:
        line: Raw text line, without its newline
        card_counts: Ownership ledger {card_id: owned}; empty disables tracking
        state: State carried from the previous line

    Returns:
        The parsed line and the state to carry into the next one.
    """
    if not line.strip():
        return BlankLine(), state

    if HEADING_PATTERN.match(line):
        return SectionHeaderLine(text=line), state

    if line.startswith(COMMENT_DELIMITER + " "):
        set_code = extract_set_code(line)
        if set_code:
            state = ParserState(set_code=set_code)
        return CommentLine(texts=(line,)), state

    if NUMBER_PATTERN.match(line.strip()):
        return CardByNumberLine(number=line.strip(), set_code=state.set_code), state

    return _parse_card_line(line, card_counts), state


def _parse_card_line(line: str, card_counts: Mapping[str, int]) -> Line:
    """Parse a "<count> <name>" line with optional annotation and comments."""
    fragments = line.split(COMMENT_DELIMITER)
    text = fragments[0]
    comments = tuple(fragments[1:])

    set_code = None
    collector_number = None
    annotation = SET_ANNOTATION_PATTERN.search(text)
    if annotation:
        set_code, collector_number = annotation.groups()
        text = SET_ANNOTATION_PATTERN.sub("", text, count=1).strip()

    match = CARD_PATTERN.match(text)
    if match is None:
        return ErrorLine(messages=(f"invalid line: {line}",))

    count_text, rest = match.groups()
    count = int(count_text) if count_text else 0
    name = rest.strip()

    global_count = None
    if card_counts:
        global_count = card_counts.get(name_to_id(name), 0)

    errors: tuple[str, ...] = ()
    if not name:
        errors = (f"Unable to parse card name from: {line}",)

    return CardLine(
        count=count,
        name=name,
        global_count=global_count,
        comments=comments,
        errors=errors,
        set_code=set_code,
        collector_number=collector_number,
    )


def parse_lines(raw_lines: Sequence[str], card_counts: Mapping[str, int]) -> list[Line]:
    """
    Parse raw lines into one Line record per input line.

    Args:
        raw_lines: Text lines in input order
        card_counts: Ownership ledger {card_id: owned}. An empty mapping means
            no ledger: every CardLine gets global_count=None.

    Returns:
        List of Line records, same length and order as raw_lines.

    Raises:
        ContractViolationError: If raw_lines is not a sequence of strings
            or card_counts is None or holds a negative count
    """
    require(raw_lines, "raw_lines")
    validate_ledger(card_counts)
    if isinstance(raw_lines, str):
        raise ContractViolationError("raw_lines", "expected a sequence of lines, got a string")

    state = ParserState()
    parsed: list[Line] = []
    for raw in raw_lines:
        if not isinstance(raw, str):
            raise ContractViolationError("raw_lines", f"expected str, got {type(raw).__name__}")
        line, state = parse_line(raw, card_counts, state)
        parsed.append(line)

    logger.debug(
        "Parsed %d lines (%d errors)",
        len(parsed),
        sum(1 for line in parsed if isinstance(line, ErrorLine)),
    )
    return parsed


def parse_text(text: str, card_counts: Mapping[str, int]) -> list[Line]:
    """
    Convenience function: split text on newlines and parse every line.

    Accepts "\n" and "\r\n" line endings. A trailing newline yields a final
    blank line.
    """
    require(text, "text")
    return parse_lines([line.removesuffix("\r") for line in text.split("\n")], card_counts)


def build_distinct_card_names(lines: Sequence[Line]) -> list[str]:
    """
    Distinct non-empty card names, in first-seen order.

    These are the names to look up in the card catalog.
    """
    names = (line.name for line in lines if isinstance(line, CardLine) and line.name)
    return list(dict.fromkeys(names))


def build_distinct_card_numbers_by_set(lines: Sequence[Line]) -> dict[str, list[str]]:
    """
    Collector numbers grouped by set code.

    Numbers without a set code are left out. Repeats are kept; the catalog
    lookup ignores them.
    """
    numbers_by_set: dict[str, list[str]] = {}
    for line in lines:
        if isinstance(line, CardByNumberLine) and line.set_code:
            numbers_by_set.setdefault(line.set_code, []).append(line.number)
    return numbers_by_set
