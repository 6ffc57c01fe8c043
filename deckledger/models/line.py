"""
Parsed line variants.

Every raw input line maps to exactly one of these records. The union is
closed: consumers handle each variant explicitly with isinstance checks.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class BlankLine:
    """An empty or whitespace-only line."""


@dataclass(frozen=True, slots=True)
class SectionHeaderLine:
    """
    Starts a new named section.

    Attributes:
        text: The raw header line, used verbatim as the section name
    """

    text: str


@dataclass(frozen=True, slots=True)
class CommentLine:
    """
    A full-line comment such as "# set=war".

    Attributes:
        texts: Comment fragments, stored verbatim (not the parsed settings)
    """

    texts: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class CardByNumberLine:
    """
    A bare collector number, named later from the set it belongs to.

    Attributes:
        number: Collector number as written
        set_code: Set code carried from the latest "# set=" comment ("" if none)
    """

    number: str
    set_code: str


@dataclass(frozen=True, slots=True)
class CardLine:
    """
    A "<count> <card name>" entry.

    Attributes:
        count: Requested quantity
        name: Card name as written (may be empty, see errors)
        global_count: Owned quantity from the ledger; None when no ledger was supplied
        comments: Trailing "#" fragments, in order
        errors: Non-fatal problems found while parsing this line
        set_code: Set code from an inline "(SET) 123" annotation, if present
        collector_number: Collector number from the same annotation, if present
    """

    count: int
    name: str
    global_count: int | None = None
    comments: tuple[str, ...] = field(default_factory=tuple)
    errors: tuple[str, ...] = field(default_factory=tuple)
    set_code: str | None = None
    collector_number: str | None = None


@dataclass(frozen=True, slots=True)
class ErrorLine:
    """A line that matched no recognized shape."""

    messages: tuple[str, ...]


Line = BlankLine | SectionHeaderLine | CommentLine | CardByNumberLine | CardLine | ErrorLine
