"""
Card identity.

A card id is the join key between parsed lines, the ownership ledger and
card metadata. Two spellings a person would read as the same card
("Lightning  Bolt", "lightning bolt") produce the same id.
"""


def name_to_id(name: str) -> str:
    """
    Return the canonical id for a card name.

    - Trims and collapses internal whitespace
    - Case-folds

    Applying it to an id it already produced returns that id unchanged.
    Punctuation is kept, so "Fire // Ice" and "Fire / Ice" stay distinct.
    """
    return " ".join(name.split()).casefold()
