"""Quote-aware splitting of message text into command fields."""

from typing import List

QUOTE_CHARACTERS = frozenset('"')


def tokenize(text: str) -> List[str]:
    """Split text on runs of whitespace, keeping double-quoted runs together.

    Quote characters are dropped and the quoted content is kept verbatim,
    whitespace included. A quote that is never closed extends to the end
    of the text. A quote character always ends the field it appears in,
    so ``ab"cd"`` yields ``["ab", "cd"]``.

    Examples::

        tokenize('a  b')           -> ['a', 'b']
        tokenize('"a b" c')        -> ['a b', 'c']
        tokenize('x "open ended')  -> ['x', 'open ended']
        tokenize('   ')            -> []
    """
    fields: List[str] = []
    in_quotes = False
    field_start = -1

    for i, ch in enumerate(text):
        if ch in QUOTE_CHARACTERS:
            if field_start == -1:
                field_start = i + 1
                in_quotes = True
            else:
                fields.append(text[field_start:i])
                field_start = -1
                in_quotes = False
        elif ch.isspace() and not in_quotes:
            if field_start != -1:
                fields.append(text[field_start:i])
                field_start = -1
        elif field_start == -1:
            field_start = i

    if field_start != -1:
        fields.append(text[field_start:])
    return fields
