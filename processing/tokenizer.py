"""
Quoted-field line tokenizer for delimiter-separated dataset rows.

Quote characters toggle a quoted state and are dropped from the output; a
delimiter inside quotes is kept as part of the field.  The tokenizer never
rejects a line: short rows are the caller's concern.  An unterminated quote
makes the rest of the line part of the open field.

Public API:
    tokenize_line(line, delimiter, quote) → list[str]
    has_balanced_quotes(line, quote) → bool
"""


def tokenize_line(line: str, delimiter: str = ",", quote: str = '"') -> list[str]:
    """
    Split one line into its raw field values.

    Values are returned untrimmed so that plain fields survive a
    join-then-tokenize round trip unchanged.

    Args:
        line: A single line of text, without its line terminator.
        delimiter: Field separator character.
        quote: Quote character.

    Returns:
        Ordered list of field values (always at least one element).
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == quote:
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)

    fields.append("".join(current))
    return fields


def has_balanced_quotes(line: str, quote: str = '"') -> bool:
    """True if every quote opened on the line is closed again."""
    return line.count(quote) % 2 == 0
