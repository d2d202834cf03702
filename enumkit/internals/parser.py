"""Lark parser setup for enumeration text."""
from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Union

from lark import Lark, Transformer, UnexpectedInput

GRAMMAR_PATH = Path(__file__).parent.parent / "grammar.lark"

# A parse yields either an integer literal or the tuple of names it lists
ParsedText = Union[int, tuple[str, ...]]


# Digits of the widest magnitude any kind holds (u64 max is 20 digits)
MAX_LITERAL_DIGITS = len(str((1 << 64) - 1))

# Any literal with more digits is out of range for every kind; it becomes this
# magnitude instead of going through int(), which rejects very long strings
OVERSIZED_MAGNITUDE = 1 << 64


class TextTransformer(Transformer):
    def number(self, items) -> int:
        literal = str(items[0])
        sign = -1 if literal.startswith("-") else 1
        digits = literal.lstrip("+-").lstrip("0")
        if len(digits) > MAX_LITERAL_DIGITS:
            return sign * OVERSIZED_MAGNITUDE
        return sign * int(digits) if digits else 0

    def names(self, items) -> tuple[str, ...]:
        return tuple(str(token) for token in items)


@lru_cache(maxsize=None)
def get_parser() -> Lark:
    kwargs = dict(
        parser="lalr",
        maybe_placeholders=False,
        transformer=TextTransformer(),
    )
    return Lark.open(str(GRAMMAR_PATH), **kwargs)


def parse_text(text: str) -> ParsedText:
    """Parse enumeration text into an int or a tuple of member names.

    Raises:
        lark.UnexpectedInput: the text is neither form.
    """
    return get_parser().parse(text)


def is_member_name(name: str) -> bool:
    """True if `name` reads back as a single NAME token of the grammar."""
    terminal = get_parser().get_terminal("NAME")
    return isinstance(name, str) and re.fullmatch(terminal.pattern.to_regexp(), name) is not None


def describe_parse_error(e: UnexpectedInput, text: str) -> str:
    """One-line location hint for a failed parse."""
    column = getattr(e, "column", None)
    if column is None or column < 1:
        return "unexpected end of input" if text.strip() == "" else str(e).splitlines()[0]
    return f"unexpected input at column {column}"
