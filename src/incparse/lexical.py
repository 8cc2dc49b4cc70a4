"""Character-level convenience parsers built on the public combinators."""

from __future__ import annotations

from collections.abc import Set

from .combinators import many, many1, option, skip_many
from .core import Parser, TotalParser, always, do_parser
from .scan import satisfy, string, take_while, take_while1


def char(c: str | Set[str]) -> Parser[str]:
    """Match the character `c`, or any character from the set `c`."""
    if isinstance(c, Set):
        return satisfy(lambda token: token in c).label(f"failed parser char: {c}")
    return satisfy(lambda token: token == c).label(f"failed parser char: {c}")


def not_char(c: str | Set[str]) -> Parser[str]:
    """Match any character other than `c` (or outside the set `c`)."""
    if isinstance(c, Set):
        return satisfy(lambda token: token not in c).label(str(c))
    return satisfy(lambda token: token != c).label(str(c))


whitespace: Parser[str] = satisfy(str.isspace).label("whitespace")
space: Parser[str] = char(" ")
spaces: TotalParser[list[str]] = many(space)
skip_spaces: TotalParser[None] = skip_many(space)
skip_whitespaces: TotalParser[None] = skip_many(whitespace)

letter: Parser[str] = satisfy(str.isalpha).label("letter")
word: Parser[str] = many1(letter).map("".join)
digit: Parser[str] = satisfy(str.isdecimal).label("digit")


@do_parser
def _number():
    integral = yield take_while1(str.isdecimal)
    fraction = yield option(None, char(".") >> take_while(str.isdecimal))
    if fraction is None:
        return int(integral)
    return float(f"{integral}.{fraction}")


# Base-10 integer, or a float when a decimal point follows the digits.
number: Parser[int | float] = _number().label("number")

eol: Parser[None] = (char("\n") >> always(None)) | (string("\r\n") >> always(None))
