from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Any

from .core import Parser
from .driver import ParseOptions, iter_prompt, run
from .types import CompletionState, Partial, Result, Success


def run_parser(
    parser: Parser[Any],
    data: Sequence[Any],
    more: CompletionState = CompletionState.COMPLETE,
    *,
    options: ParseOptions | None = None,
) -> Result:
    """
    Run `parser` over `data`.

    With the default ``more=COMPLETE`` the result is always a ``Success`` or
    a ``Failure``. With ``more=INCOMPLETE`` it may also be a ``Partial``
    waiting for :meth:`Partial.feed`.
    """
    return run(parser, data, more, options=options)


def parse(
    parser: Parser[Any], chunk: Sequence[Any], *, options: ParseOptions | None = None
) -> Result:
    """Start an incremental parse with the first chunk of input."""
    return run(parser, chunk, CompletionState.INCOMPLETE, options=options)


def feed(result: Result, chunk: Sequence[Any], *, final: bool = False) -> Result:
    """
    Supply one more chunk to a parse.

    A suspended parse resumes. A finished parse keeps its outcome; a
    ``Success`` gains the chunk in its unconsumed remainder.
    """
    if isinstance(result, Partial):
        return result.feed(chunk, final=final)
    if isinstance(result, Success) and chunk:
        return replace(result, remaining=result.remaining.with_chunk(chunk, final=final))
    return result


def parse_only(
    parser: Parser[Any], data: Sequence[Any], *, options: ParseOptions | None = None
) -> Any:
    """Parse complete input and return the value, raising ``ParseError`` on failure."""
    return run_parser(parser, data, options=options).unwrap()


def parse_iter(
    parser: Parser[Any],
    chunks: Iterable[Sequence[Any]],
    *,
    options: ParseOptions | None = None,
) -> Result:
    """
    Parse input pulled chunk by chunk from `chunks` as the parser demands it.

    The iterable answers every prompt right away, so the result is a
    ``Success`` or a ``Failure``, never a ``Partial``.
    """
    return run(
        parser, (), CompletionState.INCOMPLETE, prompt=iter_prompt(chunks), options=options
    )
