from __future__ import annotations

import functools
import operator
from collections.abc import Iterable
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from .core import Parser, TotalParser, always, do_parser, fail
from .errors import NonTerminatingParserError
from .stream import InputState, add_stream
from .types import OnFail, OnOk, Step

T = TypeVar("T")
D = TypeVar("D")

_NOTHING = object()


def _require_failing(p: Parser[Any], combinator: str) -> None:
    if isinstance(p, TotalParser):
        raise NonTerminatingParserError(
            f"{combinator}() repeats its parser until it fails, but {p.name!r} never fails"
        )


def option(default: D, p: Parser[T]) -> TotalParser[T | D]:
    """Run `p`; if it fails, succeed with `default` without consuming input."""
    return p | always(default)


def many(p: Parser[T]) -> TotalParser[list[T]]:
    """Zero or more occurrences of `p`."""
    _require_failing(p, "many")
    attempt = option(_NOTHING, p)

    @do_parser(total=True)
    def _many():
        items: list[T] = []
        while (item := (yield attempt)) is not _NOTHING:
            items.append(item)
        return items

    return _many()


def many1(p: Parser[T]) -> Parser[list[T]]:
    """One or more occurrences of `p`."""
    rest = many(p)
    return p.bind(lambda first: rest.map(lambda items: [first, *items]))


def skip_many(p: Parser[Any]) -> TotalParser[None]:
    _require_failing(p, "skip_many")
    attempt = option(_NOTHING, p)

    @do_parser(total=True)
    def _skip_many():
        while (yield attempt) is not _NOTHING:
            pass
        return None

    return _skip_many()


def skip_many1(p: Parser[Any]) -> Parser[None]:
    return p >> skip_many(p)


def sep_by1(p: Parser[T], sep: Parser[Any]) -> Parser[list[T]]:
    """One or more `p`, separated by `sep`."""
    step = sep >> p
    _require_failing(step, "sep_by1")
    attempt = option(_NOTHING, step)

    @do_parser
    def _sep_by1():
        items: list[T] = [(yield p)]
        while (item := (yield attempt)) is not _NOTHING:
            items.append(item)
        return items

    return _sep_by1()


def sep_by(p: Parser[T], sep: Parser[Any]) -> TotalParser[list[T]]:
    return option(_NOTHING, sep_by1(p, sep)).map(lambda items: [] if items is _NOTHING else items)


def many_till(p: Parser[T], end: Parser[Any]) -> Parser[list[T]]:
    """Apply `p` until `end` succeeds; the result of `end` is discarded.

    Fails if `p` fails before `end` matches.
    """
    _require_failing(p, "many_till")
    finished = option(_NOTHING, end.map(lambda _value: None))

    @do_parser
    def _many_till():
        items: list[T] = []
        while (yield finished) is _NOTHING:
            items.append((yield p))
        return items

    return _many_till()


def choice(parsers: Iterable[Parser[Any]]) -> Parser[Any]:
    """Try each parser in turn; the first to succeed wins."""
    candidates = list(parsers)
    if not candidates:
        return fail("choice")
    return functools.reduce(operator.or_, candidates)


def replicate(n: int, p: Parser[T]) -> Parser[list[T]]:
    """Exactly `n` occurrences of `p`."""

    @do_parser(total=isinstance(p, TotalParser))
    def _replicate():
        items: list[T] = []
        for _ in range(n):
            items.append((yield p))
        return items

    return _replicate()


def around(sep: Parser[Any], p: Parser[T]) -> Parser[T]:
    """`p` surrounded by `sep` on both sides."""
    return sep >> p << sep


def look_ahead(p: Parser[T]) -> Parser[T]:
    """Run `p` and return its result without consuming any input.

    Chunks pulled from the prompt while `p` ran stay available.
    """

    def run(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
        def peeked(s1: InputState, value: T) -> Step:
            return lambda: on_ok(add_stream(state, s1), value)

        def missed(s1: InputState, context: tuple[str, ...], message: str) -> Step:
            return lambda: on_fail(s1.restore_added(state), context, message)

        return lambda: p(state.without_added(), missed, peeked)

    return Parser(run, "look_ahead")


@functools.lru_cache(maxsize=128)
def _adapter_for(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def validated(p: Parser[Any], target: type[T] | TypeAdapter[T]) -> Parser[T]:
    """
    Validate (and coerce) the result of `p` with a Pydantic v2 type.

    A validation error becomes an ordinary parse failure, so it can be
    caught by an alternative like any other.
    """
    if isinstance(target, TypeAdapter):
        adapter: TypeAdapter[T] = target
    else:
        try:
            adapter = _adapter_for(target)
        except TypeError:  # unhashable annotation, skip the cache
            adapter = TypeAdapter(target)

    def check(value: Any) -> Parser[T]:
        try:
            return always(adapter.validate_python(value))
        except ValidationError as exc:
            first = exc.errors()[0]
            return fail(f"validation failed: {first['msg']}")

    return p.bind(check)
