"""
Token-level and scanning parsers.

Every parser here behaves the same whether the tokens it matches arrived
in a single chunk or were spread across many chunks delivered over time.
The scanning loops run inside generator-based parsers, so each chunk hop is
a trampoline step rather than a native recursive call.

``take_while``, ``take_till``, ``skip_while`` and ``take_rest`` never fail.
Do not pass them to ``many`` and friends: those loop until their argument
fails (they raise :class:`~incparse.errors.NonTerminatingParserError` when
given one).
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Sequence
from typing import Any

from .core import Parser, TotalParser, do_parser, fail
from .primitives import advance, demand_input, ensure_state, get, get_state, put, want_input
from .stream import InputState, add_stream, join
from .types import OnFail, OnOk, Step

Predicate = Callable[[Any], bool]


@do_parser
def satisfy(pred: Predicate):
    """Consume one token for which `pred` holds and return it."""
    state = yield ensure_state(1)
    token = state.peek()
    if not pred(token):
        return (yield fail("satisfy?"))
    yield advance(1)
    return token


@do_parser
def skip(pred: Predicate):
    """Like :func:`satisfy`, but discards the token."""
    state = yield ensure_state(1)
    if not pred(state.peek()):
        return (yield fail("skip"))
    yield advance(1)
    return None


@do_parser
def take_with(n: int, pred: Callable[[Sequence[Any]], bool]):
    """Consume `n` tokens, but only if `pred` accepts them as a whole."""
    state = yield ensure_state(n)
    head = state.slice(n)
    if not pred(head):
        return (yield fail("take-with"))
    yield advance(n)
    return head


def take(n: int) -> Parser[Sequence[Any]]:
    return take_with(n, lambda _head: True)


def _same_tokens(found: Sequence[Any], expected: Sequence[Any]) -> bool:
    if type(found) is type(expected):
        return found == expected
    return tuple(found) == tuple(expected)


def string(s: Sequence[Any]) -> Parser[Sequence[Any]]:
    """Match `s` exactly and return it.

    Consumes nothing on failure, including when only a prefix of `s` matched
    before the input ran out.
    """
    return take_with(len(s), lambda head: _same_tokens(head, s)).map(lambda _head: s)


@do_parser(total=True)
def skip_while(pred: Predicate):
    """Drop tokens for as long as `pred` holds, across chunk boundaries."""
    while True:
        state = yield get_state
        n = state.span(pred)
        yield advance(n)
        if n < state.available:
            return None
        if not (yield want_input):
            return None


@do_parser(total=True)
def take_while(pred: Predicate):
    """
    Consume tokens for as long as `pred` holds and return them.

    Returns an empty sequence (of the input's type) when the first token
    does not match. Fragments matched in earlier chunks are concatenated in
    delivery order, so the result does not depend on how the input was split.
    """
    fragments: list[Sequence[Any]] = []
    while True:
        state = yield get_state
        n = state.span(pred)
        fragments.append(state.slice(n))
        yield advance(n)
        if n < state.available or not (yield want_input):
            return join(fragments, state.empty())


def take_till(pred: Predicate) -> TotalParser[Sequence[Any]]:
    """Consume tokens until `pred` first holds."""
    return take_while(lambda token: not pred(token))


@do_parser
def take_while1(pred: Predicate):
    """Like :func:`take_while`, but fails unless at least one token matches."""
    state = yield get_state
    if not state.available:
        yield demand_input
        state = yield get_state
    n = state.span(pred)
    if n == 0:
        return (yield fail("take-while1"))
    head = state.slice(n)
    yield advance(n)
    if n < state.available:
        return head
    tail = yield take_while(pred)
    return join([head, tail], head[:0])


@do_parser(total=True)
def _take_rest():
    chunks: list[Sequence[Any]] = []
    while (yield want_input):
        rest = yield get
        chunks.append(rest)
        yield put(rest[:0])
    return chunks


# Drains every remaining chunk; the result lists them in delivery order.
take_rest: TotalParser[list[Sequence[Any]]] = _take_rest()


def _end_of_input(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
    if state.available:
        return lambda: on_fail(state, (), "end-of-input")
    if state.is_complete:
        return lambda: on_ok(state, None)

    # Unknown yet: probe the prompt. Whatever the answer, the merged state
    # keeps any chunk the probe pulled in.
    def no_more_input(s1: InputState, _context: tuple[str, ...], _message: str) -> Step:
        return lambda: on_ok(add_stream(state, s1), None)

    def got_input(s1: InputState, _unit: None) -> Step:
        return lambda: on_fail(add_stream(state, s1), (), "end-of-input")

    return demand_input(state.without_added(), no_more_input, got_input)


end_of_input: Parser[None] = Parser(_end_of_input, "end_of_input")

at_end: TotalParser[bool] = want_input.map(operator.not_)

any_token: Parser[Any] = satisfy(lambda _token: True)
