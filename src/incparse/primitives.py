"""The minimal vocabulary for inspecting, replacing and extending the input."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from .core import Parser, TotalParser
from .errors import PromptProtocolError
from .stream import InputState
from .types import OnFail, OnOk, Step

NOT_ENOUGH_INPUT = "not enough input"


def request_input(
    state: InputState,
    on_no_more_input: Callable[[InputState], Step],
    on_new_chunk: Callable[[InputState], Step],
) -> Step:
    """Hand control to the prompt callback stored on `state`.

    The prompt must answer exactly once: either with "no more input" (the
    state becomes complete) or with a non-empty chunk, which is appended to
    the unconsumed input.
    """
    if state.prompt is None:
        raise PromptProtocolError("input is incomplete but no prompt callback is installed")
    answered = False

    def claim() -> None:
        nonlocal answered
        if answered:
            raise PromptProtocolError("prompt continuation invoked more than once")
        answered = True

    def no_more_input() -> Step:
        claim()
        return on_no_more_input(state.completed())

    def new_chunk(chunk: Sequence[Any], *, final: bool = False) -> Step:
        if not isinstance(chunk, Sequence):
            raise PromptProtocolError(f"chunk must be a sequence, got {type(chunk).__name__}")
        if not chunk:
            raise PromptProtocolError("on_new_chunk requires a non-empty chunk")
        claim()
        return on_new_chunk(state.with_chunk(chunk, final=final))

    return state.prompt(state, no_more_input, new_chunk)


def _get(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
    return lambda: on_ok(state, state.remaining)


get: TotalParser[Sequence[Any]] = TotalParser(_get, "get")


def _get_state(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
    return lambda: on_ok(state, state)


get_state: TotalParser[InputState] = TotalParser(_get_state, "get_state")


def put(data: Sequence[Any]) -> TotalParser[None]:
    """Replace the unconsumed input with `data`."""

    def run(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
        return lambda: on_ok(state.with_remaining(data), None)

    return TotalParser(run, "put")


def advance(n: int) -> TotalParser[None]:
    """Consume `n` already-buffered tokens by moving the offset forward."""

    def run(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
        return lambda: on_ok(state.advance(n), None)

    return TotalParser(run, f"advance({n})")


def _demand_input(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
    if state.is_complete:
        return lambda: on_fail(state, ("demand-input",), NOT_ENOUGH_INPUT)
    return request_input(
        state,
        lambda s: lambda: on_fail(s, ("demand-input",), NOT_ENOUGH_INPUT),
        lambda s: lambda: on_ok(s, None),
    )


demand_input: Parser[None] = Parser(_demand_input, "demand_input")


def _want_input(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
    if state.available:
        return lambda: on_ok(state, True)
    if state.is_complete:
        return lambda: on_ok(state, False)
    return request_input(
        state,
        lambda s: lambda: on_ok(s, False),
        lambda s: lambda: on_ok(s, True),
    )


# Never fails: reports whether input is buffered or can still be pulled.
want_input: TotalParser[bool] = TotalParser(_want_input, "want_input")


def ensure_state(n: int) -> Parser[InputState]:
    """Like :func:`ensure` but yields the state itself, without slicing."""

    def run(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
        if state.available >= n:
            return lambda: on_ok(state, state)

        def retry(s: InputState, _unit: None) -> Step:
            return lambda: run(s, on_fail, on_ok)

        return _demand_input(state, on_fail, retry)

    return Parser(run, f"ensure({n})")


def ensure(n: int) -> Parser[Sequence[Any]]:
    """Succeed with the unconsumed input once at least `n` tokens are buffered."""
    return ensure_state(n).map(lambda s: s.remaining)
