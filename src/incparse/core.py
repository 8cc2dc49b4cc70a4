from __future__ import annotations

import functools
from collections.abc import Callable, Generator
from typing import Any, Generic, TypeVar, overload

from .stream import InputState, add_stream
from .types import OnFail, OnOk, Step

T = TypeVar("T")
U = TypeVar("U")

# A parser is a function ``(state, on_fail, on_ok) -> Step``. It never returns
# its result: it hands it to one of the two continuations. Every such hand-off,
# and every call into a sub-parser, is wrapped in a zero-argument thunk so that
# the driver, not the native call stack, performs the next step.

ParseFn = Callable[[InputState, OnFail, OnOk], Step]


class Parser(Generic[T]):
    __slots__ = ("_fn", "name")

    def __init__(self, fn: ParseFn, name: str | None = None) -> None:
        self._fn = fn
        self.name = name or getattr(fn, "__name__", "parser")

    def __call__(self, state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
        return self._fn(state, on_fail, on_ok)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

    def bind(self, f: Callable[[T], Parser[U]]) -> Parser[U]:
        return bind(self, f)

    def map(self, f: Callable[[T], U]) -> Parser[U]:
        return fmap(f, self)

    def label(self, name: str) -> Parser[T]:
        return label(self, name)

    def __or__(self, other: Parser[Any]) -> Parser[Any]:
        return alt(self, other)

    def __rshift__(self, other: Parser[U]) -> Parser[U]:
        return then(self, other)

    def __lshift__(self, other: Parser[Any]) -> Parser[T]:
        return skip_after(self, other)


class TotalParser(Parser[T]):
    """A parser that never fails.

    Repetition combinators such as ``many`` loop until their argument fails,
    so they refuse parsers of this kind instead of looping forever.
    """

    __slots__ = ()


def _kind(*parsers: Parser[Any]) -> type[Parser[Any]]:
    if all(isinstance(p, TotalParser) for p in parsers):
        return TotalParser
    return Parser


def always(value: T) -> TotalParser[T]:
    """Succeed with `value` without touching the input."""

    def run(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
        return lambda: on_ok(state, value)

    return TotalParser(run, f"always({value!r})")


pure = always


def fail(message: str) -> Parser[Any]:
    def run(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
        return lambda: on_fail(state, (), message)

    return Parser(run, f"fail({message!r})")


def bind(p: Parser[T], f: Callable[[T], Parser[U]]) -> Parser[U]:
    def run(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
        def ok(s: InputState, value: T) -> Step:
            return lambda: f(value)(s, on_fail, on_ok)

        return lambda: p(state, on_fail, ok)

    return Parser(run, "bind")


def fmap(f: Callable[[T], U], p: Parser[T]) -> Parser[U]:
    def run(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
        def ok(s: InputState, value: T) -> Step:
            return lambda: on_ok(s, f(value))

        return lambda: p(state, on_fail, ok)

    return _kind(p)(run, "map")


def then(p: Parser[Any], q: Parser[U]) -> Parser[U]:
    """``p *> q``: run both, keep the result of `q`."""

    def run(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
        def ok(s: InputState, _value: Any) -> Step:
            return lambda: q(s, on_fail, on_ok)

        return lambda: p(state, on_fail, ok)

    return _kind(p, q)(run, "then")


def skip_after(p: Parser[T], q: Parser[Any]) -> Parser[T]:
    """``p <* q``: run both, keep the result of `p`."""

    def run(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
        def ok(s: InputState, value: T) -> Step:
            def done(s2: InputState, _ignored: Any) -> Step:
                return lambda: on_ok(s2, value)

            return lambda: q(s, on_fail, done)

        return lambda: p(state, on_fail, ok)

    return _kind(p, q)(run, "skip_after")


def alt(p: Parser[Any], q: Parser[Any]) -> Parser[Any]:
    """``p <|> q``: try `p`; if it fails, run `q` from where `p` started.

    Chunks that `p` pulled from the prompt before failing are merged back in,
    so `q` sees them even though it rewinds to where it started.
    """

    def run(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
        def lose(s1: InputState, _context: tuple[str, ...], _message: str) -> Step:
            return lambda: q(add_stream(state, s1), on_fail, on_ok)

        def win(s1: InputState, value: Any) -> Step:
            return lambda: on_ok(s1.restore_added(state), value)

        return lambda: p(state.without_added(), lose, win)

    kind = TotalParser if isinstance(q, TotalParser) else Parser
    return kind(run, "alt")


def label(p: Parser[T], name: str) -> Parser[T]:
    """``p <?> name``: record `name` on the context of any failure of `p`."""

    def run(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
        def named(s: InputState, context: tuple[str, ...], message: str) -> Step:
            return lambda: on_fail(s, (*context, name), message)

        return lambda: p(state, named, on_ok)

    return _kind(p)(run, name)


def lazy(factory: Callable[[], Parser[T]]) -> Parser[T]:
    """Defer building a parser until it first runs; used for recursive grammars."""
    cell: list[Parser[T]] = []

    def run(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
        if not cell:
            cell.append(factory())
        return lambda: cell[0](state, on_fail, on_ok)

    return Parser(run, "lazy")


ParserGen = Generator[Parser[Any], Any, Any]


@overload
def do_parser(func: Callable[..., ParserGen], /) -> Callable[..., Parser[Any]]: ...


@overload
def do_parser(
    *, total: bool = False
) -> Callable[[Callable[..., ParserGen]], Callable[..., Parser[Any]]]: ...


def do_parser(func=None, /, *, total=False):
    """Build parsers from generator functions (do-notation).

    Each ``yield p`` runs the parser `p` and evaluates to its result; the
    generator's ``return`` value becomes the result of the whole parser. A
    failure of any yielded parser fails the whole parser. Calling the
    decorated function returns a new parser; every run of that parser starts
    a fresh generator, so a parser can be reused and backtracked over.

    ``@do_parser(total=True)`` marks the result as a :class:`TotalParser`.
    """

    def decorate(gen_func: Callable[..., ParserGen]) -> Callable[..., Parser[Any]]:
        kind = TotalParser if total else Parser

        @functools.wraps(gen_func)
        def factory(*args: Any, **kwargs: Any) -> Parser[Any]:
            def run(state: InputState, on_fail: OnFail, on_ok: OnOk) -> Step:
                gen = gen_func(*args, **kwargs)

                def step(s: InputState, sent: Any) -> Step:
                    try:
                        p = gen.send(sent)
                    except StopIteration as stop:
                        return lambda: on_ok(s, stop.value)
                    return p(s, on_fail, resume)

                def resume(s: InputState, value: Any) -> Step:
                    return lambda: step(s, value)

                return lambda: step(state, None)

            return kind(run, gen_func.__name__)

        return factory

    if func is not None:
        return decorate(func)
    return decorate
