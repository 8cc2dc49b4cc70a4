from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from .core import Parser
from .errors import PromptProtocolError, StepLimitExceeded
from .stream import InputState
from .types import (
    CompletionState,
    Failure,
    NewChunk,
    NoMoreInput,
    OnFail,
    OnOk,
    Partial,
    Prompt,
    Result,
    Step,
    Success,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ParseOptions:
    max_steps: int | None = None
    empty_chunk_is_eof: bool = True


def trampoline(step: Step, *, max_steps: int | None = None) -> Result:
    """Step thunks until a terminal result comes out.

    Parsers never call onward directly; they return a zero-argument thunk
    instead, so the native stack depth stays constant however long the input
    is or however many chunks it is split into.
    """
    if max_steps is None:
        while callable(step):
            step = step()
        return step
    steps = 0
    while callable(step):
        if steps >= max_steps:
            raise StepLimitExceeded(max_steps)
        step = step()
        steps += 1
    return step


def _succeed(state: InputState, value: Any) -> Success[Any]:
    return Success(value=value, remaining=state)


def _fail(state: InputState, context: tuple[str, ...], message: str) -> Failure:
    return Failure(remaining=state, context=context, message=message)


def suspend_prompt(options: ParseOptions | None = None) -> Prompt:
    """
    Prompt that suspends the whole parse.

    The trampoline stops on a :class:`Partial`; the caller later resumes it
    with ``Partial.feed(chunk)`` (or ``Partial.finish()``), which calls
    exactly one of the continuations and trampolines the rest of the parse.
    """
    opts = options or ParseOptions()

    def prompt(state: InputState, no_more_input: NoMoreInput, new_chunk: NewChunk) -> Partial:
        def resume(chunk: Sequence[Any] | None, final: bool) -> Result:
            if chunk:
                logger.debug("resuming parse with a chunk of %d tokens", len(chunk))
                step = new_chunk(chunk, final=final)
            elif final or opts.empty_chunk_is_eof:
                logger.debug("resuming parse at end of input")
                step = no_more_input()
            else:
                return prompt(state, no_more_input, new_chunk)
            return trampoline(step, max_steps=opts.max_steps)

        logger.debug("parse suspended with %d tokens buffered", state.available)
        return Partial(remaining=state, resume=resume)

    return prompt


def iter_prompt(chunks: Iterable[Sequence[Any]]) -> Prompt:
    """Prompt that pulls chunks synchronously from an iterable.

    Empty chunks are skipped; exhausting the iterable means no more input.
    """
    it = iter(chunks)

    def prompt(state: InputState, no_more_input: NoMoreInput, new_chunk: NewChunk) -> Step:
        for chunk in it:
            if not isinstance(chunk, Sequence):
                raise PromptProtocolError(
                    f"chunk source yielded {type(chunk).__name__}, expected a sequence"
                )
            if chunk:
                return new_chunk(chunk)
        logger.debug("chunk source exhausted")
        return no_more_input()

    return prompt


def run(
    parser: Parser[Any],
    data: Sequence[Any],
    more: CompletionState = CompletionState.COMPLETE,
    on_fail: OnFail | None = None,
    on_ok: OnOk | None = None,
    *,
    prompt: Prompt | None = None,
    options: ParseOptions | None = None,
) -> Result:
    """
    Run `parser` over `data` and trampoline it to a terminal result.

    With ``more=INCOMPLETE`` the parser may ask for more input through
    `prompt` (by default :func:`suspend_prompt`, which yields a ``Partial``).
    `on_fail` / `on_ok` replace the top-level continuations; they must
    return a terminal result.
    """
    opts = options or ParseOptions()
    state = InputState.initial(data, more, prompt or suspend_prompt(opts))
    step = parser(state, on_fail or _fail, on_ok or _succeed)
    return trampoline(step, max_steps=opts.max_steps)
