from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .errors import IncompleteInputError, ParseError

if TYPE_CHECKING:
    from .stream import InputState

T = TypeVar("T")


class CompletionState(str, Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"


def merge_completion(a: CompletionState, b: CompletionState) -> CompletionState:
    """Once either side has seen the end of the stream, the merge has too."""
    if a is CompletionState.COMPLETE or b is CompletionState.COMPLETE:
        return CompletionState.COMPLETE
    return CompletionState.INCOMPLETE


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    value: T
    remaining: InputState

    @property
    def remainder(self) -> Sequence[Any]:
        return self.remaining.remaining

    @property
    def is_done(self) -> bool:
        return True

    @property
    def is_failure(self) -> bool:
        return False

    @property
    def is_partial(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Failure:
    """A parse attempt that produced no result.

    ``context`` lists the labels the failure unwound through, innermost
    first. ``remaining`` is the input at the point of failure; it still
    holds every token that was not consumed before the failing branch ran.
    """

    remaining: InputState
    context: tuple[str, ...]
    message: str

    @property
    def remainder(self) -> Sequence[Any]:
        return self.remaining.remaining

    @property
    def is_done(self) -> bool:
        return False

    @property
    def is_failure(self) -> bool:
        return True

    @property
    def is_partial(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise ParseError(self)

    def __str__(self) -> str:
        if not self.context:
            return self.message
        return f"{self.message} (context: {' < '.join(self.context)})"


@dataclass(frozen=True, slots=True)
class Partial:
    """A parse suspended inside the prompt, waiting for the caller's next chunk.

    A partial result can be resumed exactly once, either with :meth:`feed` or
    :meth:`finish`; the result of resuming is a new ``Success``, ``Failure`` or
    ``Partial``.
    """

    remaining: InputState
    resume: Callable[[Sequence[Any] | None, bool], Result] = field(repr=False, compare=False)

    @property
    def remainder(self) -> Sequence[Any]:
        return self.remaining.remaining

    @property
    def is_done(self) -> bool:
        return False

    @property
    def is_failure(self) -> bool:
        return False

    @property
    def is_partial(self) -> bool:
        return True

    def feed(self, chunk: Sequence[Any], *, final: bool = False) -> Result:
        return self.resume(chunk, final)

    def finish(self) -> Result:
        return self.resume(None, True)

    def unwrap(self) -> Any:
        raise IncompleteInputError(self)


Result = Success[Any] | Failure | Partial

# Continuation-passing plumbing. A thunk is any zero-argument callable; the
# terminal results above are never callable, which is how the trampoline
# tells the two apart.
Thunk = Callable[[], Any]
Step = Thunk | Result
OnFail = Callable[["InputState", tuple[str, ...], str], Step]
OnOk = Callable[["InputState", Any], Step]
NoMoreInput = Callable[[], Step]
NewChunk = Callable[..., Step]
Prompt = Callable[["InputState", NoMoreInput, NewChunk], Step]
