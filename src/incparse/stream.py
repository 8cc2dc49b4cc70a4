from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, field, replace
from itertools import chain
from typing import Any

from .types import CompletionState, Prompt, merge_completion

# Input is kept as an immutable buffer plus an offset into it. Consuming
# tokens only moves the offset, so every earlier InputState stays a valid
# snapshot to rewind to. New chunks produce a new buffer holding the
# unconsumed tail followed by the chunk.


def freeze(data: Sequence[Any]) -> Sequence[Any]:
    if isinstance(data, (str, bytes, tuple)):
        return data
    if isinstance(data, bytearray):
        return bytes(data)
    return tuple(data)


def concat(a: Sequence[Any], b: Sequence[Any]) -> Sequence[Any]:
    if not b:
        return a
    if not a:
        return freeze(b)
    if isinstance(a, str) and isinstance(b, str):
        return a + b
    if isinstance(a, bytes) and isinstance(b, (bytes, bytearray)):
        return a + bytes(b)
    return tuple(a) + tuple(b)


def join(fragments: Iterable[Sequence[Any]], empty: Sequence[Any]) -> Sequence[Any]:
    """Concatenate fragments in order, keeping the token type of the input."""
    parts = [f for f in fragments if f]
    if not parts:
        return empty
    if len(parts) == 1:
        return parts[0]
    if all(isinstance(p, str) for p in parts):
        return "".join(parts)
    if all(isinstance(p, bytes) for p in parts):
        return b"".join(parts)
    return tuple(chain.from_iterable(parts))


class ChunkLog:
    """
    Persistent log of delivered chunks, oldest first.

    Appending a chunk and joining two logs are O(1): each node stands for
    ``older + [chunk] + newer``. Iteration walks the nodes with an explicit
    stack, so long logs do not hit the recursion limit.
    """

    __slots__ = ("older", "chunk", "newer", "size")

    def __init__(
        self,
        older: ChunkLog | None = None,
        chunk: Sequence[Any] | None = None,
        newer: ChunkLog | None = None,
    ) -> None:
        self.older = older
        self.chunk = chunk
        self.newer = newer
        self.size = (
            (older.size if older else 0) + (chunk is not None) + (newer.size if newer else 0)
        )

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[Sequence[Any]]:
        stack: list[ChunkLog | tuple[Sequence[Any]]] = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, tuple):
                yield node[0]
                continue
            if node.newer:
                stack.append(node.newer)
            if node.chunk is not None:
                stack.append((node.chunk,))
            if node.older:
                stack.append(node.older)

    def __repr__(self) -> str:
        return f"ChunkLog({list(self)!r})"

    def append(self, chunk: Sequence[Any]) -> ChunkLog:
        return ChunkLog(self if self.size else None, chunk)

    def extend(self, newer: ChunkLog) -> ChunkLog:
        if not newer.size:
            return self
        if not self.size:
            return newer
        return ChunkLog(self, None, newer)


EMPTY_LOG = ChunkLog()


@dataclass(frozen=True, slots=True)
class InputState:
    """
    Immutable snapshot of the unconsumed input.

    - `buffer` / `pos`: the tokens not yet consumed are ``buffer[pos:]``
    - `more`: whether the prompt may still deliver chunks
    - `added`: chunks delivered since the innermost enclosing alternative
      started (``None`` when no alternative is pending)
    - `prompt`: the callback used to ask the caller for more input
    """

    buffer: Sequence[Any]
    pos: int = 0
    more: CompletionState = CompletionState.INCOMPLETE
    added: ChunkLog | None = None
    prompt: Prompt | None = field(default=None, compare=False, repr=False)

    @classmethod
    def initial(
        cls,
        data: Sequence[Any],
        more: CompletionState = CompletionState.INCOMPLETE,
        prompt: Prompt | None = None,
    ) -> InputState:
        return cls(buffer=freeze(data), more=more, prompt=prompt)

    @property
    def remaining(self) -> Sequence[Any]:
        if self.pos == 0:
            return self.buffer
        return self.buffer[self.pos :]

    @property
    def available(self) -> int:
        return len(self.buffer) - self.pos

    @property
    def is_complete(self) -> bool:
        return self.more is CompletionState.COMPLETE

    def empty(self) -> Sequence[Any]:
        return self.buffer[:0]

    def peek(self) -> Any:
        return self.buffer[self.pos]

    def slice(self, n: int) -> Sequence[Any]:
        return self.buffer[self.pos : self.pos + n]

    def span(self, pred: Callable[[Any], bool]) -> int:
        """Number of leading unconsumed tokens that satisfy `pred`."""
        buf = self.buffer
        end = len(buf)
        i = self.pos
        while i < end and pred(buf[i]):
            i += 1
        return i - self.pos

    def advance(self, n: int) -> InputState:
        if n == 0:
            return self
        return replace(self, pos=self.pos + n)

    def with_remaining(self, data: Sequence[Any]) -> InputState:
        return replace(self, buffer=freeze(data), pos=0)

    def with_chunk(self, chunk: Sequence[Any], *, final: bool = False) -> InputState:
        chunk = freeze(chunk)
        return replace(
            self,
            buffer=concat(self.remaining, chunk),
            pos=0,
            added=None if self.added is None else self.added.append(chunk),
            more=CompletionState.COMPLETE if final else self.more,
        )

    def completed(self) -> InputState:
        if self.is_complete:
            return self
        return replace(self, more=CompletionState.COMPLETE)

    def without_added(self) -> InputState:
        return replace(self, added=EMPTY_LOG)

    def restore_added(self, outer: InputState) -> InputState:
        """Re-attach the chunk history of `outer` once an alternative succeeds."""
        if outer.added is None:
            return replace(self, added=None)
        return replace(self, added=outer.added.extend(self.added or EMPTY_LOG))


def add_stream(before: InputState, after: InputState) -> InputState:
    """
    Merge a snapshot with the state a speculative branch ended in.

    `after` must come from running a parser on ``before.without_added()``.
    The result resumes at `before`'s position and also sees every chunk the
    branch pulled from the prompt, so nothing is lost or read twice.
    """
    more = merge_completion(before.more, after.more)
    if not after.added:
        return before if more is before.more else replace(before, more=more)
    buffer = join([before.remaining, *after.added], before.empty())
    added = None if before.added is None else before.added.extend(after.added)
    return replace(before, buffer=buffer, pos=0, more=more, added=added)
