from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from .api import feed, parse
from .core import Parser
from .driver import ParseOptions, run
from .types import CompletionState, Partial, Result

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StreamParser(Generic[T]):
    """
    Incremental parser for drivers that decide when input arrives.

    - callers feed chunks as they come in (e.g. from a paused socket)
    - each `feed()` resumes the suspended parse exactly where it stopped
    - `finish()` signals that no more input will arrive

    Chunks fed after the parse has finished are appended to the unconsumed
    remainder of a success and ignored after a failure.
    An empty chunk ends the input whether or not the parse has started,
    unless ``options.empty_chunk_is_eof`` is off.
    """

    parser: Parser[T]
    options: ParseOptions = field(default_factory=ParseOptions)
    _result: Result | None = None

    def feed(self, chunk: Sequence[Any]) -> Result:
        if self._result is None:
            if not chunk and self.options.empty_chunk_is_eof:
                return self.finish()
            self._result = parse(self.parser, chunk, options=self.options)
        else:
            self._result = feed(self._result, chunk)
        return self._result

    def finish(self) -> Result:
        if self._result is None:
            logger.debug("finishing a stream that never received input")
            self._result = run(self.parser, (), CompletionState.COMPLETE, options=self.options)
        elif isinstance(self._result, Partial):
            self._result = self._result.finish()
        return self._result

    @property
    def result(self) -> Result | None:
        return self._result

    @property
    def done(self) -> bool:
        """True once the parse has succeeded or failed."""
        return self._result is not None and not isinstance(self._result, Partial)

    @property
    def value(self) -> T:
        """The parsed value; raises ``ParseError`` or ``IncompleteInputError`` otherwise."""
        result = self.finish() if self._result is None else self._result
        return result.unwrap()
