"""Exceptions raised at the boundary between the engine and Python callers.

Parse failures themselves are values (:class:`~incparse.types.Failure`) and
travel through failure continuations. The exceptions below are raised only
when a caller asks for a plain value, or misuses the engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import Failure, Partial


class ParseError(Exception):
    """Raised when a caller unwraps a failed parse."""

    def __init__(self, failure: Failure) -> None:
        super().__init__(str(failure))
        self.failure = failure

    @property
    def context(self) -> tuple[str, ...]:
        return self.failure.context

    @property
    def message(self) -> str:
        return self.failure.message


class IncompleteInputError(Exception):
    """Raised when a caller unwraps a parse that is still waiting for input."""

    def __init__(self, partial: Partial) -> None:
        super().__init__("parser is suspended waiting for more input")
        self.partial = partial


class PromptProtocolError(RuntimeError):
    """A prompt callback broke the two-continuation contract."""


class StepLimitExceeded(RuntimeError):
    def __init__(self, max_steps: int) -> None:
        super().__init__(f"trampoline step limit ({max_steps}) exceeded")
        self.max_steps = max_steps


class NonTerminatingParserError(TypeError):
    """A parser that never fails was handed to a repeat-until-failure combinator."""
