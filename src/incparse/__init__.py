from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("incparse")
except PackageNotFoundError:  # pragma: no cover - local source tree without installed metadata
    __version__ = "0.1.0"

from .api import feed, parse, parse_iter, parse_only, run_parser
from .combinators import (
    around,
    choice,
    look_ahead,
    many,
    many1,
    many_till,
    option,
    replicate,
    sep_by,
    sep_by1,
    skip_many,
    skip_many1,
    validated,
)
from .core import Parser, TotalParser, always, bind, do_parser, fail, fmap, label, lazy, pure
from .driver import ParseOptions, iter_prompt, run, suspend_prompt, trampoline
from .errors import (
    IncompleteInputError,
    NonTerminatingParserError,
    ParseError,
    PromptProtocolError,
    StepLimitExceeded,
)
from .lexical import (
    char,
    digit,
    eol,
    letter,
    not_char,
    number,
    skip_spaces,
    skip_whitespaces,
    space,
    spaces,
    whitespace,
    word,
)
from .primitives import demand_input, ensure, get, put, want_input
from .scan import (
    any_token,
    at_end,
    end_of_input,
    satisfy,
    skip,
    skip_while,
    string,
    take,
    take_rest,
    take_till,
    take_while,
    take_while1,
    take_with,
)
from .stream import InputState, add_stream
from .streaming import StreamParser
from .types import CompletionState, Failure, Partial, Result, Success

__all__ = [
    "CompletionState",
    "Failure",
    "IncompleteInputError",
    "InputState",
    "NonTerminatingParserError",
    "ParseError",
    "ParseOptions",
    "Parser",
    "Partial",
    "PromptProtocolError",
    "Result",
    "StepLimitExceeded",
    "StreamParser",
    "Success",
    "TotalParser",
    "add_stream",
    "always",
    "any_token",
    "around",
    "at_end",
    "bind",
    "char",
    "choice",
    "demand_input",
    "digit",
    "do_parser",
    "end_of_input",
    "eol",
    "ensure",
    "fail",
    "feed",
    "fmap",
    "get",
    "iter_prompt",
    "label",
    "lazy",
    "letter",
    "look_ahead",
    "many",
    "many1",
    "many_till",
    "not_char",
    "number",
    "option",
    "parse",
    "parse_iter",
    "parse_only",
    "pure",
    "put",
    "replicate",
    "run",
    "run_parser",
    "satisfy",
    "sep_by",
    "sep_by1",
    "skip",
    "skip_many",
    "skip_many1",
    "skip_spaces",
    "skip_while",
    "skip_whitespaces",
    "space",
    "spaces",
    "string",
    "suspend_prompt",
    "take",
    "take_rest",
    "take_till",
    "take_while",
    "take_while1",
    "take_with",
    "trampoline",
    "validated",
    "want_input",
    "whitespace",
    "word",
]
