from __future__ import annotations

from incparse.api import parse, run_parser
from incparse.lexical import (
    char,
    digit,
    eol,
    letter,
    not_char,
    number,
    skip_spaces,
    skip_whitespaces,
    spaces,
    whitespace,
    word,
)
from incparse.types import Failure, Partial


def feed_all(parser, chunks):
    result = parse(parser, chunks[0])
    for chunk in chunks[1:]:
        if isinstance(result, Partial):
            result = result.feed(chunk)
    if isinstance(result, Partial):
        result = result.finish()
    return result


def test_char():
    assert run_parser(char("a"), "ab").value == "a"


def test_char_failure_is_labeled():
    result = run_parser(char("a"), "b")
    assert isinstance(result, Failure)
    assert result.context == ("failed parser char: a",)
    assert result.message == "satisfy?"


def test_char_from_set():
    sign = char({"+", "-"})
    assert run_parser(sign, "-1").value == "-"
    assert isinstance(run_parser(sign, "1"), Failure)


def test_not_char():
    assert run_parser(not_char('"'), 'a"').value == "a"
    assert isinstance(run_parser(not_char('"'), '"a'), Failure)
    assert run_parser(not_char({"{", "}"}), "x").value == "x"


def test_whitespace_and_spaces():
    assert run_parser(whitespace, "\tx").value == "\t"
    assert run_parser(spaces, "   x").value == [" ", " ", " "]
    assert run_parser(spaces, "x").value == []


def test_skip_spaces_and_whitespaces():
    result = run_parser(skip_spaces, "  \tx")
    assert result.remainder == "\tx"
    result = run_parser(skip_whitespaces, "  \t\nx")
    assert result.remainder == "x"


def test_letter_word_digit():
    assert run_parser(letter, "q1").value == "q"
    assert isinstance(run_parser(letter, "1q"), Failure)
    result = run_parser(word, "hello world")
    assert result.value == "hello"
    assert result.remainder == " world"
    assert run_parser(digit, "7x").value == "7"


def test_word_across_chunks():
    result = feed_all(word, ["he", "llo", " x"])
    assert result.value == "hello"


def test_number_integer_and_float():
    assert run_parser(number, "42;").value == 42
    assert isinstance(run_parser(number, "42").value, int)
    assert run_parser(number, "3.25").value == 3.25


def test_number_across_chunks():
    result = feed_all(number, ["1", "2.", "5"])
    assert result.value == 12.5
    assert result.remainder == ""


def test_number_failure_is_labeled():
    result = run_parser(number, "x")
    assert isinstance(result, Failure)
    assert result.context == ("number",)
    assert result.remainder == "x"


def test_eol():
    assert run_parser(eol, "\nx").remainder == "x"
    result = run_parser(eol, "\r\nx")
    assert result.value is None
    assert result.remainder == "x"
    assert isinstance(run_parser(eol, "x"), Failure)


def test_eol_split_across_chunks():
    result = feed_all(eol, ["\r", "\n"])
    assert result.value is None
    assert result.remainder == ""
