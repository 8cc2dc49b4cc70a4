from __future__ import annotations

import logging

import pytest

import incparse
from incparse.api import feed, parse, parse_iter, parse_only, run_parser
from incparse.combinators import many, sep_by
from incparse.core import do_parser
from incparse.driver import ParseOptions
from incparse.errors import IncompleteInputError, ParseError
from incparse.lexical import char, number, skip_spaces
from incparse.scan import end_of_input, string, take, take_while, take_while1
from incparse.streaming import StreamParser
from incparse.types import CompletionState, Failure, Partial, Success


@do_parser
def header():
    name = yield take_while1(lambda c: c not in ":\r\n")
    yield char(":")
    yield skip_spaces
    value = yield take_while(lambda c: c != "\n")
    yield char("\n")
    return name, value


# ===================================================================
# run_parser / parse_only
# ===================================================================


class TestRunParser:
    def test_complete_input_never_partial(self):
        result = run_parser(take(10), "short")
        assert isinstance(result, Failure)

    def test_incomplete_input_can_be_partial(self):
        result = run_parser(take(10), "short", CompletionState.INCOMPLETE)
        assert isinstance(result, Partial)
        assert result.remainder == "short"

    def test_result_flags(self):
        ok = run_parser(take(1), "a")
        assert ok.is_done and not ok.is_failure and not ok.is_partial
        bad = run_parser(take(2), "a")
        assert bad.is_failure and not bad.is_done
        waiting = parse(take(2), "a")
        assert waiting.is_partial


class TestParseOnly:
    def test_returns_value(self):
        assert parse_only(sep_by(number, char(",")), "1,2,3") == [1, 2, 3]

    def test_raises_parse_error(self):
        with pytest.raises(ParseError) as excinfo:
            parse_only(string("GET").label("method"), "PUT")
        assert excinfo.value.context == ("method",)
        assert excinfo.value.message == "take-with"
        assert excinfo.value.failure.remainder == "PUT"
        assert "method" in str(excinfo.value)

    def test_unwrap_partial_raises_incomplete(self):
        partial = parse(take(3), "a")
        with pytest.raises(IncompleteInputError) as excinfo:
            partial.unwrap()
        assert excinfo.value.partial is partial
        assert not isinstance(excinfo.value, ParseError)


# ===================================================================
# feeding chunks
# ===================================================================


class TestFeed:
    def test_header_in_pieces(self):
        result = parse(header(), "Content-Ty")
        result = feed(result, "pe: text/")
        result = feed(result, "plain\nrest")
        assert isinstance(result, Success)
        assert result.value == ("Content-Type", "text/plain")
        assert result.remainder == "rest"

    def test_feed_after_success_extends_remainder(self):
        result = parse(take(2), "abc")
        assert isinstance(result, Success)
        result = feed(result, "de")
        assert result.value == "ab"
        assert result.remainder == "cde"

    def test_feed_after_failure_is_unchanged(self):
        result = parse(string("x"), "y")
        assert feed(result, "more") is result

    def test_feed_empty_chunk_to_success_is_noop(self):
        result = parse(take(1), "ab")
        assert feed(result, "") is result

    def test_finish_resolves_pending_parse(self):
        result = parse(take_while(str.isdigit), "12")
        assert isinstance(result, Partial)
        result = result.finish()
        assert result.value == "12"

    def test_final_flag(self):
        result = feed(parse(take_while(str.isdigit), "1"), "2", final=True)
        assert isinstance(result, Success)
        assert result.value == "12"


# ===================================================================
# parse_iter
# ===================================================================


def test_parse_iter_pulls_lazily():
    pulled = []

    def chunks():
        for piece in ["ab", "cd", "ef", "gh"]:
            pulled.append(piece)
            yield piece

    result = parse_iter(take(3), chunks())
    assert result.value == "abc"
    assert pulled == ["ab", "cd"]
    assert result.remainder == "d"


def test_parse_iter_exhausted_source_ends_input():
    result = parse_iter(many(char("a")) << end_of_input, ["aa", "a"])
    assert result.value == ["a", "a", "a"]


def test_parse_iter_over_bytes():
    result = parse_iter(take_while(lambda b: b != ord(" ")), [b"GE", b"T /"])
    assert result.value == b"GET"
    assert result.remainder == b" /"


# ===================================================================
# StreamParser
# ===================================================================


class TestStreamParser:
    def test_feed_until_done(self):
        stream = StreamParser(header())
        assert not stream.done
        stream.feed("Host")
        assert not stream.done
        stream.feed(": example.org\n")
        assert stream.done
        assert stream.value == ("Host", "example.org")

    def test_finish_without_input(self):
        stream = StreamParser(take_while(str.isdigit))
        result = stream.finish()
        assert isinstance(result, Success)
        # no chunk ever arrived, so the empty result is an empty tuple
        assert stream.value == ()

    def test_finish_completes_suspended_parse(self):
        stream = StreamParser(many(number << char(";")))
        stream.feed("1;2")
        stream.feed(";3")
        result = stream.finish()
        assert isinstance(result, Success)
        assert result.value == [1, 2]
        assert result.remainder == "3"

    def test_value_raises_on_failure(self):
        stream = StreamParser(string("abc"))
        stream.feed("abx")
        assert stream.done
        with pytest.raises(ParseError):
            _ = stream.value

    def test_value_finishes_unfed_stream(self):
        stream = StreamParser(take(1))
        with pytest.raises(ParseError):
            _ = stream.value
        assert stream.done

    def test_chunks_after_success_join_remainder(self):
        stream = StreamParser(take(1))
        stream.feed("ab")
        stream.feed("cd")
        assert stream.result.remainder == "bcd"

    def test_empty_first_chunk_ends_input(self):
        stream = StreamParser(take(1))
        result = stream.feed("")
        assert isinstance(result, Failure)
        assert result.message == "not enough input"
        assert stream.done

    def test_empty_chunk_ends_input_after_start(self):
        stream = StreamParser(take(2))
        stream.feed("a")
        result = stream.feed("")
        assert isinstance(result, Failure)
        assert stream.done

    def test_empty_chunks_ignored_when_not_eof(self):
        stream = StreamParser(take(2), ParseOptions(empty_chunk_is_eof=False))
        assert isinstance(stream.feed(""), Partial)
        assert isinstance(stream.feed("a"), Partial)
        assert isinstance(stream.feed(""), Partial)
        assert stream.feed("b").value == "ab"

    def test_value_of_finished_stream(self):
        stream = StreamParser(take(2))
        stream.feed("xyz")
        assert stream.value == "xy"

    def test_finish_logs_when_empty(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="incparse.streaming"):
            StreamParser(take(1)).finish()
        assert any("never received input" in r.getMessage() for r in caplog.records)


def test_public_names_exported():
    for name in incparse.__all__:
        assert hasattr(incparse, name), name
    assert incparse.__version__
