"""incparse demo: parse input that arrives in pieces."""

from pydantic import BaseModel

import incparse as ip

# ── Define a grammar ─────────────────────────────────────────────────


@ip.do_parser
def header():
    name = yield ip.take_while1(lambda c: c not in ":\n")
    yield ip.char(":")
    yield ip.skip_spaces
    value = yield ip.take_while(lambda c: c != "\n")
    yield ip.eol
    return name, value


headers = ip.many(header())


# ── 1. Parse complete input ──────────────────────────────────────────

result = ip.run_parser(headers, "Host: example.org\nAccept: */*\n")
print("1) run_parser: all input up front")
print(f"   {result.value!r}")
print()


# ── 2. Feed chunks as they arrive ────────────────────────────────────
#
# With incomplete input the parser suspends instead of failing, and
# picks up exactly where it stopped when the next chunk comes in.

print("2) parse + feed: suspend and resume")
result = ip.parse(header(), "Content-Ty")
for chunk in ["pe: text/", "plain\n"]:
    print(f"   {type(result).__name__:8s} buffered={result.remainder!r}")
    result = result.feed(chunk)
print(f"   {type(result).__name__:8s} value={result.value!r}")
print()


# ── 3. Backtracking across chunk boundaries ──────────────────────────
#
# The first alternative pulls "D" in before failing. The second one
# still sees it.

method = ip.string("GET") | ip.string("GEM") | ip.string("GED")
result = ip.parse_iter(method, ["G", "E", "D"])
print("3) alternatives keep every chunk pulled by a failed branch")
print(f"   {result.value!r}")
print()


# ── 4. Failures carry their labels ───────────────────────────────────

version = (ip.string("HTTP/") >> ip.number).label("version")
try:
    ip.parse_only(version, "HTTP/x")
except ip.ParseError as exc:
    print("4) parse_only: labeled failure")
    print(f"   message={exc.message!r} context={exc.context!r}")
print()


# ── 5. Validate parsed values with pydantic ──────────────────────────


class Reading(BaseModel):
    sensor: str
    values: list[int]


@ip.do_parser
def reading():
    sensor = yield ip.word
    yield ip.char("=")
    values = yield ip.sep_by(ip.number, ip.char(","))
    return {"sensor": sensor, "values": values}


result = ip.parse_iter(ip.validated(reading(), Reading), ["temp=1", "9,2", "0,21"])
print("5) validated: parsed dict → Reading")
print(f"   {result.value!r}")
print()


# ── 6. StreamParser: push chunks from an event loop or socket ────────

stream = ip.StreamParser(headers)
print("6) StreamParser: push-style feeding")
for chunk in ["Ho", "st: a\nX-", "Id: 7\n"]:
    stream.feed(chunk)
    print(f"   feed {chunk!r:14s} done={stream.done}")
final = stream.finish()
print(f"   final: {final.value!r}")
