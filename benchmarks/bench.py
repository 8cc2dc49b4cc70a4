from __future__ import annotations

import argparse
import platform
import re
import statistics
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import NamedTuple

import pydantic
from pydantic import BaseModel, TypeAdapter

from incparse import (
    StreamParser,
    char,
    do_parser,
    many,
    number,
    parse_iter,
    run_parser,
    sep_by,
    skip_spaces,
    take_while,
    take_while1,
    validated,
)


class BenchResult(NamedTuple):
    name: str
    iters: int
    seconds_per_iter: float


def _run_bench(
    name: str,
    fn: Callable[[], object],
    *,
    target_total_seconds: float = 0.25,
    repeats: int = 7,
    max_iters: int = 1_000_000,
) -> BenchResult:
    iters = 1
    while True:
        start = time.perf_counter()
        for _ in range(iters):
            fn()
        elapsed = time.perf_counter() - start
        if elapsed >= target_total_seconds:
            break
        if iters >= max_iters:
            break
        iters *= 2

    per_iter_samples: list[float] = []
    for _ in range(repeats):
        start = time.perf_counter()
        for _ in range(iters):
            fn()
        elapsed = time.perf_counter() - start
        per_iter_samples.append(elapsed / iters)

    return BenchResult(name=name, iters=iters, seconds_per_iter=statistics.median(per_iter_samples))


def _fmt_seconds(s: float) -> str:
    if s < 1e-6:
        return f"{s * 1e9:.1f} ns"
    if s < 1e-3:
        return f"{s * 1e6:.1f} µs"
    if s < 1:
        return f"{s * 1e3:.3f} ms"
    return f"{s:.3f} s"


def _print_table(results: list[BenchResult]) -> None:
    name_w = max(len(r.name) for r in results)
    it_w = max(len(str(r.iters)) for r in results)
    print(
        f"{'scenario'.ljust(name_w)}  {'iters'.rjust(it_w)}  {'median/op'.rjust(12)}  {'ops/s'.rjust(12)}"
    )
    print(f"{'-' * name_w}  {'-' * it_w}  {'-' * 12}  {'-' * 12}")
    for r in results:
        ops = 1.0 / r.seconds_per_iter if r.seconds_per_iter else float("inf")
        print(
            f"{r.name.ljust(name_w)}  {str(r.iters).rjust(it_w)}  {str(_fmt_seconds(r.seconds_per_iter)).rjust(12)}  {ops:12.0f}"
        )


@dataclass(frozen=True, slots=True)
class Payloads:
    header: str
    headers: str
    numbers: str
    long_word: str


def _payloads() -> Payloads:
    header = "Content-Type: application/json\n"
    headers = "".join(f"X-Header-{i}: value number {i}\n" for i in range(50))
    numbers = ",".join(str(i * 7) for i in range(200))
    long_word = "a" * 10_000 + "!"
    return Payloads(header=header, headers=headers, numbers=numbers, long_word=long_word)


def _chunks(s: str, size: int) -> list[str]:
    return [s[i : i + size] for i in range(0, len(s), size)]


@do_parser
def header_line():
    name = yield take_while1(lambda c: c not in ":\n")
    yield char(":")
    yield skip_spaces
    value = yield take_while(lambda c: c != "\n")
    yield char("\n")
    return name, value


class Reading(BaseModel):
    values: list[int]


_HEADER_RE = re.compile(r"([^:\n]+):\s*([^\n]*)\n")


def main() -> None:
    parser = argparse.ArgumentParser(description="Microbenchmarks for incparse.")
    parser.add_argument("--target-seconds", type=float, default=0.25)
    parser.add_argument("--repeats", type=int, default=7)
    args = parser.parse_args()

    payloads = _payloads()
    header = header_line()
    headers = many(header)
    numbers = sep_by(number, char(","))
    reading = validated(numbers.map(lambda values: {"values": values}), TypeAdapter(Reading))
    word = take_while(str.isalpha)

    header_chunks = _chunks(payloads.header, 3)
    headers_chunks = _chunks(payloads.headers, 64)
    word_chunks = _chunks(payloads.long_word, 100)

    def header_single_chunk() -> object:
        return run_parser(header, payloads.header).value

    def header_three_char_chunks() -> object:
        return parse_iter(header, header_chunks).value

    def header_stream_parser() -> object:
        sp = StreamParser(header)
        for ch in header_chunks:
            sp.feed(ch)
        return sp.finish().value

    def headers_single_chunk() -> object:
        return run_parser(headers, payloads.headers).value

    def headers_64_char_chunks() -> object:
        return parse_iter(headers, headers_chunks).value

    def regex_headers() -> object:
        return _HEADER_RE.findall(payloads.headers)

    def numbers_sep_by() -> object:
        return run_parser(numbers, payloads.numbers).value

    def numbers_validated() -> object:
        return run_parser(reading, payloads.numbers).value

    def str_split_numbers() -> object:
        return [int(n) for n in payloads.numbers.split(",")]

    def take_while_single_chunk() -> object:
        return run_parser(word, payloads.long_word).value

    def take_while_100_chunks() -> object:
        return parse_iter(word, word_chunks).value

    scenarios: list[tuple[str, Callable[[], object]]] = [
        ("header: single chunk", header_single_chunk),
        ("header: 3-char chunks (parse_iter)", header_three_char_chunks),
        ("header: 3-char chunks (StreamParser)", header_stream_parser),
        ("50 headers: single chunk", headers_single_chunk),
        ("50 headers: 64-char chunks", headers_64_char_chunks),
        ("50 headers: re.findall baseline", regex_headers),
        ("200 numbers: sep_by", numbers_sep_by),
        ("200 numbers: sep_by + pydantic model", numbers_validated),
        ("200 numbers: str.split baseline", str_split_numbers),
        ("take_while 10k: single chunk", take_while_single_chunk),
        ("take_while 10k: 100 chunks", take_while_100_chunks),
    ]

    results = [
        _run_bench(
            name,
            fn,
            target_total_seconds=args.target_seconds,
            repeats=args.repeats,
        )
        for name, fn in scenarios
    ]

    print("Environment")
    print(f"- python: {platform.python_version()} ({platform.python_implementation()})")
    print(f"- platform: {platform.platform()}")
    print(f"- pydantic: {pydantic.__version__}")
    print()

    _print_table(results)


if __name__ == "__main__":
    main()
