"""Count the most frequent words of a text with a TopK sketch."""

from __future__ import annotations

import argparse
import re
import sys
from collections.abc import Iterator, Sequence

from heavykeeper.topk import TopK

MAX_WORD_LEN = 64

_WORD = re.compile(rb"[A-Za-z]+")


def words(data: bytes) -> Iterator[str]:
    """Yield the lower-cased ASCII alphabetic words of ``data``.

    Words longer than ``MAX_WORD_LEN`` letters are skipped.
    """
    for match in _WORD.finditer(data):
        word = match.group()
        if len(word) <= MAX_WORD_LEN:
            yield word.lower().decode("ascii")


def count_words(data: bytes, topk: TopK[str]) -> None:
    """Add every word of ``data`` to ``topk`` once."""
    for word in words(data):
        topk.add(word, 1)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Print the most frequent words of a text and their estimated counts."
    )
    parser.add_argument("-k", dest="k", type=int, required=True, help="number of words to report")
    parser.add_argument("-w", dest="width", type=int, default=8, help="buckets per row")
    parser.add_argument("-d", dest="depth", type=int, default=2048, help="number of rows")
    parser.add_argument("-y", dest="decay", type=float, default=0.9, help="decay base")
    parser.add_argument("-f", dest="input", default=None, help="input file (default: stdin)")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Read text from a file or stdin and print the top words with their counts."""
    args = _parser().parse_args(argv)
    topk: TopK[str] = TopK(args.k, args.width, args.depth, args.decay)

    if args.input is None:
        for line in sys.stdin.buffer:
            count_words(line, topk)
    else:
        try:
            with open(args.input, "rb") as handle:
                data = handle.read()
        except OSError as error:
            print(f"Error: {error}", file=sys.stderr)
            return 1
        count_words(data, topk)

    for node in topk.list():
        print(f"{node.item} {node.count}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())