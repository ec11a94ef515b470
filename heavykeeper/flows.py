"""Find the heaviest network flows in fixed-size binary trace records."""

from __future__ import annotations

import argparse
import sys
import time
from collections import Counter
from collections.abc import Iterator, Sequence
from pathlib import Path

from heavykeeper.topk import TopK

KEY_SIZE = 13
TRACE_FILES = 11
DEFAULT_MAX_ITEMS = 40 * 1_000_000


def _records(path: str | Path) -> Iterator[bytes]:
    """Yield every whole ``KEY_SIZE``-byte record of a file; a trailing fragment is ignored."""
    with open(path, "rb") as handle:
        while len(record := handle.read(KEY_SIZE)) == KEY_SIZE:
            yield record


def _read_paths(paths: Sequence[str], max_items: int) -> tuple[list[bytes], Counter[bytes]]:
    keys: list[bytes] = []
    sizes: Counter[bytes] = Counter()
    for path in paths:
        print(f"Start reading {path}")
        for record in _records(path):
            keys.append(record)
            sizes[record] += 1
            if len(keys) >= max_items:
                raise ValueError(
                    f"The dataset has more than {max_items} items, "
                    "set a larger value for max_item_num"
                )
        print(
            f"Finished reading {path} ({len(keys)} items), "
            f"the dataset now has {len(keys)} items"
        )
    return keys, sizes


def read_trace(path: str | Path, max_items: int) -> tuple[list[bytes], Counter[bytes]]:
    """Read one trace file, returning its keys in order and the size of each flow.

    Raises ValueError once ``max_items`` records have been read.
    """
    return _read_paths([str(path)], max_items)


def read_traces(prefix: str, max_items: int) -> tuple[list[bytes], Counter[bytes]]:
    """Read ``<prefix>0.dat`` to ``<prefix>10.dat`` as one dataset."""
    paths = [f"{prefix}{index}.dat" for index in range(TRACE_FILES)]
    return _read_paths(paths, max_items)


def format_flow(key: bytes, count: int) -> str:
    """Describe a flow key: protocol, source and destination address and port, count."""
    src_ip = ".".join(str(octet) for octet in key[0:4])
    src_port = int.from_bytes(key[4:6], "big")
    dst_ip = ".".join(str(octet) for octet in key[6:10])
    dst_port = int.from_bytes(key[10:12], "big")
    protocol = key[12]
    return f"{protocol} {src_ip}:{src_port} -> {dst_ip}:{dst_port} {count}"


def main(argv: Sequence[str] | None = None) -> int:
    """Load the trace files, time insertion into a sketch and print the top flows."""
    parser = argparse.ArgumentParser(description="Report the heaviest flows of binary traces.")
    parser.add_argument("prefix", nargs="?", default="data/", help="trace file prefix")
    parser.add_argument("--max-items", type=int, default=DEFAULT_MAX_ITEMS)
    args = parser.parse_args(argv)

    try:
        keys, sizes = read_traces(args.prefix, args.max_items)
    except (OSError, ValueError) as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    print(f"number of items: {len(keys)}")
    print(f"number of flows: {len(sizes)}")

    topk: TopK[bytes] = TopK(1000, 21124, 2, 0.95)
    start = time.perf_counter()
    for key in keys:
        topk.add(key, 1)
    seconds = time.perf_counter() - start

    print(f"use {seconds} seconds")
    if seconds > 0 and keys:
        throughput = (len(keys) / 1_000_000.0) / seconds
        print(
            f"throughput: {throughput} Mpps, "
            f"each insert operation uses {1_000.0 / throughput} ns"
        )

    for node in topk.list():
        print(format_flow(node.item, node.count))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())