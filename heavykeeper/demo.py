"""Small demonstration of counting items with a TopK sketch."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from heavykeeper.topk import TopK


def main(argv: Sequence[str] | None = None) -> int:
    """Add a few items to a sketch and print what it reports."""
    parser = argparse.ArgumentParser(
        description="Show the top items, a count and a membership query from a small sketch."
    )
    parser.parse_args(argv)

    # k=10 tracked items, 1000 buckets per row, 4 rows, decay 0.9.
    topk: TopK[str] = TopK(10, 1000, 4, 0.9)

    topk.add("frequent item", 5)
    topk.add("less frequent item", 3)
    topk.add("rare item", 1)

    print("Top items and their frequencies:")
    for node in topk.list():
        print(f"{node.item}: {node.count}")

    item = "frequent item"
    print(f"\nCount for '{item}': {topk.count(item)}")
    answer = "yes" if topk.query(item) else "no"
    print(f"Is '{item}' in top-k? {answer}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())