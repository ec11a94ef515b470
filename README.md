# heavykeeper

This package implements a HeavyKeeper sketch. The sketch finds the top-k most
frequent items ("elephant flows") in a stream. Its precision is high and its
memory footprint is small and fixed.

The sketch holds `depth` rows of `width` counting buckets. Each item is hashed
into one bucket in every row. When two items share a bucket, they decay each
other's counts. The chance of a decay falls as a count grows, so large flows
survive and small ones are pushed out. A bounded min-heap holds the current
top `k` items and their estimated counts.

The package needs only the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Usage

```python
from heavykeeper.topk import TopK

# k=10 items to track, width=1000 buckets per row, depth=4 rows, decay=0.9
topk = TopK(10, 1000, 4, 0.9)

topk.add("frequent item", 5)
topk.add("less frequent item", 3)
topk.add("rare item", 1)

for node in topk.list():
    print(node.item, node.count)

print(topk.count("frequent item"))   # estimated count, 0 if unknown
print(topk.query("frequent item"))   # True if tracked or present in the sketch
```

### Items

Items may be any hashable value. Hashing is deterministic and depends on the
seed. Strings, bytes, integers, floats, booleans, tuples and frozensets are
encoded by their value. Any other type is encoded by its `repr()`.

### Constructor

`TopK(k, width, depth, decay, seed=12345, rng=None)`

- `seed` sets the item hash.
- `rng` is the random source used for decay. It can be any object with a
  `getrandbits(k)` method, such as a `random.Random` instance.
- When `rng` is not given, a `random.Random(0)` is used. Two sketches built
  with the same arguments and fed the same stream therefore produce the same
  results.

### Methods

- `add(item, increment)` records `increment` occurrences of `item`.
- `count(item)` returns the count held in the top-k list. If the item is not in
  the list, it returns the smallest matching bucket count, or 0 when no bucket
  matches.
- `bucket_count(item)` looks only at the sketch and ignores the top-k list.
- `query(item)` returns `True` if the item is in the top-k list or has a
  matching bucket.
- `list()` returns `Node(item, count)` objects. They are ordered from the
  highest count to the lowest, and ties keep the order in which items entered
  the list.
- `debug()` prints:
  - the parameters
  - the decay thresholds
  - the non-empty buckets
  - the top-k list

### Merging sketches

Two sketches with the same `k`, `width`, `depth`, `decay` and seed can be
merged. This is useful after counting separate shards of a stream:

```python
a.merge(b)
```

Merging works as follows:

- Buckets with equal fingerprints have their counts added.
- Empty buckets in `a` take the bucket from `b`.
- Every item in `b`'s top-k list is added to `a`'s list with its counts summed.

If the parameters differ, `merge` raises one of these errors:

- `IncompatibleWidthError`
- `IncompatibleDepthError`
- `IncompatibleDecayError`
- `IncompatibleTopItemsError`

All four are subclasses of `heavykeeper.errors.HeavyKeeperError`, which is a
`ValueError`. Each error carries both values as attributes, for example
`self_width` and `other_width`.

### Lower-level pieces

- `heavykeeper.queue.TopKQueue` is the bounded min-heap used for the top-k
  list. It provides:
  - `upsert`
  - `get`
  - `min_count`
  - `is_full`
  - `len()`
  - `in`
  - iteration in descending count order
- `heavykeeper.hashing.hash_item(item, seed)` gives the seeded 64-bit hash.
- `HashComposer` derives a bucket index for each row from that hash.
- `heavykeeper.topk.precompute_decay_thresholds(decay, num_entries)` builds the
  decay lookup table.

## Command-line tools

### heavykeeper-demo

```
heavykeeper-demo
```

Adds a few items to a small sketch and prints three things: the top items, one
count and one membership query.

### heavykeeper-wordcount

```
heavykeeper-wordcount -k 10 -f book.txt
```

Prints the most frequent words with their estimated counts, one per line. A
word is a run of ASCII letters, lower-cased. Runs longer than 64 letters are
skipped.

Options:

| Option | Meaning | Default |
|--------|---------|---------|
| `-k` | number of words to report | required |
| `-w` | buckets per row | 8 |
| `-d` | number of rows | 2048 |
| `-y` | decay | 0.9 |
| `-f` | input file | standard input |

If the file cannot be opened, the command prints an error and exits with
status 1.

### heavykeeper-flows

```
heavykeeper-flows [prefix] [--max-items N]
```

Reads the trace files `<prefix>0.dat` to `<prefix>10.dat`. The default prefix
is `data/`. Each file is made of 13-byte flow keys with these fields:

- source IP
- source port
- destination IP
- destination port
- protocol

The command adds every key to a sketch with k=1000, width=21124, depth=2 and
decay=0.95. It then reports the insert throughput and prints the heaviest
flows with their estimated packet counts.

The command prints an error and exits with status 1 in two cases:

- a trace file is missing
- the dataset reaches `--max-items` keys (default 40,000,000)