import pytest

from heavykeeper.errors import (
    HeavyKeeperError,
    IncompatibleDecayError,
    IncompatibleDepthError,
    IncompatibleTopItemsError,
    IncompatibleWidthError,
)
from heavykeeper.hashing import hash_item
from heavykeeper.topk import DECAY_LOOKUP_SIZE, Node, TopK, precompute_decay_thresholds

U64_MAX = (1 << 64) - 1


class ZeroRng:
    """Always returns zero, so every decay check succeeds."""

    def __init__(self):
        self.calls = 0

    def getrandbits(self, k):
        self.calls += 1
        return 0


def test_precompute_thresholds_start_at_scale():
    thresholds = precompute_decay_thresholds(0.9, DECAY_LOOKUP_SIZE)
    assert len(thresholds) == 1024
    assert thresholds[0] == 1 << 63
    assert all(a >= b for a, b in zip(thresholds, thresholds[1:]))
    assert thresholds[1] < thresholds[0]


def test_precompute_thresholds_decay_one_is_constant():
    assert precompute_decay_thresholds(1.0, 5) == [1 << 63] * 5


def test_new(capsys):
    topk = TopK(10, 100, 5, 0.9)
    assert topk.width == 100
    assert topk.depth == 5
    assert topk.decay == 0.9
    assert topk.k == 10
    assert topk.list() == []
    topk.add(b"x", 1)
    capsys.readouterr()
    topk.debug()
    out = capsys.readouterr().out
    assert "width: 100" in out
    assert "depth: 5" in out
    assert out.count("Bucket at row") == 5


def test_query():
    topk = TopK(10, 100, 5, 0.9)
    topk.add(b"hello", 1)
    assert topk.query(b"hello")
    assert not topk.query(b"world")


def test_count():
    topk = TopK(10, 100, 5, 0.9)
    item1 = b"lashin"
    item2 = b"ballynamoney"
    item3 = "पुष्पं अस्ति।".encode()
    topk.add(item1, 8)
    assert topk.count(item1) == 8
    assert topk.count(item3) == 0
    topk.add(item2, 1337)
    assert topk.count(item2) == 1337


def test_non_ascii_and_emoji():
    topk = TopK(5, 100, 4, 0.9)
    p = "पुष्पं अस्ति।".encode()
    emoji = "🚀🌟".encode()
    mixed = "Hello पुष्पं 🚀".encode()
    for item in (p, emoji, mixed):
        topk.add(item, 1)
    for item in (p, emoji, mixed):
        assert topk.query(item)
        assert topk.count(item) == 1
    topk.add(p, 4)
    assert topk.count(p) == 5
    assert topk.list()[0] == Node(p, 5)


def test_add_single_item():
    topk = TopK(1, 100, 5, 0.9)
    topk.add(b"hello", 1)
    assert topk.list() == [Node(b"hello", 1)]


def test_add_overwrite():
    topk = TopK(1, 1, 1, 1.0)
    topk.decay_thresholds = [U64_MAX] * len(topk.decay_thresholds)
    topk.add(b"item1", 1000)
    assert topk.list() == [Node(b"item1", 1000)]
    topk.add(b"item2", 3000)
    assert topk.list() == [Node(b"item2", 2001)]


def test_add_duplicate_items():
    topk = TopK(2, 100, 5, 0.9)
    topk.add(b"hello", 7)
    topk.add(b"world", 7)
    assert topk.list() == [Node(b"hello", 7), Node(b"world", 7)]


def test_add_more_items_than_capacity():
    topk = TopK(2, 100, 5, 0.9)
    for item in (b"hello", b"world", b"ballynamoney", b"lane"):
        topk.add(item, 1)
    nodes = topk.list()
    assert len(nodes) == 2
    assert sorted(node.count for node in nodes) == [1, 1]


def test_add_with_different_decay():
    topk = TopK(2, 100, 5, 0.5)
    for item in (b"hello", b"world", b"ballynamoney", b"lane", b"pear tree"):
        topk.add(item, 1)
    nodes = topk.list()
    assert len(nodes) == 2
    assert sorted(node.count for node in nodes) == [1, 1]


def test_add_empty_input():
    assert TopK(2, 100, 5, 0.9).list() == []


def test_add_varied_input():
    topk = TopK(10, 2000, 20, 0.98)
    for i in range(100):
        item = f"item{i}".encode()
        for _ in range(i + 1):
            topk.add(item, 1)
    nodes = topk.list()
    assert len(nodes) == 10
    tracked = {node.item for node in nodes}
    expected = {f"item{i}".encode() for i in range(90, 100)}
    assert len(tracked & expected) >= 8


def test_large_number_of_duplicates():
    topk = TopK(10, 100, 5, 0.9)
    topk.add(b"test_item", 1000)
    assert topk.count(b"test_item") == 1000


def test_multiple_distinct_items():
    topk = TopK(2, 100, 5, 0.9)
    topk.add(b"item1", 500)
    topk.add(b"item2", 499)
    assert topk.count(b"item1") == 500
    assert topk.count(b"item2") == 499
    assert topk.query(b"item1")
    assert topk.query(b"item2")


def test_insertion_into_empty_buckets(capsys):
    topk = TopK(5, 10, 4, 0.5)
    item = b"new_flow"
    topk.add(item, 1)
    assert topk.bucket_count(item) == 1
    capsys.readouterr()
    topk.debug()
    out = capsys.readouterr().out
    fingerprint = hash_item(item, topk.seed)
    assert f"fingerprint: {fingerprint}, count: 1" in out
    assert topk.query(item)


def test_add_identical_frequencies():
    topk = TopK(10, 1000, 10, 0.9)
    for i in range(100):
        topk.add(f"item{i}".encode(), 5)
    nodes = topk.list()
    assert len(nodes) == 10
    assert all(node.count == 5 for node in nodes)


def test_small_k_value():
    topk = TopK(2, 1000, 10, 0.9)
    for i in range(3):
        topk.add(f"item{i}".encode(), i + 1)
    nodes = topk.list()
    assert [node.item for node in nodes] == [b"item2", b"item1"]
    assert [node.count for node in nodes] == [3, 2]


def test_count_with_sketch():
    topk = TopK(2, 100, 5, 0.9)
    items = [b"item1", b"item2", b"item3", b"item4"]
    for item, amount in zip(items, (1, 1, 2, 5)):
        topk.add(item, amount)
    assert topk.count(items[0]) == 1
    assert topk.count(items[1]) == 1
    assert topk.count(items[2]) == 2
    assert topk.count(items[3]) == 5


def test_merge_basic():
    hk1 = TopK(3, 100, 5, 0.9, seed=12345)
    hk2 = TopK(3, 100, 5, 0.9, seed=12345)
    hk1.add(b"item1", 5)
    hk1.add(b"item2", 3)
    hk2.add(b"item1", 4)
    hk2.add(b"item3", 6)
    hk1.merge(hk2)
    assert hk1.count(b"item1") == 9
    assert hk1.count(b"item2") == 3
    assert hk1.count(b"item3") == 6


def test_merge_incompatible_width():
    hk1 = TopK(3, 100, 5, 0.9, seed=12345)
    hk2 = TopK(3, 50, 5, 0.9, seed=12345)
    with pytest.raises(IncompatibleWidthError) as info:
        hk1.merge(hk2)
    assert info.value.self_width == 100
    assert info.value.other_width == 50


def test_merge_incompatible_depth():
    hk1 = TopK(3, 100, 5, 0.9, seed=12345)
    hk2 = TopK(3, 100, 4, 0.9, seed=12345)
    with pytest.raises(IncompatibleDepthError) as info:
        hk1.merge(hk2)
    assert info.value.self_depth == 5
    assert info.value.other_depth == 4


def test_merge_incompatible_decay():
    hk1 = TopK(3, 100, 5, 0.9)
    hk2 = TopK(3, 100, 5, 0.8)
    with pytest.raises(IncompatibleDecayError) as info:
        hk1.merge(hk2)
    assert (info.value.self_decay, info.value.other_decay) == (0.9, 0.8)


def test_merge_incompatible_top_items():
    hk1 = TopK(3, 100, 5, 0.9)
    hk2 = TopK(4, 100, 5, 0.9)
    with pytest.raises(HeavyKeeperError) as info:
        hk1.merge(hk2)
    assert isinstance(info.value, IncompatibleTopItemsError)
    assert (info.value.self_items, info.value.other_items) == (3, 4)


def test_merge_with_overlapping_items():
    hk1 = TopK(3, 100, 5, 0.9, seed=12345)
    hk2 = TopK(3, 100, 5, 0.9, seed=12345)
    hk1.add(b"common", 5)
    hk2.add(b"common", 5)
    hk1.add(b"unique1", 1)
    hk2.add(b"unique2", 1)
    hk1.merge(hk2)
    assert hk1.count(b"common") == 10
    assert hk1.count(b"unique1") == 1
    assert hk1.count(b"unique2") == 1


def test_decay_logic_with_mock_rng():
    rng = ZeroRng()
    topk = TopK(1, 1, 1, 0.9, rng=rng)
    topk.decay_thresholds = [U64_MAX] * len(topk.decay_thresholds)
    large_count = 9999
    topk.add(b"item1", large_count)
    assert topk.count(b"item1") == large_count
    last = topk.bucket_count(b"item1")
    for _ in range(1000):
        topk.add(b"item2", 1)
        current = topk.bucket_count(b"item1")
        assert current == last - 1
        last = current
    assert last == 8999
    assert rng.calls == 1000


def test_decay_and_eviction():
    topk = TopK(1, 1, 1, 0.9, rng=ZeroRng())
    topk.decay_thresholds = [U64_MAX] * len(topk.decay_thresholds)
    topk.add(b"item1", 10)
    assert topk.count(b"item1") == 10
    before = topk.bucket_count(b"item1")
    topk.add(b"item2", 1)
    after = topk.bucket_count(b"item1")
    assert after == before - 1
    assert topk.query(b"item1")
    assert topk.bucket_count(b"item1") == 9
    assert not topk.query(b"item2")
    assert topk.bucket_count(b"item2") == 0
    topk.add(b"item2", 1)
    assert topk.bucket_count(b"item1") < 9


def test_eviction_when_count_reaches_zero():
    topk = TopK(1, 1, 1, 0.9, rng=ZeroRng())
    topk.add(b"item1", 2)
    topk.add(b"item2", 5)
    assert topk.bucket_count(b"item1") == 0
    assert topk.bucket_count(b"item2") == 4
    assert topk.list() == [Node(b"item2", 4)]


def test_borrow_strings():
    topk = TopK(10, 100, 5, 0.9)
    topk.add("foo", 1)
    assert topk.query("foo")
    assert topk.count("foo") == 1

    topk_bytes = TopK(10, 100, 5, 0.9)
    topk_bytes.add(b"foo", 1)
    assert topk_bytes.query(b"foo")
    assert topk_bytes.count(b"foo") == 1


def test_same_seed_gives_same_result():
    first = TopK(3, 20, 3, 0.9, seed=7)
    second = TopK(3, 20, 3, 0.9, seed=7)
    for i in range(200):
        item = f"k{i % 13}"
        first.add(item, 1)
        second.add(item, 1)
    assert first.list() == second.list()


def test_debug_lists_nodes(capsys):
    topk = TopK(2, 10, 2, 0.9)
    topk.add("alpha", 3)
    capsys.readouterr()
    topk.debug()
    out = capsys.readouterr().out
    assert "priority_queue: " in out
    assert "Node - Item: 'alpha', Count: 3" in out