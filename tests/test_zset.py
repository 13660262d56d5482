import random

import pytest

from nutsdb.ds.zset import GetByScoreRangeOptions, SortedSet


@pytest.fixture
def ss():
    s = SortedSet()
    s.put("key1", 1, b"a")
    s.put("key2", 10, b"b")
    s.put("key3", 99.9, b"c")
    s.put("key4", 100, b"d")
    s.put("key5", 100, b"b1")
    return s


def test_put_and_update(ss):
    assert ss.size() == 5
    ss.put("key5", 100, b"b2")
    assert ss.get_by_key("key5").value == b"b2"
    ss.put("key5", 91, b"b2")
    assert ss.get_by_key("key5").score == 91
    assert ss.size() == 5
    assert ss.find_rank("key5") == 3


def test_get_by_key(ss):
    assert ss.get_by_key("key1").value == b"a"
    assert ss.get_by_key("missing") is None


def test_get_by_rank(ss):
    assert ss.get_by_rank(1, False).value == b"a"
    assert ss.get_by_rank(4, False).value == b"d"
    assert ss.get_by_rank(5, False).value == b"b1"
    assert ss.size() == 5

    n = ss.get_by_rank(5, True)
    assert n.value == b"b1"
    assert ss.size() == 4
    assert "key5" not in ss.members

    assert ss.get_by_rank(-1, False).key == "key4"
    assert ss.get_by_rank(-3, False).key == "key2"


def test_get_by_rank_past_end_is_none(ss):
    assert ss.get_by_rank(10, False) is None


@pytest.mark.parametrize(
    "start,end,want",
    [
        (1, 2, ["key1", "key2"]),
        (-1, -2, ["key5", "key4"]),
        (-2, -1, ["key4", "key5"]),
        (-1, 1, ["key5", "key4", "key3", "key2", "key1"]),
        (1, -1, ["key1", "key2", "key3", "key4", "key5"]),
    ],
)
def test_get_by_rank_range(ss, start, end, want):
    assert [n.key for n in ss.get_by_rank_range(start, end, False)] == want


def test_get_by_rank_range_remove(ss):
    removed = ss.get_by_rank_range(2, 3, True)
    assert [n.key for n in removed] == ["key2", "key3"]
    assert ss.size() == 3
    assert [n.key for n in ss.get_by_rank_range(1, -1, False)] == ["key1", "key4", "key5"]
    assert ss.find_rank("key4") == 2


def test_find_rank():
    s = SortedSet()
    s.put("key0", 0, b"a0")
    assert s.find_rank("key1") == 0


def test_find_rank_filled(ss):
    assert ss.find_rank("key1") == 1
    assert ss.find_rank("key4") == 4
    assert ss.find_rank("key5") == 5


def test_find_rev_rank():
    s = SortedSet()
    assert s.find_rev_rank("key1") == 0
    s.put("key0", 0, b"a0")
    assert s.find_rev_rank("key1") == 0


def test_find_rev_rank_filled(ss):
    assert ss.find_rev_rank("key1") == 5
    assert ss.find_rev_rank("key2") == 4
    assert ss.find_rev_rank("key3") == 3
    assert ss.find_rev_rank("key5") == 1


@pytest.mark.parametrize(
    "start,end,options,want",
    [
        (90, 100, None, ["key5", "key4", "key3"]),
        (90, 100, GetByScoreRangeOptions(exclude_end=True), ["key3"]),
        (10, 100, GetByScoreRangeOptions(exclude_start=True), ["key5", "key4", "key3"]),
        (10, 100, GetByScoreRangeOptions(exclude_start=True, exclude_end=True), ["key3"]),
        (10, 100, GetByScoreRangeOptions(limit=3), ["key2", "key3", "key4"]),
        (100, 99.999, None, ["key4", "key5"]),
        (100, 99.9, GetByScoreRangeOptions(exclude_end=True), ["key5", "key4"]),
        (100, 99.9, GetByScoreRangeOptions(exclude_start=True), ["key3"]),
    ],
)
def test_get_by_score_range(ss, start, end, options, want):
    got = [n.key for n in ss.get_by_score_range(start, end, options)]
    assert sorted(got) == sorted(want)


def test_get_by_score_range_orders(ss):
    assert [n.key for n in ss.get_by_score_range(1, 99.9)] == ["key1", "key2", "key3"]
    assert [n.key for n in ss.get_by_score_range(99.9, 1)] == ["key3", "key2", "key1"]


def test_get_by_score_range_empty_set():
    assert SortedSet().get_by_score_range(0, 100) == []


def test_get_by_score_range_reverse_below_all(ss):
    assert ss.get_by_score_range(0.5, -5) == []


def test_peek_max(ss):
    n = ss.peek_max()
    assert n.key == "key5"
    assert n.score == 100


def test_peek_min(ss):
    assert ss.peek_min().key == "key1"


def test_pop_min(ss):
    assert ss.pop_min().key == "key1"
    assert set(ss.members) == {"key2", "key3", "key4", "key5"}
    assert ss.size() == 4


def test_pop_max(ss):
    assert ss.pop_max().key == "key5"
    assert set(ss.members) == {"key1", "key2", "key3", "key4"}
    assert ss.peek_max().key == "key4"


def test_pop_on_empty_returns_none():
    s = SortedSet()
    assert s.pop_min() is None
    assert s.pop_max() is None
    assert s.peek_min() is None


def test_remove(ss):
    assert ss.remove("key1").key == "key1"
    assert set(ss.members) == {"key2", "key3", "key4", "key5"}
    assert ss.remove("key1") is None
    assert ss.peek_min().key == "key2"


def test_size(ss):
    assert ss.size() == 5
    assert len(ss) == 5


def test_ranks_stay_consistent_under_churn():
    rng = random.Random(7)
    s = SortedSet()
    for i in range(300):
        s.put(f"k{rng.randrange(120)}", rng.randrange(40), bytes([i % 256]))
        if i % 5 == 0:
            s.remove(f"k{rng.randrange(120)}")
    nodes = s.get_by_rank_range(1, -1, False)
    assert len(nodes) == s.size() == len(s.members)
    pairs = [(n.score, n.key) for n in nodes]
    assert pairs == sorted(pairs)
    for rank, node in enumerate(nodes, start=1):
        assert s.find_rank(node.key) == rank
        assert s.get_by_rank(rank, False) is node
        assert s.find_rev_rank(node.key) == s.size() - rank + 1