# nutsdb

Core pieces of an embedded key/value store, in pure Python with no
dependencies beyond the standard library.

## What is inside

- `nutsdb.entry`: the stored record format.
  - `MetaData` holds a record's sizes, timestamp, TTL, flag, bucket, status,
    data-structure code and transaction id; `payload_size()` is the sum of
    the bucket, key and value sizes.
  - `Entry.encode()` writes a 42-byte little-endian header followed by the
    bucket, key and value, with a CRC-32 of everything after the first four
    bytes stored in those first four bytes. `Entry.size()` is the encoded
    length.
  - `Entry.parse_meta(buf)` reads the metadata back from a header and
    `Entry.parse_payload(data)` splits a payload into bucket, key and value.
    `Entry.get_crc(buf)` computes the checksum of a header plus the entry's
    bucket, key and value; `Entry.check_payload_size(size)` raises
    `PayloadSizeMismatchError` if the sizes disagree; `Entry.is_zero()`
    tells whether an entry is empty.
  - `Hint` is a small record pointing a key at a file id and position.
- `nutsdb.errors`: the exception hierarchy (`NutsDBError`, `DBClosedError`,
  `KeyNotFoundError`, `BucketNotFoundError`, `BucketEmptyError`,
  `KeyEmptyError`, `PrefixScanError`, `PrefixSearchScanError`) and the
  predicates `is_db_closed`, `is_key_not_found`, `is_bucket_not_found`,
  `is_bucket_empty`, `is_key_empty`, `is_prefix_scan` and
  `is_prefix_search_scan`, which also look through an exception's
  `__cause__` and `__context__` chain.
- `nutsdb.fd_manager`: `FdManager`, an LRU cache of open read-write file
  handles. `get_fd(path)` opens (creating if needed) or reuses a handle and
  counts its users; `reduce_using(path)` gives one back;
  `clean_useless_fd()` closes unused handles, least recently used first, up
  to the clean threshold; `close_by_path(path)` and `close()` close
  handles. It can be used as a context manager, which closes it on exit.
  `DoubleLinkedList` and `FdInfo` are the list it keeps its handles in.
- `nutsdb.ds.lists`: `List`, lists of byte strings keyed by name, with an
  optional per-key TTL kept in `ttl` and `timestamp`: `rpush`, `lpush`,
  `rpop`, `lpop`, `rpeek`, `lpeek`, `size`, `is_empty`, `lrange`, `lrem`,
  `lrem_num`, `lset`, `ltrim`, `lrem_by_index`, `lrem_by_index_pre_check`
  and `is_expire`. Errors are `ListNotFoundError`, `IndexOutOfRangeError`,
  `CountError` and `MinIntError`.
- `nutsdb.ds.sets`: `Set`, sets of byte strings keyed by name: `sadd`,
  `srem`, `spop`, `scard`, `shas_key`, `sis_member`, `sare_members`,
  `smembers`, `smove`, `sdiff`, `sinter` and `sunion`. Errors are
  `SetKeyNotFoundError`, `SetKeyNotExistError` and `ItemEmptyError`.
- `nutsdb.ds.zset`: `SortedSet`, a skip-list sorted set ordered by score and
  then key: `put`, `remove`, `size`, `peek_min`, `pop_min`, `peek_max`,
  `pop_max`, `get_by_key`, `get_by_rank`, `get_by_rank_range`,
  `get_by_score_range` (with `GetByScoreRangeOptions` for a limit and open
  ends), `find_rank` and `find_rev_rank`. Ranks are 1-based, and negative
  ranks count from the end.

## Installing

```
pip install .
```

## Examples

```python
from nutsdb.entry import Entry, MetaData

meta = MetaData(key_size=3, value_size=3, bucket=b"bk", bucket_size=2,
                timestamp=1547707905)
entry = Entry(key=b"foo", value=b"bar", meta=meta)
raw = entry.encode()
assert entry.size() == len(raw)
```

```python
from nutsdb.ds.lists import List

lst = List()
lst.rpush("queue", b"a", b"b", b"c")
assert lst.lpop("queue") == b"a"
assert lst.lrange("queue", 0, -1) == [b"b", b"c"]
```

```python
from nutsdb.ds.zset import SortedSet

scores = SortedSet()
scores.put("alice", 90, b"A")
scores.put("bob", 70, b"B")
assert scores.peek_max().key == "alice"
assert scores.find_rank("bob") == 1
```

## What it does not do

This package holds building blocks only. It has no database to open: no
buckets, transactions, data files, indexes, merging or recovery, and nothing
that writes encoded entries to disk or reads them back from it. The list,
set and sorted-set structures live in memory only, and there is no command
line tool or server.

## Running the tests

```
pip install ".[test]"
pytest
```