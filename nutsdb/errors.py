"""Error types raised by the database and helpers that classify them."""

from __future__ import annotations

from collections.abc import Iterator


class NutsDBError(Exception):
    """Base class for every error the database raises."""

    default_message = "nutsdb error"

    def __init__(self, *args: object) -> None:
        super().__init__(*(args or (self.default_message,)))


class DBClosedError(NutsDBError):
    """The database has been closed."""

    default_message = "db is closed"


class KeyNotFoundError(NutsDBError):
    """The requested key does not exist."""

    default_message = "key not found"


class BucketNotFoundError(NutsDBError):
    """The requested bucket does not exist."""

    default_message = "bucket not found"


class BucketEmptyError(NutsDBError):
    """The bucket holds no data."""

    default_message = "bucket is empty"


class KeyEmptyError(NutsDBError):
    """An empty key was given."""

    default_message = "key cannot be empty"


class PrefixScanError(NutsDBError):
    """A prefix scan found nothing."""

    default_message = "prefix scans not found"


class PrefixSearchScanError(NutsDBError):
    """A prefix and search scan found nothing."""

    default_message = "prefix and search scans not found"


def _chain(err: BaseException | None) -> Iterator[BaseException]:
    """Yield ``err`` and every exception it was raised from or during."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        yield err
        seen.add(id(err))
        if err.__cause__ is not None:
            err = err.__cause__
        elif not err.__suppress_context__:
            err = err.__context__
        else:
            err = None


def _matches(err: BaseException | None, kind: type[BaseException]) -> bool:
    return any(isinstance(item, kind) for item in _chain(err))


def is_db_closed(err: BaseException | None) -> bool:
    """Return True if the error says the database was closed."""
    return _matches(err, DBClosedError)


def is_key_not_found(err: BaseException | None) -> bool:
    """Return True if the error says a key was not found."""
    return _matches(err, KeyNotFoundError)


def is_bucket_not_found(err: BaseException | None) -> bool:
    """Return True if the error says a bucket does not exist."""
    return _matches(err, BucketNotFoundError)


def is_bucket_empty(err: BaseException | None) -> bool:
    """Return True if the error says a bucket is empty."""
    return _matches(err, BucketEmptyError)


def is_key_empty(err: BaseException | None) -> bool:
    """Return True if the error says a key is empty."""
    return _matches(err, KeyEmptyError)


def is_prefix_scan(err: BaseException | None) -> bool:
    """Return True if a prefix scan found no result."""
    return _matches(err, PrefixScanError)


def is_prefix_search_scan(err: BaseException | None) -> bool:
    """Return True if a prefix and search scan found no result."""
    return _matches(err, PrefixSearchScanError)