"""On-disk data entries: metadata, encoding and decoding."""

from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass, field

from .errors import NutsDBError

# crc | timestamp | key size | value size | flag | ttl | bucket size | status | ds | tx id
_HEADER = struct.Struct("<IQIIHIIHHQ")
HEADER_SIZE = _HEADER.size


class PayloadSizeMismatchError(NutsDBError):
    """The payload size recorded in the metadata differs from the one needed."""

    default_message = "the payload size in meta mismatch with the payload size needed"


@dataclass
class MetaData:
    """Meta information of a data item."""

    key_size: int = 0
    value_size: int = 0
    timestamp: int = 0
    ttl: int = 0
    flag: int = 0
    bucket: bytes = b""
    bucket_size: int = 0
    tx_id: int = 0
    status: int = 0
    ds: int = 0

    def payload_size(self) -> int:
        """Total size of bucket, key and value."""
        return self.bucket_size + self.key_size + self.value_size


@dataclass
class Hint:
    """Index record pointing at an entry in a data file."""

    key: bytes
    file_id: int
    meta: MetaData
    data_pos: int


def _fit(data: bytes, size: int) -> bytes:
    return bytes(data[:size]).ljust(size, b"\0")


@dataclass
class Entry:
    """A data item as stored in a data file."""

    key: bytes = b""
    value: bytes = b""
    meta: MetaData = field(default_factory=MetaData)
    crc: int = 0
    position: int = 0

    def size(self) -> int:
        """Encoded size of the entry in bytes."""
        return HEADER_SIZE + self.meta.key_size + self.meta.value_size + self.meta.bucket_size

    def encode(self) -> bytes:
        """Return the entry in its stored form, checksum first."""
        meta = self.meta
        header = _HEADER.pack(
            0,
            meta.timestamp,
            meta.key_size,
            meta.value_size,
            meta.flag,
            meta.ttl,
            meta.bucket_size,
            meta.status,
            meta.ds,
            meta.tx_id,
        )
        body = (
            header[4:]
            + _fit(meta.bucket, meta.bucket_size)
            + _fit(self.key, meta.key_size)
            + _fit(self.value, meta.value_size)
        )
        return struct.pack("<I", zlib.crc32(body)) + body

    def is_zero(self) -> bool:
        """True if the entry carries no data at all."""
        return (
            self.crc == 0
            and self.meta.key_size == 0
            and self.meta.value_size == 0
            and self.meta.timestamp == 0
        )

    def get_crc(self, buf: bytes) -> int:
        """Checksum of the header in ``buf`` followed by bucket, key and value."""
        crc = zlib.crc32(bytes(buf[4:]))
        crc = zlib.crc32(self.meta.bucket, crc)
        crc = zlib.crc32(self.key, crc)
        return zlib.crc32(self.value, crc)

    def parse_payload(self, data: bytes) -> None:
        """Split ``data`` into bucket, key and value according to the metadata."""
        meta = self.meta
        if len(data) < meta.payload_size():
            raise ValueError(
                f"payload of {len(data)} bytes is shorter than the {meta.payload_size()} needed"
            )
        key_start = meta.bucket_size
        value_start = key_start + meta.key_size
        meta.bucket = bytes(data[:key_start])
        self.key = bytes(data[key_start:value_start])
        self.value = bytes(data[value_start : value_start + meta.value_size])

    def check_payload_size(self, size: int) -> None:
        """Raise PayloadSizeMismatchError unless ``size`` equals the payload size."""
        if self.meta.payload_size() != size:
            raise PayloadSizeMismatchError()

    def parse_meta(self, buf: bytes) -> None:
        """Read the metadata from an encoded header."""
        if len(buf) < HEADER_SIZE:
            raise ValueError(f"header needs {HEADER_SIZE} bytes, got {len(buf)}")
        (
            _crc,
            timestamp,
            key_size,
            value_size,
            flag,
            ttl,
            bucket_size,
            status,
            ds,
            tx_id,
        ) = _HEADER.unpack_from(buf)
        self.meta = MetaData(
            key_size=key_size,
            value_size=value_size,
            timestamp=timestamp,
            ttl=ttl,
            flag=flag,
            bucket_size=bucket_size,
            tx_id=tx_id,
            status=status,
            ds=ds,
        )