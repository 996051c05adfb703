from __future__ import annotations

import contextlib
import hashlib
import os
from collections.abc import Iterator
from typing import IO, Any, Union

# Largest payload the single-request upload endpoint accepts.
SINGLE_UPLOAD_LIMIT = 1024 * 1024 * 1024
HASH_BLOCK_SIZE = 1024 * 1024

UploadBody = Union[bytes, bytearray, memoryview, IO[bytes]]
UploadSource = Union[UploadBody, str, os.PathLike[str]]


def _is_bytes_like(body: Any) -> bool:
    return isinstance(body, (bytes, bytearray, memoryview))


@contextlib.contextmanager
def open_source(source: UploadSource) -> Iterator[UploadBody]:
    """Yield an uploadable body; paths are opened here and closed on exit."""
    if isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as fh:
            yield fh
        return
    if _is_bytes_like(source) or hasattr(source, "read"):
        yield source
        return
    raise TypeError(f"file must be bytes, a binary file object or a path, got {type(source).__name__}")


def compute_body_length(body: UploadBody) -> int:
    if _is_bytes_like(body):
        return len(memoryview(body).cast("B"))  # type: ignore[arg-type]
    pos = body.tell()  # type: ignore[union-attr]
    body.seek(0, os.SEEK_END)  # type: ignore[union-attr]
    end = body.tell()  # type: ignore[union-attr]
    body.seek(pos)  # type: ignore[union-attr]
    return int(end - pos)


def md5_hex(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def compute_etag(body: UploadBody) -> str:
    """MD5 of the whole payload; file objects are read in blocks and rewound."""
    if _is_bytes_like(body):
        return hashlib.md5(body).hexdigest()  # type: ignore[arg-type]
    digest = hashlib.md5()
    pos = body.tell()  # type: ignore[union-attr]
    try:
        while True:
            block = body.read(HASH_BLOCK_SIZE)  # type: ignore[union-attr]
            if not block:
                break
            digest.update(block)
    finally:
        body.seek(pos)  # type: ignore[union-attr]
    return digest.hexdigest()


def read_all(body: UploadBody) -> bytes:
    if _is_bytes_like(body):
        return bytes(body)  # type: ignore[arg-type]
    pos = body.tell()  # type: ignore[union-attr]
    try:
        return bytes(body.read())  # type: ignore[union-attr]
    finally:
        body.seek(pos)  # type: ignore[union-attr]


def iter_slices(body: UploadBody, slice_size: int) -> Iterator[bytes]:
    """Yield consecutive ``slice_size`` chunks; only the last may be shorter."""
    if slice_size <= 0:
        raise ValueError("slice_size must be positive")
    if _is_bytes_like(body):
        view = memoryview(body).cast("B")  # type: ignore[arg-type]
        offset = 0
        while offset < len(view):
            end = min(offset + slice_size, len(view))
            yield bytes(view[offset:end])
            offset = end
        return
    while True:
        chunk = body.read(slice_size)  # type: ignore[union-attr]
        if not chunk:
            break
        yield bytes(chunk)


def count_slices(total_size: int, slice_size: int) -> int:
    return -(-total_size // slice_size) if slice_size > 0 else 0


__all__ = [
    "SINGLE_UPLOAD_LIMIT",
    "HASH_BLOCK_SIZE",
    "UploadBody",
    "UploadSource",
    "open_source",
    "compute_body_length",
    "compute_etag",
    "md5_hex",
    "read_all",
    "iter_slices",
    "count_slices",
]
