"""
XDR codec (RFC 4506 subset)
---------------------------

A small, dependency-free packer/unpacker for the fixed binary encoding used by
ledger entries, transactions and call parameters.

Supported primitives:
- int32 / uint32 / int64 / uint64 (big-endian, two's complement)
- bool (encoded as uint32 0/1)
- fixed opaque[n] and variable opaque<max> (zero padded to 4-byte boundary)
- string<max> (UTF-8 payload, same layout as opaque)
- optional (bool discriminant + value)
- variable arrays (uint32 count + items)

The unpacker is strict: padding bytes must be zero, lengths must respect their
declared maximum and `finish()` rejects trailing bytes. That strictness is what
makes decode-then-encode reproduce the original bytes.

Higher-level types implement `pack(packer)` / `unpack(unpacker)` classmethods
on top of this module (see hostcall.types).
"""

from __future__ import annotations

import base64
import binascii
import struct
from typing import Callable, List, Optional, Sequence, TypeVar

T = TypeVar("T")

UINT32_MAX = 0xFFFFFFFF
UNBOUNDED = UINT32_MAX


class XdrError(ValueError):
    """Raised for malformed or out-of-range XDR data."""


def _pad_len(n: int) -> int:
    return (4 - (n % 4)) % 4


# ------------------------
# Encoder
# ------------------------

class Packer:
    __slots__ = ("_buf",)

    def __init__(self) -> None:
        self._buf = bytearray()

    def getvalue(self) -> bytes:
        return bytes(self._buf)

    # integers

    def int32(self, v: int) -> None:
        if not -0x80000000 <= v <= 0x7FFFFFFF:
            raise XdrError(f"int32 out of range: {v}")
        self._buf += struct.pack(">i", v)

    def uint32(self, v: int) -> None:
        if not 0 <= v <= UINT32_MAX:
            raise XdrError(f"uint32 out of range: {v}")
        self._buf += struct.pack(">I", v)

    def int64(self, v: int) -> None:
        if not -(1 << 63) <= v < (1 << 63):
            raise XdrError(f"int64 out of range: {v}")
        self._buf += struct.pack(">q", v)

    def uint64(self, v: int) -> None:
        if not 0 <= v < (1 << 64):
            raise XdrError(f"uint64 out of range: {v}")
        self._buf += struct.pack(">Q", v)

    def boolean(self, v: bool) -> None:
        self.uint32(1 if v else 0)

    # opaque / strings

    def fixed_opaque(self, data: bytes, size: int) -> None:
        if len(data) != size:
            raise XdrError(f"fixed opaque expects {size} bytes, got {len(data)}")
        self._buf += data
        self._buf += b"\x00" * _pad_len(size)

    def opaque(self, data: bytes, max_len: int = UNBOUNDED) -> None:
        if len(data) > max_len:
            raise XdrError(f"opaque length {len(data)} exceeds maximum {max_len}")
        self.uint32(len(data))
        self._buf += data
        self._buf += b"\x00" * _pad_len(len(data))

    def string(self, s: str, max_len: int = UNBOUNDED) -> None:
        self.opaque(s.encode("utf-8"), max_len)

    # composites

    def optional(self, value: Optional[T], pack_fn: Callable[["Packer", T], None]) -> None:
        if value is None:
            self.boolean(False)
        else:
            self.boolean(True)
            pack_fn(self, value)

    def array(self, items: Sequence[T], pack_fn: Callable[["Packer", T], None], max_len: int = UNBOUNDED) -> None:
        if len(items) > max_len:
            raise XdrError(f"array length {len(items)} exceeds maximum {max_len}")
        self.uint32(len(items))
        for it in items:
            pack_fn(self, it)


# ------------------------
# Decoder (strict)
# ------------------------

class Unpacker:
    __slots__ = ("_b", "_i", "_n")

    def __init__(self, data: bytes) -> None:
        self._b = memoryview(bytes(data))
        self._i = 0
        self._n = len(data)

    @property
    def offset(self) -> int:
        return self._i

    def remaining(self) -> int:
        return self._n - self._i

    def done(self) -> bool:
        return self._i >= self._n

    def finish(self) -> None:
        if self._i != self._n:
            raise XdrError(f"{self._n - self._i} trailing bytes after XDR value")

    def _take(self, k: int) -> bytes:
        if self._i + k > self._n:
            raise XdrError("truncated XDR input")
        out = self._b[self._i:self._i + k].tobytes()
        self._i += k
        return out

    def _skip_padding(self, n: int) -> None:
        pad = self._take(_pad_len(n))
        if pad.strip(b"\x00"):
            raise XdrError("non-zero XDR padding")

    # integers

    def int32(self) -> int:
        return struct.unpack(">i", self._take(4))[0]

    def uint32(self) -> int:
        return struct.unpack(">I", self._take(4))[0]

    def int64(self) -> int:
        return struct.unpack(">q", self._take(8))[0]

    def uint64(self) -> int:
        return struct.unpack(">Q", self._take(8))[0]

    def boolean(self) -> bool:
        v = self.uint32()
        if v not in (0, 1):
            raise XdrError(f"invalid bool discriminant {v}")
        return v == 1

    # opaque / strings

    def fixed_opaque(self, size: int) -> bytes:
        data = self._take(size)
        self._skip_padding(size)
        return data

    def opaque(self, max_len: int = UNBOUNDED) -> bytes:
        n = self.uint32()
        if n > max_len:
            raise XdrError(f"opaque length {n} exceeds maximum {max_len}")
        data = self._take(n)
        self._skip_padding(n)
        return data

    def string(self, max_len: int = UNBOUNDED) -> str:
        raw = self.opaque(max_len)
        try:
            return raw.decode("utf-8", "strict")
        except UnicodeDecodeError as e:
            raise XdrError(f"invalid UTF-8 in XDR string: {e}") from e

    # composites

    def optional(self, unpack_fn: Callable[["Unpacker"], T]) -> Optional[T]:
        if self.boolean():
            return unpack_fn(self)
        return None

    def array(self, unpack_fn: Callable[["Unpacker"], T], max_len: int = UNBOUNDED) -> List[T]:
        n = self.uint32()
        if n > max_len:
            raise XdrError(f"array length {n} exceeds maximum {max_len}")
        # each element takes at least 4 bytes; reject counts the input cannot hold
        if n * 4 > self.remaining():
            raise XdrError("truncated XDR array")
        return [unpack_fn(self) for _ in range(n)]


# ------------------------
# base64 helpers
# ------------------------

def b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode(text: str) -> bytes:
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise XdrError(f"invalid base64: {e}") from e


__all__ = [
    "Packer",
    "Unpacker",
    "XdrError",
    "UNBOUNDED",
    "b64encode",
    "b64decode",
]
