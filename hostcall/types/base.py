from __future__ import annotations

from typing import Type, TypeVar

from ..encoding.xdr import Packer, Unpacker, b64decode, b64encode

T = TypeVar("T", bound="XdrCodable")


class XdrCodable:
    """
    Mixin for types that implement `pack(packer)` and `unpack(unpacker)`.

    Provides whole-value helpers; `from_xdr` rejects trailing bytes.
    """

    __slots__ = ()

    def pack(self, p: Packer) -> None:  # pragma: no cover - abstract
        raise NotImplementedError

    @classmethod
    def unpack(cls: Type[T], u: Unpacker) -> T:  # pragma: no cover - abstract
        raise NotImplementedError

    def to_xdr(self) -> bytes:
        p = Packer()
        self.pack(p)
        return p.getvalue()

    def to_xdr_base64(self) -> str:
        return b64encode(self.to_xdr())

    @classmethod
    def from_xdr(cls: Type[T], data: bytes) -> T:
        u = Unpacker(data)
        out = cls.unpack(u)
        u.finish()
        return out

    @classmethod
    def from_xdr_base64(cls: Type[T], text: str) -> T:
        return cls.from_xdr(b64decode(text))


__all__ = ["XdrCodable"]
