"""
Minimal WebAssembly module reader.

Only walks the section table far enough to pull out custom sections; code is
never validated or executed here.
"""

from __future__ import annotations

from typing import Iterator, List, Tuple

from ..encoding.xdr import XdrError
from ..errors import MalformedSpec
from ..types.spec import ContractSpec, iter_spec_entries

WASM_MAGIC = b"\x00asm"
WASM_VERSION = b"\x01\x00\x00\x00"
CUSTOM_SECTION_ID = 0
SPEC_SECTION = "contractspecv0"


class WasmError(ValueError):
    pass


def _read_uleb128(data: bytes, pos: int) -> Tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if pos >= len(data):
            raise WasmError("truncated LEB128")
        b = data[pos]
        pos += 1
        result |= (b & 0x7F) << shift
        if not b & 0x80:
            return result, pos
        shift += 7
        if shift > 35:
            raise WasmError("LEB128 value too large")


def custom_sections(wasm: bytes) -> Iterator[Tuple[str, bytes]]:
    """Yield (name, payload) for every custom section, in file order."""
    if wasm[:4] != WASM_MAGIC:
        raise WasmError("not a WebAssembly module (bad magic)")
    if wasm[4:8] != WASM_VERSION:
        raise WasmError("unsupported WebAssembly version")
    pos = 8
    while pos < len(wasm):
        section_id = wasm[pos]
        size, pos = _read_uleb128(wasm, pos + 1)
        end = pos + size
        if end > len(wasm):
            raise WasmError(f"section {section_id} overruns module")
        if section_id == CUSTOM_SECTION_ID:
            name_len, name_pos = _read_uleb128(wasm, pos)
            if name_pos + name_len > end:
                raise WasmError("custom section name overruns section")
            try:
                name = wasm[name_pos:name_pos + name_len].decode("utf-8")
            except UnicodeDecodeError as e:
                raise WasmError(f"custom section name is not UTF-8: {e}") from e
            yield name, wasm[name_pos + name_len:end]
        pos = end


def read_contract_spec(wasm: bytes) -> ContractSpec:
    """Decode every `contractspecv0` section of *wasm*."""
    entries: List[object] = []
    try:
        for name, payload in custom_sections(wasm):
            if name == SPEC_SECTION:
                entries.extend(iter_spec_entries(payload))
    except (WasmError, XdrError) as e:
        raise MalformedSpec(str(e), cause=e) from e
    return ContractSpec.from_entries(entries)


__all__ = ["WasmError", "SPEC_SECTION", "custom_sections", "read_contract_spec"]
