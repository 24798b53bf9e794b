"""
hostcall.footprint.recording: storage adapter that records touched ledger keys

Purpose
-------
The sandbox executes a call for real against a copy of the snapshot. Every
key the Host reads or writes through this adapter is remembered, so after the
call the exact footprint falls out as a side effect:

  read_only  = keys read but never written
  read_write = keys written (put or delete)

A write implies a read of the same key; helpers populate the read set when a
write is recorded.

Model
-----
  base     : {LedgerKey: LedgerEntry}          # snapshot entries, never mutated
  pending  : {LedgerKey: LedgerEntry | None}    # writes; None marks deletion
  reads    : set[LedgerKey]
  writes   : set[LedgerKey]

`changes` exposes `pending`; the sandbox snapshot applies it over base on
commit.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Set

from ..types.ledger import LedgerEntry, LedgerFootprint, LedgerKey


class RecordingStorage:
    # ---- construction -----------------------------------------------------

    def __init__(self, entries: Mapping[LedgerKey, LedgerEntry]) -> None:
        self._base: Dict[LedgerKey, LedgerEntry] = dict(entries)
        self._pending: Dict[LedgerKey, Optional[LedgerEntry]] = {}
        self.reads: Set[LedgerKey] = set()
        self.writes: Set[LedgerKey] = set()

    # ---- recording helpers ------------------------------------------------

    def _touch_read(self, key: LedgerKey) -> None:
        self.reads.add(key)

    def _touch_write(self, key: LedgerKey) -> None:
        self._touch_read(key)
        self.writes.add(key)

    # ---- storage API (used by the Host) -----------------------------------

    def get(self, key: LedgerKey) -> Optional[LedgerEntry]:
        self._touch_read(key)
        if key in self._pending:
            return self._pending[key]
        return self._base.get(key)

    def has(self, key: LedgerKey) -> bool:
        return self.get(key) is not None

    def put(self, key: LedgerKey, entry: LedgerEntry) -> None:
        if entry.ledger_key() != key:
            raise ValueError(f"entry does not belong under {key!r}")
        self._touch_write(key)
        self._pending[key] = entry

    def delete(self, key: LedgerKey) -> None:
        self._touch_write(key)
        self._pending[key] = None

    # ---- results ------------------------------------------------------------

    def footprint(self) -> LedgerFootprint:
        return LedgerFootprint.of(read_only=self.reads - self.writes, read_write=self.writes)

    @property
    def changes(self) -> Dict[LedgerKey, Optional[LedgerEntry]]:
        return dict(self._pending)



__all__ = ["RecordingStorage"]
