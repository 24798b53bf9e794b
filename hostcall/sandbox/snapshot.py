"""
hostcall.sandbox.snapshot: the persisted sandbox ledger

File format (JSON):

    {
      "ledger_info": {"protocol_version": 20, "sequence_number": 3, "timestamp": 15,
                      "network_id": "<hex32>", "base_reserve": 0},
      "ledger_entries": [["<b64 xdr LedgerKey>", "<b64 xdr LedgerEntry>"], ...]
    }

A missing file reads as an empty ledger at sequence 0. The snapshot is loaded
wholesale at the start of an invocation and replaced wholesale on commit:
the new content is written to a temporary file in the same directory and
moved into place with `os.replace`, so a failed commit never leaves a
half-written ledger. Files are not locked; concurrent sandbox invocations on
the same ledger file are unsupported.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..encoding.xdr import XdrError
from ..errors import SnapshotCommitError, SnapshotReadError
from ..logging import get_logger
from ..types.ledger import LedgerEntry, LedgerInfo, LedgerKey

log = get_logger(__name__)


@dataclass
class LedgerSnapshot:
    ledger_info: LedgerInfo = field(default_factory=LedgerInfo)
    entries: Dict[LedgerKey, LedgerEntry] = field(default_factory=dict)

    def get(self, key: LedgerKey) -> Optional[LedgerEntry]:
        return self.entries.get(key)

    def to_json(self) -> Dict[str, Any]:
        rows: List[List[str]] = [
            [k.to_xdr_base64(), v.to_xdr_base64()]
            for k, v in sorted(self.entries.items(), key=lambda kv: kv[0].to_xdr())
        ]
        return {"ledger_info": self.ledger_info.to_json(), "ledger_entries": rows}

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> "LedgerSnapshot":
        info = LedgerInfo.from_json(obj.get("ledger_info") or {})
        entries: Dict[LedgerKey, LedgerEntry] = {}
        for row in obj.get("ledger_entries") or []:
            if not isinstance(row, list) or len(row) != 2:
                raise ValueError("ledger_entries rows must be [key, entry] pairs")
            key = LedgerKey.from_xdr_base64(row[0])
            entry = LedgerEntry.from_xdr_base64(row[1])
            if entry.ledger_key() != key:
                raise ValueError(f"entry stored under mismatching key {key!r}")
            entries[key] = entry
        return cls(info, entries)


def read(path: Path | str) -> LedgerSnapshot:
    p = Path(path)
    if not p.exists():
        log.debug("ledger file missing, starting from an empty ledger", extra={"path": str(p)})
        return LedgerSnapshot()
    try:
        with p.open("r", encoding="utf-8") as fh:
            obj = json.load(fh)
        if not isinstance(obj, dict):
            raise ValueError("top-level value must be an object")
        return LedgerSnapshot.from_json(obj)
    except (OSError, ValueError, XdrError) as e:
        raise SnapshotReadError(str(p), str(e), cause=e) from e


def commit(
    entries: Mapping[LedgerKey, LedgerEntry],
    ledger_info: LedgerInfo,
    changes: Mapping[LedgerKey, Optional[LedgerEntry]],
    path: Path | str,
) -> LedgerSnapshot:
    """
    Apply *changes* over *entries* (None deletes) and persist with *ledger_info*.

    Returns the snapshot that was written.
    """
    merged: Dict[LedgerKey, LedgerEntry] = dict(entries)
    for key, entry in changes.items():
        if entry is None:
            merged.pop(key, None)
        else:
            merged[key] = entry
    snap = LedgerSnapshot(ledger_info, merged)
    write(snap, path)
    return snap


def write(snapshot: LedgerSnapshot, path: Path | str) -> None:
    p = Path(path)
    tmp_path: Optional[str] = None
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=str(p.parent), prefix=f".{p.name}.", delete=False
        ) as tmp:
            tmp_path = tmp.name
            json.dump(snapshot.to_json(), tmp, indent=2)
            tmp.write("\n")
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_path, p)
        tmp_path = None
    except OSError as e:
        raise SnapshotCommitError(str(p), str(e), cause=e) from e
    finally:
        if tmp_path is not None:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_path)
    log.info(
        "ledger committed",
        extra={"path": str(p), "entries": len(snapshot.entries), "sequence": snapshot.ledger_info.sequence_number},
    )


__all__ = ["LedgerSnapshot", "read", "commit", "write"]
