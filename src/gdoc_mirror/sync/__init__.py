"""Sync engine, ledger and store layout for mirroring documents."""

from gdoc_mirror.sync.engine import DocumentOutcome, RunResult, SyncAction, SyncEngine
from gdoc_mirror.sync.state import LEDGER_FILENAME, EntryState, LedgerEntry, SyncLedger
from gdoc_mirror.sync.storage import StorageLayout, sanitize

__all__ = [
    "SyncEngine",
    "SyncAction",
    "RunResult",
    "DocumentOutcome",
    "SyncLedger",
    "LedgerEntry",
    "EntryState",
    "LEDGER_FILENAME",
    "StorageLayout",
    "sanitize",
]
