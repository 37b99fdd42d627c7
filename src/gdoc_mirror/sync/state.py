"""Sync ledger persistence for tracking exported documents."""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Iterator

from pydantic import BaseModel, ValidationError, model_validator

from gdoc_mirror.exceptions import StoreError
from gdoc_mirror.models import RemoteDocument

logger = logging.getLogger(__name__)

LEDGER_FILENAME = ".sync_ledger.json"


class EntryState(str, Enum):
    """Outcome of the last successful processing of a document."""

    DOWNLOADED = "Downloaded"
    TOO_LARGE = "TooLarge"


class LedgerEntry(BaseModel):
    """What the ledger remembers about one remote document."""

    name: str
    modified_time: str
    state: EntryState
    filename: str | None = None

    model_config = {"extra": "ignore"}

    @model_validator(mode="after")
    def _too_large_has_no_file(self) -> "LedgerEntry":
        if self.state is EntryState.TOO_LARGE:
            self.filename = None
        return self


class SyncLedger:
    """JSON-backed record of previously processed documents, keyed by id.

    The ledger is loaded once, mutated in memory by the engine during a pass
    and written back once by the caller. Nothing here touches the disk
    except ``load`` and ``save``.

    File format:
    {
        "entries": {
            "1a2b3c": {
                "name": "Report",
                "modified_time": "2026-01-31T10:00:00.000Z",
                "state": "Downloaded",
                "filename": "Report.odt"
            }
        }
    }
    """

    def __init__(self, entries: dict[str, LedgerEntry] | None = None):
        self._entries: dict[str, LedgerEntry] = dict(entries or {})

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SyncLedger):
            return NotImplemented
        return self._entries == other._entries

    def ids(self) -> Iterator[str]:
        return iter(self._entries)

    def lookup(self, document_id: str) -> LedgerEntry | None:
        """Get the entry for a document id, or None if never processed."""
        return self._entries.get(document_id)

    def needs_download(self, doc: RemoteDocument) -> bool:
        """Check whether a document is new or its version token changed.

        A rename with an unchanged ``modified_time`` is not a change.
        """
        entry = self._entries.get(doc.id)
        if entry is None:
            return True
        return entry.modified_time != doc.modified_time

    def record_downloaded(self, doc: RemoteDocument, filename: str):
        """Record a successful export written to ``filename``.

        Raises:
            ValueError: If filename is empty or already claimed by another document
        """
        if not filename:
            raise ValueError(f"Empty filename for downloaded document {doc.id}")
        owner = self.filename_owner(filename, exclude_id=doc.id)
        if owner is not None:
            raise ValueError(f"Filename {filename} is already claimed by document {owner}")

        self._entries[doc.id] = LedgerEntry(
            name=doc.name,
            modified_time=doc.modified_time,
            state=EntryState.DOWNLOADED,
            filename=filename,
        )

    def record_too_large(self, doc: RemoteDocument):
        """Record that the remote refused to export this version of a document."""
        self._entries[doc.id] = LedgerEntry(
            name=doc.name,
            modified_time=doc.modified_time,
            state=EntryState.TOO_LARGE,
        )

    def filename_owner(self, filename: str, exclude_id: str | None = None) -> str | None:
        """Get the id of a downloaded document other than ``exclude_id`` that claims a filename."""
        for document_id, entry in self._entries.items():
            if document_id == exclude_id:
                continue
            if entry.state is EntryState.DOWNLOADED and entry.filename == filename:
                return document_id
        return None

    def claimed_filenames(self, exclude_id: str | None = None) -> set[str]:
        """Filenames claimed by downloaded entries, optionally ignoring one id."""
        return {
            entry.filename
            for document_id, entry in self._entries.items()
            if entry.state is EntryState.DOWNLOADED
            and entry.filename
            and document_id != exclude_id
        }

    def summary(self) -> dict[str, int]:
        """Count entries by state."""
        counts = {"total": len(self._entries)}
        for state in EntryState:
            counts[state.value] = sum(1 for e in self._entries.values() if e.state is state)
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": {
                document_id: entry.model_dump(mode="json", exclude_none=True)
                for document_id, entry in self._entries.items()
            }
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncLedger":
        """Build a ledger from its JSON form.

        Unknown fields are ignored and a missing ``filename`` is absent.

        Raises:
            StoreError: If an entry lacks name, modified_time or state, or two
                downloaded entries claim the same filename
        """
        if not isinstance(data, dict):
            raise StoreError("Ledger root must be a JSON object")
        entries = {}
        owners: dict[str, str] = {}
        for document_id, raw in (data.get("entries") or {}).items():
            try:
                entries[document_id] = LedgerEntry.model_validate(raw)
            except ValidationError as e:
                raise StoreError(f"Invalid ledger entry {document_id}: {e}") from e
            entry = entries[document_id]
            if entry.state is EntryState.DOWNLOADED and entry.filename:
                if entry.filename in owners:
                    raise StoreError(
                        f"Ledger entries {owners[entry.filename]} and {document_id} "
                        f"both claim {entry.filename}"
                    )
                owners[entry.filename] = document_id
        return cls(entries)

    @classmethod
    def load(cls, path: str | Path) -> "SyncLedger":
        """Load the ledger from disk; an absent file means an empty ledger.

        Raises:
            StoreError: If the file exists but cannot be read or parsed
        """
        path = Path(path)
        if not path.exists():
            logger.debug(f"No ledger found at {path}, starting empty")
            return cls()

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Failed to read ledger {path}: {e}") from e

        ledger = cls.from_dict(data)
        logger.debug(f"Loaded ledger with {len(ledger)} entries from {path}")
        return ledger

    def save(self, path: str | Path):
        """Write the ledger to disk, replacing any previous file.

        Raises:
            StoreError: If the file cannot be written
        """
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2)
        except OSError as e:
            raise StoreError(f"Failed to write ledger {path}: {e}") from e
        logger.debug(f"Saved ledger with {len(self)} entries to {path}")
