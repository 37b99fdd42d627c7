"""SyncEngine - decides, per remote document, whether to skip or export it."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Iterable

from gdoc_mirror.clients.base import CatalogClient
from gdoc_mirror.exceptions import ExportError, is_recoverable
from gdoc_mirror.models import ODT_MIME_TYPE, RemoteDocument
from gdoc_mirror.sync.state import SyncLedger
from gdoc_mirror.sync.storage import StorageLayout

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    """What a pass did with an eligible document."""

    SKIPPED_UNCHANGED = "skipped_unchanged"
    DOWNLOADED = "downloaded"
    TOO_LARGE = "too_large"
    WOULD_DOWNLOAD = "would_download"


@dataclass
class DocumentOutcome:
    document_id: str
    name: str
    action: SyncAction
    filename: str | None = None


@dataclass
class RunResult:
    """Statistics and per-document decisions of one pass."""

    dry_run: bool = False
    documents_found: int = 0
    documents_eligible: int = 0
    documents_ineligible: int = 0
    documents_skipped: int = 0
    documents_downloaded: int = 0
    documents_too_large: int = 0
    bytes_written: int = 0
    outcomes: list[DocumentOutcome] = field(default_factory=list)
    start_time: str = field(default_factory=lambda: datetime.now().isoformat())
    end_time: str | None = None

    def add(self, outcome: DocumentOutcome):
        self.outcomes.append(outcome)
        if outcome.action is SyncAction.SKIPPED_UNCHANGED:
            self.documents_skipped += 1
        elif outcome.action is SyncAction.DOWNLOADED:
            self.documents_downloaded += 1
        elif outcome.action is SyncAction.TOO_LARGE:
            self.documents_too_large += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "documents_found": self.documents_found,
            "documents_eligible": self.documents_eligible,
            "documents_ineligible": self.documents_ineligible,
            "documents_skipped": self.documents_skipped,
            "documents_downloaded": self.documents_downloaded,
            "documents_too_large": self.documents_too_large,
            "bytes_written": self.bytes_written,
            "outcomes": [
                {
                    "id": o.document_id,
                    "name": o.name,
                    "action": o.action.value,
                    "filename": o.filename,
                }
                for o in self.outcomes
            ],
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


class SyncEngine:
    """Mirrors native documents from a catalog into a store directory.

    Documents are processed strictly one after another in listing order.
    The ledger is passed to ``run`` by the caller, mutated in place and
    never saved here; persisting it is the caller's job, including after a
    fatal error propagated out of ``run``.

    Example:
        storage = StorageLayout("./mirror")
        ledger = SyncLedger.load(storage.ledger_path)
        with DriveClient(session) as client:
            engine = SyncEngine(client, storage)
            try:
                result = engine.run(client.list_documents(), ledger)
            finally:
                ledger.save(storage.ledger_path)
    """

    def __init__(
        self,
        client: CatalogClient,
        storage: StorageLayout,
        export_mime_type: str = ODT_MIME_TYPE,
        progress_callback: Callable[[int, int, str], None] | None = None,
        dry_run: bool = False,
    ):
        """Initialize sync engine.

        Args:
            client: Catalog client used for exports
            storage: Store directory layout and writer
            export_mime_type: Format requested from the export endpoint
            progress_callback: Called with (current, total, name) per eligible document
            dry_run: If True, report decisions without exporting or recording
        """
        self.client = client
        self.storage = storage
        self.export_mime_type = export_mime_type
        self.progress_callback = progress_callback
        self.dry_run = dry_run

    def run(self, documents: Iterable[RemoteDocument], ledger: SyncLedger) -> RunResult:
        """Run one synchronization pass.

        Args:
            documents: Catalog listing, in listing order
            ledger: Ledger to consult and update in place

        Returns:
            RunResult with statistics and decisions

        Raises:
            ExportError: On an unrecoverable export failure
            StoreError: If an output file cannot be written
        """
        documents = list(documents)
        result = RunResult(dry_run=self.dry_run, documents_found=len(documents))

        eligible = [doc for doc in documents if doc.is_eligible]
        result.documents_eligible = len(eligible)
        result.documents_ineligible = len(documents) - len(eligible)

        logger.info(
            f"Starting {'dry-run ' if self.dry_run else ''}pass: "
            f"{len(eligible)} eligible of {len(documents)} listed documents"
        )

        # Filenames handed out in this pass but not yet on disk (dry runs only)
        pending: set[str] = set()
        total = len(eligible)

        for i, doc in enumerate(eligible):
            if self.progress_callback:
                self.progress_callback(i + 1, total, doc.name)
            outcome = self._process(doc, ledger, pending, result)
            result.add(outcome)

        result.end_time = datetime.now().isoformat()
        logger.info(
            f"Pass complete: {result.documents_downloaded} downloaded, "
            f"{result.documents_skipped} unchanged, {result.documents_too_large} too large"
        )
        return result

    def _process(
        self,
        doc: RemoteDocument,
        ledger: SyncLedger,
        pending: set[str],
        result: RunResult,
    ) -> DocumentOutcome:
        if not ledger.needs_download(doc):
            logger.info(f"Unchanged, skipping: '{doc.name}' ({doc.id})")
            return DocumentOutcome(doc.id, doc.name, SyncAction.SKIPPED_UNCHANGED)

        filename = self.output_filename(doc, ledger, pending)

        if self.dry_run:
            pending.add(filename)
            logger.info(f"Would export '{doc.name}' as {filename}")
            return DocumentOutcome(doc.id, doc.name, SyncAction.WOULD_DOWNLOAD, filename)

        try:
            content = self.client.export(doc.id, self.export_mime_type)
        except ExportError as e:
            if not is_recoverable(e.failure):
                logger.error(f"Export of '{doc.name}' ({doc.id}) failed: {e}")
                raise
            logger.warning(f"Too large to export, recording: '{doc.name}' ({doc.id})")
            ledger.record_too_large(doc)
            return DocumentOutcome(doc.id, doc.name, SyncAction.TOO_LARGE)

        self.storage.write_document(filename, content)
        ledger.record_downloaded(doc, filename)
        result.bytes_written += len(content)
        logger.info(f"Downloaded '{doc.name}' as {filename} ({len(content)} bytes)")
        return DocumentOutcome(doc.id, doc.name, SyncAction.DOWNLOADED, filename)

    def output_filename(
        self,
        doc: RemoteDocument,
        ledger: SyncLedger,
        pending: set[str] | None = None,
    ) -> str:
        """Choose the filename a document is exported to.

        The stored filename is reused while the display name is unchanged.
        A new or renamed document (or one with no stored file) gets a freshly
        allocated name; files written under older names stay on disk.
        """
        entry = ledger.lookup(doc.id)
        if entry is not None and entry.name == doc.name and entry.filename:
            return entry.filename

        reserved = ledger.claimed_filenames(exclude_id=doc.id) | (pending or set())
        if entry is not None and entry.filename:
            # A renamed document never lands on its previous file
            reserved.add(entry.filename)
        return self.storage.allocate(doc.name, reserved)
