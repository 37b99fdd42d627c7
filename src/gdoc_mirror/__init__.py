"""
gdoc-mirror - mirror Google Docs into a local directory as OpenDocument files

Each native document owned by the authenticated user is exported as ODT and
written to a store directory. A ledger kept in the store remembers what was
exported, so repeated runs only download documents whose version changed and
keep writing each document to the same file.

Sync Engine:
- Skip unchanged documents without any network call
- Stable filenames across content edits, collision-free allocation
- Documents too large to export are recorded and not retried

Drive Client:
- files.list and files.export over the Drive v3 REST API
- OAuth installed-application flow with a cached token

Example usage:
    >>> from gdoc_mirror import DriveClient, SessionProvider, StorageLayout, SyncEngine, SyncLedger
    >>> storage = StorageLayout("./mirror")
    >>> ledger = SyncLedger.load(storage.ledger_path)
    >>> with SessionProvider() as provider:
    ...     session = provider.get_session()
    >>> with DriveClient(session) as client:
    ...     result = SyncEngine(client, storage).run(client.list_documents(), ledger)
    >>> ledger.save(storage.ledger_path)
"""

__version__ = "0.1.0"

# Errors
from gdoc_mirror.exceptions import (
    AuthError,
    ConfigError,
    EligibilityMismatchError,
    ExportError,
    ExportFailure,
    ExportFailureKind,
    ListingTruncatedError,
    MirrorError,
    StoreError,
    TransportError,
    is_recoverable,
)

# Models
from gdoc_mirror.models import (
    GOOGLE_DOCUMENT_MIME_TYPE,
    ODT_MIME_TYPE,
    RemoteDocument,
)

# Clients
from gdoc_mirror.auth import SessionProvider
from gdoc_mirror.clients.drive import DriveClient

# Sync Engine
from gdoc_mirror.sync.engine import RunResult, SyncAction, SyncEngine
from gdoc_mirror.sync.state import EntryState, LedgerEntry, SyncLedger
from gdoc_mirror.sync.storage import StorageLayout

__all__ = [
    # Version
    "__version__",
    # Errors
    "AuthError",
    "ConfigError",
    "EligibilityMismatchError",
    "ExportError",
    "ExportFailure",
    "ExportFailureKind",
    "ListingTruncatedError",
    "MirrorError",
    "StoreError",
    "TransportError",
    "is_recoverable",
    # Models
    "GOOGLE_DOCUMENT_MIME_TYPE",
    "ODT_MIME_TYPE",
    "RemoteDocument",
    # Clients
    "DriveClient",
    "SessionProvider",
    # Sync Engine
    "SyncEngine",
    "SyncAction",
    "RunResult",
    "SyncLedger",
    "LedgerEntry",
    "EntryState",
    "StorageLayout",
]
