#!/usr/bin/env python3
"""Mirror Google Docs into ./mirror and list documents too large to export."""

import sys
sys.path.insert(0, 'src')

from pathlib import Path
from gdoc_mirror import DriveClient, EntryState, SessionProvider, StorageLayout, SyncEngine, SyncLedger

STORE_DIR = Path("mirror")


def main():
    storage = StorageLayout(STORE_DIR)
    storage.ensure_store()
    ledger = SyncLedger.load(storage.ledger_path)

    with SessionProvider() as provider:
        session = provider.get_session()

    with DriveClient(session) as client:
        documents = client.list_documents()
        print(f"Listed {len(documents)} files")
        try:
            result = SyncEngine(client, storage).run(documents, ledger)
        finally:
            ledger.save(storage.ledger_path)

    print(f"Downloaded {result.documents_downloaded}, unchanged {result.documents_skipped}")

    too_large = [
        ledger.lookup(doc_id).name
        for doc_id in ledger.ids()
        if ledger.lookup(doc_id).state is EntryState.TOO_LARGE
    ]
    if too_large:
        print("\nToo large to export:")
        for name in too_large:
            print(f"  {name}")


if __name__ == "__main__":
    main()
