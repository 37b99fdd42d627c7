"""
Command-line interface for gdoc-mirror

Usage:
    gdoc-mirror sync --store ./mirror              # Export new and changed docs
    gdoc-mirror sync --store ./mirror --dry-run    # Show what would be exported
    gdoc-mirror list                               # Show eligible documents
    gdoc-mirror status --store ./mirror            # Summarize the ledger
"""

import argparse
import json
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _session_provider(args):
    from gdoc_mirror.auth import SessionProvider

    return SessionProvider(
        client_settings_path=args.client_settings,
        credentials_path=args.credentials,
    )


def cmd_sync(args):
    """Mirror documents into the store directory."""
    from gdoc_mirror.clients import DriveClient
    from gdoc_mirror.exceptions import StoreError
    from gdoc_mirror.sync import StorageLayout, SyncEngine, SyncLedger

    storage = StorageLayout(args.store)
    if not args.dry_run:
        storage.ensure_store()
    ledger = SyncLedger.load(storage.ledger_path)

    def progress(current, total, name):
        if current % 10 == 0 or current == total:
            pct = current / total * 100 if total > 0 else 0
            print(f"  [{current}/{total}] {pct:.1f}% - {name}")

    with _session_provider(args) as provider:
        session = provider.get_session()
    with session, DriveClient(session) as client:
        documents = client.list_documents()
        engine = SyncEngine(
            client,
            storage,
            progress_callback=None if args.json else progress,
            dry_run=args.dry_run,
        )
        try:
            result = engine.run(documents, ledger)
        except BaseException as e:
            # Keep everything recorded up to the aborted document
            logger.error(f"Sync aborted ({type(e).__name__}): {e}")
            if not args.dry_run:
                try:
                    ledger.save(storage.ledger_path)
                except StoreError as save_error:
                    logger.error(f"Ledger not saved after abort: {save_error}")
            raise

    if not args.dry_run:
        ledger.save(storage.ledger_path)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return

    print(f"\n{'=' * 50}")
    print(f"{'DRY RUN' if args.dry_run else 'SYNC'} COMPLETE: {storage.store_dir}")
    print(f"{'=' * 50}")
    print(f"Documents listed:     {result.documents_found}")
    print(f"Documents eligible:   {result.documents_eligible}")
    print(f"Documents unchanged:  {result.documents_skipped}")
    if args.dry_run:
        print(f"Documents to export:  {len(result.outcomes) - result.documents_skipped}")
    else:
        print(f"Documents downloaded: {result.documents_downloaded}")
        print(f"Documents too large:  {result.documents_too_large}")
        print(f"Bytes written:        {result.bytes_written}")


def cmd_list(args):
    """Show the remote catalog listing."""
    from gdoc_mirror.clients import DriveClient

    with _session_provider(args) as provider:
        session = provider.get_session()
    with session, DriveClient(session) as client:
        documents = client.list_documents()

    shown = documents if args.all else [d for d in documents if d.is_eligible]
    for doc in shown:
        print(f"{doc.id} '{doc.name}' {doc.mime_type} {str(doc.owned_by_me).lower()}")
    print(f"\n{len(shown)} of {len(documents)} files shown")


def cmd_status(args):
    """Show ledger status for a store directory."""
    from gdoc_mirror.sync import EntryState, StorageLayout, SyncLedger

    storage = StorageLayout(args.store)
    ledger = SyncLedger.load(storage.ledger_path)
    summary = ledger.summary()
    too_large = [
        (doc_id, ledger.lookup(doc_id).name)
        for doc_id in ledger.ids()
        if ledger.lookup(doc_id).state is EntryState.TOO_LARGE
    ]
    local_files = storage.list_documents()

    if args.json:
        status = {
            "store": str(storage.store_dir),
            "ledger": summary,
            "local_file_count": len(local_files),
            "too_large": [{"id": doc_id, "name": name} for doc_id, name in too_large],
        }
        print(json.dumps(status, indent=2))
        return

    print(f"\n{'=' * 50}")
    print(f"STATUS: {storage.store_dir}")
    print(f"{'=' * 50}")
    print(f"Ledger entries:   {summary['total']}")
    print(f"  Downloaded:     {summary[EntryState.DOWNLOADED.value]}")
    print(f"  Too large:      {summary[EntryState.TOO_LARGE.value]}")
    print(f"Local .odt files: {len(local_files)}")

    if too_large:
        print("\nToo large to export:")
        for doc_id, name in too_large:
            print(f"  {doc_id} '{name}'")


def _add_auth_arguments(parser):
    from gdoc_mirror.auth import DEFAULT_CLIENT_SETTINGS, DEFAULT_CREDENTIALS

    parser.add_argument(
        "--client-settings",
        default=str(DEFAULT_CLIENT_SETTINGS),
        help=f"OAuth client secret file (default: {DEFAULT_CLIENT_SETTINGS})",
    )
    parser.add_argument(
        "--credentials",
        default=str(DEFAULT_CREDENTIALS),
        help=f"Token cache file (default: {DEFAULT_CREDENTIALS})",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gdoc-mirror",
        description="Mirror Google Docs into a local directory as ODT files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Mirror documents
  gdoc-mirror sync --store ./mirror
  gdoc-mirror sync --store ./mirror --dry-run

  # Inspect
  gdoc-mirror list --all
  gdoc-mirror status --store ./mirror

Use 'gdoc-mirror <command> --help' for more information on each command.
        """,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # sync command
    sync_parser = subparsers.add_parser("sync", help="Export new and changed documents")
    sync_parser.add_argument(
        "--store", required=True, help="Directory for the ledger and exported files"
    )
    _add_auth_arguments(sync_parser)
    sync_parser.add_argument(
        "--dry-run", action="store_true", help="Don't export, just show what would be done"
    )
    sync_parser.add_argument("--json", action="store_true", help="Output result as JSON")
    sync_parser.set_defaults(func=cmd_sync)

    # list command
    list_parser = subparsers.add_parser("list", help="Show the remote listing")
    _add_auth_arguments(list_parser)
    list_parser.add_argument(
        "--all", action="store_true", help="Include files that are not mirrored"
    )
    list_parser.set_defaults(func=cmd_list)

    # status command
    status_parser = subparsers.add_parser("status", help="Show ledger status")
    status_parser.add_argument("--store", required=True, help="Store directory")
    status_parser.add_argument("--json", action="store_true", help="Output as JSON")
    status_parser.set_defaults(func=cmd_status)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error: {e}")
        if args.verbose:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
