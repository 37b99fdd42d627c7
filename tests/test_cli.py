"""Tests for the command-line interface."""

import json
from unittest.mock import MagicMock, patch

import pytest

from conftest import FakeCatalogClient, make_doc
from gdoc_mirror.cli.main import build_parser, main
from gdoc_mirror.exceptions import ExportFailure, StoreError
from gdoc_mirror.sync import SyncLedger


@pytest.fixture
def fake_drive():
    """Patch the session provider and Drive client with in-memory fakes."""
    catalog = FakeCatalogClient(
        documents=[
            make_doc(id="1", name="Report"),
            make_doc(id="2", name="Notes"),
            make_doc(id="3", name="Budget", mime_type="application/vnd.google-apps.spreadsheet"),
        ],
        contents={"1": b"report", "2": b"notes"},
    )
    client_cm = MagicMock()
    client_cm.__enter__.return_value = catalog

    with patch("gdoc_mirror.auth.SessionProvider") as provider_cls, patch(
        "gdoc_mirror.clients.DriveClient", return_value=client_cm
    ):
        provider = provider_cls.return_value
        provider.__enter__.return_value = provider
        provider.get_session.return_value = MagicMock()
        yield catalog


class TestParser:
    """Tests for argument parsing."""

    def test_sync_requires_store(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["sync"])

    def test_sync_defaults(self):
        args = build_parser().parse_args(["sync", "--store", "/tmp/m"])
        assert args.store == "/tmp/m"
        assert args.client_settings.endswith("client_secret.json")
        assert args.credentials.endswith("credentials.json")
        assert args.dry_run is False

    def test_no_command_exits_nonzero(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1


class TestSyncCommand:
    """Tests for `gdoc-mirror sync`."""

    def test_sync_writes_files_and_ledger(self, tmp_path, fake_drive, capsys):
        store = tmp_path / "mirror"

        main(["sync", "--store", str(store)])

        assert (store / "Report.odt").read_bytes() == b"report"
        assert (store / "Notes.odt").read_bytes() == b"notes"
        ledger = SyncLedger.load(store / ".sync_ledger.json")
        assert ledger.lookup("1").filename == "Report.odt"
        assert "3" not in ledger
        assert "Documents downloaded: 2" in capsys.readouterr().out

    def test_second_sync_exports_nothing(self, tmp_path, fake_drive, capsys):
        store = tmp_path / "mirror"
        main(["sync", "--store", str(store)])
        fake_drive.export_calls.clear()
        capsys.readouterr()

        main(["sync", "--store", str(store), "--json"])

        assert fake_drive.export_calls == []
        result = json.loads(capsys.readouterr().out)
        assert result["documents_skipped"] == 2
        assert result["documents_downloaded"] == 0

    def test_json_output(self, tmp_path, fake_drive, capsys):
        main(["sync", "--store", str(tmp_path / "mirror"), "--json"])

        result = json.loads(capsys.readouterr().out)
        assert result["documents_downloaded"] == 2
        assert result["documents_ineligible"] == 1

    def test_too_large_still_exits_zero(self, tmp_path, fake_drive):
        fake_drive.failures["1"] = ExportFailure.size_limit()

        main(["sync", "--store", str(tmp_path / "mirror")])

        ledger = SyncLedger.load(tmp_path / "mirror" / ".sync_ledger.json")
        assert ledger.lookup("1").state.value == "TooLarge"

    def test_fatal_error_saves_ledger_and_exits_one(self, tmp_path, fake_drive):
        fake_drive.failures["2"] = ExportFailure.other("backend error", 500)
        store = tmp_path / "mirror"

        with pytest.raises(SystemExit) as exc_info:
            main(["sync", "--store", str(store)])

        assert exc_info.value.code == 1
        ledger = SyncLedger.load(store / ".sync_ledger.json")
        assert list(ledger.ids()) == ["1"]

    def test_fatal_error_reported_when_ledger_save_fails(self, tmp_path, fake_drive, caplog):
        fake_drive.failures["2"] = ExportFailure.other("backend error", 500)
        store = tmp_path / "mirror"

        with patch.object(SyncLedger, "save", side_effect=StoreError("disk full")):
            with pytest.raises(SystemExit) as exc_info:
                main(["sync", "--store", str(store)])

        assert exc_info.value.code == 1
        assert "Sync aborted (ExportError): HTTP 500: backend error" in caplog.text
        assert "Ledger not saved after abort: disk full" in caplog.text
        assert "Error: HTTP 500: backend error" in caplog.text

    def test_provider_closed_after_session_obtained(self, tmp_path, fake_drive):
        from gdoc_mirror import auth

        main(["sync", "--store", str(tmp_path / "mirror")])

        auth.SessionProvider.return_value.__exit__.assert_called_once()

    def test_dry_run_leaves_store_untouched(self, tmp_path, fake_drive):
        store = tmp_path / "mirror"

        main(["sync", "--store", str(store), "--dry-run"])

        assert fake_drive.export_calls == []
        assert not store.exists()


class TestStatusCommand:
    """Tests for `gdoc-mirror status`."""

    def test_status_json(self, tmp_path, capsys):
        store = tmp_path / "mirror"
        ledger = SyncLedger()
        ledger.record_downloaded(make_doc(id="1"), "Report.odt")
        ledger.record_too_large(make_doc(id="2", name="Huge"))
        ledger.save(store / ".sync_ledger.json")
        (store / "Report.odt").write_bytes(b"x")

        main(["status", "--store", str(store), "--json"])

        status = json.loads(capsys.readouterr().out)
        assert status["ledger"] == {"total": 2, "Downloaded": 1, "TooLarge": 1}
        assert status["local_file_count"] == 1
        assert status["too_large"] == [{"id": "2", "name": "Huge"}]

    def test_status_empty_store(self, tmp_path, capsys):
        main(["status", "--store", str(tmp_path / "empty")])
        assert "Ledger entries:   0" in capsys.readouterr().out


class TestListCommand:
    """Tests for `gdoc-mirror list`."""

    def test_lists_eligible_only(self, fake_drive, capsys):
        main(["list"])
        out = capsys.readouterr().out
        assert "1 'Report' application/vnd.google-apps.document true" in out
        assert "Budget" not in out
        assert "2 of 3 files shown" in out

    def test_lists_all(self, fake_drive, capsys):
        main(["list", "--all"])
        assert "Budget" in capsys.readouterr().out
