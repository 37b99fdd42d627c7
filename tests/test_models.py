"""Tests for Drive and OAuth models."""

from datetime import datetime, timedelta, timezone

import pytest

from gdoc_mirror.exceptions import EligibilityMismatchError
from gdoc_mirror.models import (
    ClientSettings,
    FileList,
    RemoteDocument,
    StoredCredentials,
    parse_documents,
)


def drive_file(**overrides):
    data = {
        "id": "1AbC",
        "name": "Quarterly report",
        "mimeType": "application/vnd.google-apps.document",
        "ownedByMe": True,
        "modifiedTime": "2026-03-01T09:15:00.000Z",
        "trashed": False,
    }
    data.update(overrides)
    return data


class TestRemoteDocument:
    """Tests for RemoteDocument model."""

    def test_parse_basic(self):
        doc = RemoteDocument.model_validate(drive_file())
        assert doc.id == "1AbC"
        assert doc.name == "Quarterly report"
        assert doc.owned_by_me is True
        assert doc.modified_time == "2026-03-01T09:15:00.000Z"
        assert doc.is_eligible

    def test_modified_time_kept_verbatim(self):
        doc = RemoteDocument.model_validate(drive_file(modifiedTime="opaque-token-7"))
        assert doc.modified_time == "opaque-token-7"

    def test_not_eligible_when_spreadsheet(self):
        doc = RemoteDocument.model_validate(
            drive_file(mimeType="application/vnd.google-apps.spreadsheet")
        )
        assert not doc.is_google_document
        assert not doc.is_eligible

    def test_not_eligible_when_shared_with_me(self):
        assert not RemoteDocument.model_validate(drive_file(ownedByMe=False)).is_eligible

    def test_not_eligible_when_trashed(self):
        assert not RemoteDocument.model_validate(drive_file(trashed=True)).is_eligible


class TestParseDocuments:
    """Tests for validating catalog entries."""

    def test_keeps_listing_order(self):
        docs = parse_documents([drive_file(id="b"), drive_file(id="a")])
        assert [d.id for d in docs] == ["b", "a"]

    @pytest.mark.parametrize(
        "field", ["id", "name", "mimeType", "ownedByMe", "modifiedTime", "trashed"]
    )
    def test_missing_field_is_fatal(self, field):
        entry = drive_file()
        del entry[field]
        with pytest.raises(EligibilityMismatchError, match=field):
            parse_documents([drive_file(id="ok"), entry])

    def test_error_names_document(self):
        entry = drive_file(id="broken")
        del entry["trashed"]
        with pytest.raises(EligibilityMismatchError, match="broken"):
            parse_documents([entry])


class TestFileList:
    """Tests for FileList model."""

    def test_parse(self):
        page = FileList.model_validate({"files": [drive_file()], "nextPageToken": "t2"})
        assert len(page.files) == 1
        assert page.next_page_token == "t2"

    def test_empty(self):
        page = FileList.model_validate({})
        assert page.files == []
        assert page.next_page_token is None


class TestClientSettings:
    """Tests for ClientSettings model."""

    def test_parse_installed(self):
        settings = ClientSettings.model_validate({
            "installed": {
                "client_id": "id.apps.googleusercontent.com",
                "client_secret": "s3cret",
                "project_id": "mirror",
                "redirect_uris": ["http://localhost:8080"],
            }
        })
        assert settings.installed.client_id == "id.apps.googleusercontent.com"
        assert settings.installed.redirect_uri == "http://localhost:8080"
        assert settings.installed.token_uri == "https://oauth2.googleapis.com/token"

    def test_missing_installed(self):
        assert ClientSettings.model_validate({"web": {}}).installed is None


class TestStoredCredentials:
    """Tests for StoredCredentials model."""

    def test_from_token_response(self):
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        creds = StoredCredentials.from_token_response(
            {"access_token": "at", "refresh_token": "rt", "expires_in": 3600},
            now=now,
        )
        assert creds.access_token == "at"
        assert creds.refresh_token == "rt"
        assert creds.expires_at == now + timedelta(hours=1)

    def test_refresh_response_keeps_refresh_token(self):
        creds = StoredCredentials.from_token_response(
            {"access_token": "new", "expires_in": 3600},
            previous_refresh_token="rt",
        )
        assert creds.refresh_token == "rt"

    def test_is_expired(self):
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        creds = StoredCredentials(access_token="at", expires_at=now + timedelta(seconds=30))
        assert creds.is_expired(now=now)
        assert not creds.is_expired(margin=0, now=now)

    def test_no_expiry_never_expires(self):
        assert not StoredCredentials(access_token="at").is_expired()
