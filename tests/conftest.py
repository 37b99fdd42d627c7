"""Pytest configuration and shared fixtures for gdoc-mirror tests."""

import pytest

from gdoc_mirror.exceptions import ExportError, ExportFailure
from gdoc_mirror.models import GOOGLE_DOCUMENT_MIME_TYPE, RemoteDocument
from gdoc_mirror.sync import StorageLayout, SyncLedger


def pytest_addoption(parser):
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="Run integration tests (requires network and Drive credentials)",
    )


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (requires network)"
    )


def pytest_collection_modifyitems(config, items):
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def make_doc(
    id="1",
    name="Report",
    modified_time="v1",
    mime_type=GOOGLE_DOCUMENT_MIME_TYPE,
    owned_by_me=True,
    trashed=False,
) -> RemoteDocument:
    return RemoteDocument(
        id=id,
        name=name,
        mime_type=mime_type,
        owned_by_me=owned_by_me,
        modified_time=modified_time,
        trashed=trashed,
    )


class FakeCatalogClient:
    """In-memory catalog: export returns preset content or raises preset failures."""

    def __init__(self, documents=None, contents=None, failures=None):
        self.documents = list(documents or [])
        self.contents = dict(contents or {})
        self.failures: dict[str, ExportFailure] = dict(failures or {})
        self.export_calls: list[tuple[str, str]] = []

    def list_documents(self):
        return list(self.documents)

    def export(self, document_id, mime_type):
        self.export_calls.append((document_id, mime_type))
        if document_id in self.failures:
            raise ExportError(self.failures[document_id])
        return self.contents.get(document_id, f"content of {document_id}".encode())


@pytest.fixture
def store(tmp_path):
    return StorageLayout(tmp_path / "store")


@pytest.fixture
def ledger():
    return SyncLedger()


@pytest.fixture
def catalog():
    return FakeCatalogClient()
