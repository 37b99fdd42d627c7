"""Pydantic models for Drive catalog entries and OAuth files."""

from gdoc_mirror.models.auth import (
    ClientSettings,
    InstalledAppSettings,
    StoredCredentials,
)
from gdoc_mirror.models.drive import (
    GOOGLE_DOCUMENT_MIME_TYPE,
    LIST_FIELDS,
    ODT_MIME_TYPE,
    FileList,
    RemoteDocument,
    parse_documents,
)

__all__ = [
    # Drive models
    "FileList",
    "GOOGLE_DOCUMENT_MIME_TYPE",
    "LIST_FIELDS",
    "ODT_MIME_TYPE",
    "RemoteDocument",
    "parse_documents",
    # OAuth models
    "ClientSettings",
    "InstalledAppSettings",
    "StoredCredentials",
]
