"""Pydantic models for Drive v3 API responses."""

from typing import Any

from pydantic import BaseModel, Field, ValidationError

from gdoc_mirror.exceptions import EligibilityMismatchError

GOOGLE_DOCUMENT_MIME_TYPE = "application/vnd.google-apps.document"
ODT_MIME_TYPE = "application/vnd.oasis.opendocument.text"

# Fields requested from files.list; every one is required on RemoteDocument
LIST_FIELDS = "nextPageToken,files(id,name,mimeType,ownedByMe,modifiedTime,trashed)"


class RemoteDocument(BaseModel):
    """A file entry from the Drive catalog.

    ``modified_time`` is kept as the raw string returned by the API and is
    only ever compared for equality.
    """

    id: str
    name: str
    mime_type: str = Field(alias="mimeType")
    owned_by_me: bool = Field(alias="ownedByMe")
    modified_time: str = Field(alias="modifiedTime")
    trashed: bool

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def is_google_document(self) -> bool:
        return self.mime_type == GOOGLE_DOCUMENT_MIME_TYPE

    @property
    def is_eligible(self) -> bool:
        """Native document, owned by the authenticated user, not in the trash."""
        return self.is_google_document and self.owned_by_me and not self.trashed


class FileList(BaseModel):
    """Single page of a files.list response."""

    files: list[dict[str, Any]] = Field(default_factory=list)
    next_page_token: str | None = Field(default=None, alias="nextPageToken")

    model_config = {"populate_by_name": True}


def parse_documents(items: list[dict[str, Any]]) -> list[RemoteDocument]:
    """Validate raw catalog entries into RemoteDocument objects.

    Args:
        items: ``files`` array of a files.list response

    Returns:
        Documents in listing order

    Raises:
        EligibilityMismatchError: If an entry lacks a required field
    """
    documents = []
    for index, item in enumerate(items):
        try:
            documents.append(RemoteDocument.model_validate(item))
        except ValidationError as e:
            missing = ", ".join(
                ".".join(str(part) for part in err["loc"]) for err in e.errors()
            )
            ident = item.get("id", f"#{index}") if isinstance(item, dict) else f"#{index}"
            raise EligibilityMismatchError(
                f"Catalog entry {ident} is missing or has invalid fields: {missing}"
            ) from e
    return documents
