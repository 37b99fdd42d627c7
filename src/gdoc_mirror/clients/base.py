"""Base protocol for catalog clients."""

from typing import Protocol, runtime_checkable

from gdoc_mirror.models import RemoteDocument


@runtime_checkable
class CatalogClient(Protocol):
    """Protocol defining the interface the sync engine needs from a catalog.

    DriveClient implements it over the Drive v3 REST API; tests use
    in-memory fakes.
    """

    def list_documents(self) -> list[RemoteDocument]:
        """List every file visible to the session.

        Returns:
            Documents in listing order

        Raises:
            EligibilityMismatchError: If an entry lacks a required field
            TransportError: If the listing cannot be retrieved
        """
        ...

    def export(self, document_id: str, mime_type: str) -> bytes:
        """Export a document in the given format.

        Args:
            document_id: Remote document id
            mime_type: Target export format

        Returns:
            Exported content

        Raises:
            ExportError: Carrying a structured ExportFailure
        """
        ...
