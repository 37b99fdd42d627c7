"""
Drive API Client

Direct HTTP client for the Drive v3 REST endpoints used by the mirror:
files.list and files.export. Pure requests, no Google client library.
"""

import logging
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from gdoc_mirror import __version__
from gdoc_mirror.exceptions import (
    AuthError,
    ExportError,
    ExportFailure,
    ListingTruncatedError,
    TransportError,
)
from gdoc_mirror.models import LIST_FIELDS, ODT_MIME_TYPE, FileList, RemoteDocument, parse_documents

logger = logging.getLogger(__name__)

DRIVE_API_URL = "https://www.googleapis.com/drive/v3"

# Error reason Drive reports when a document exceeds the export size ceiling
SIZE_LIMIT_REASONS = frozenset({"exportSizeLimitExceeded"})


def _error_payload(response: requests.Response) -> dict[str, Any] | None:
    """Decode a JSON error body, if there is one."""
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def _error_reasons(payload: dict[str, Any] | None) -> list[str]:
    """Collect error reasons from both Drive error formats."""
    if not payload:
        return []
    error = payload.get("error")
    if not isinstance(error, dict):
        return []
    reasons = [e.get("reason") for e in error.get("errors") or [] if isinstance(e, dict)]
    reasons += [d.get("reason") for d in error.get("details") or [] if isinstance(d, dict)]
    return [r for r in reasons if r]


def _error_message(payload: dict[str, Any] | None, default: str = "") -> str:
    if payload and isinstance(payload.get("error"), dict):
        return payload["error"].get("message") or default
    return default


def classify_export_response(status_code: int, payload: dict[str, Any] | None) -> ExportFailure:
    """Turn a failed export response into a structured ExportFailure.

    Args:
        status_code: HTTP status of the export response
        payload: Decoded JSON error body, or None

    Returns:
        SIZE_LIMIT_EXCEEDED for Drive's export size refusal, OTHER otherwise
    """
    reasons = _error_reasons(payload)
    message = _error_message(payload, default=", ".join(reasons))
    if status_code == 403 and SIZE_LIMIT_REASONS.intersection(reasons):
        return ExportFailure.size_limit(message, status_code)
    return ExportFailure.other(message or f"export failed with HTTP {status_code}", status_code)


class DriveClient:
    """
    Client for the Drive v3 REST API.

    Example:
        >>> session = SessionProvider().get_session()
        >>> with DriveClient(session) as client:
        ...     for doc in client.list_documents():
        ...         print(doc.id, doc.name)
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        base_url: str | None = None,
        timeout: int = 60,
    ):
        """
        Initialize Drive client.

        Args:
            session: Authorized requests session (creates a bare one if not provided)
            base_url: Override base API URL
            timeout: Request timeout in seconds
        """
        self.base_url = (base_url or DRIVE_API_URL).rstrip("/")
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session or self._create_session()

        if "User-Agent" not in self.session.headers:
            self.session.headers.update({"User-Agent": f"gdoc-mirror/{__version__}"})

    @staticmethod
    def _create_session() -> requests.Session:
        """Create a session without transport-level retries."""
        session = requests.Session()
        adapter = HTTPAdapter(max_retries=Retry(total=0))
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def close(self):
        """Close the session if we own it."""
        if self._owns_session and self.session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def _get(self, endpoint: str, params: dict | None = None) -> requests.Response:
        url = f"{self.base_url}/{endpoint}"
        return self.session.get(url, params=params, timeout=self.timeout)

    # -------------------------------------------------------------------------
    # Catalog Methods
    # -------------------------------------------------------------------------

    def list_documents(self) -> list[RemoteDocument]:
        """
        List files visible to the session.

        Only the first page is requested. A listing that reports further pages
        is refused rather than mirrored partially.

        Returns:
            RemoteDocument objects in listing order

        Raises:
            AuthError: If the session is not authorized
            ListingTruncatedError: If the listing has more than one page
            TransportError: On network or HTTP errors
            EligibilityMismatchError: If an entry lacks a required field
        """
        params = {"fields": LIST_FIELDS, "pageSize": 1000}
        try:
            response = self._get("files", params)
        except requests.RequestException as e:
            raise TransportError(f"Listing request failed: {type(e).__name__}: {e}") from e

        if not response.ok:
            payload = _error_payload(response)
            message = _error_message(payload, default=response.reason or "")
            error_cls = AuthError if response.status_code == 401 else TransportError
            raise error_cls(
                f"Listing failed with HTTP {response.status_code}: {message}",
                status_code=response.status_code,
            )

        try:
            page = FileList.model_validate(response.json())
        except ValueError as e:
            raise TransportError(f"Malformed listing response: {e}") from e

        if page.next_page_token:
            raise ListingTruncatedError(
                f"Listing returned more than {params['pageSize']} files; "
                "multi-page listings are not supported"
            )

        documents = parse_documents(page.files)
        logger.debug(f"Listed {len(documents)} files")
        return documents

    def export(self, document_id: str, mime_type: str = ODT_MIME_TYPE) -> bytes:
        """
        Export a native document.

        Args:
            document_id: Drive file id
            mime_type: Export format

        Returns:
            Exported bytes

        Raises:
            ExportError: On any failure, carrying a classified ExportFailure
        """
        try:
            response = self._get(f"files/{document_id}/export", {"mimeType": mime_type})
        except requests.RequestException as e:
            raise ExportError(ExportFailure.other(f"{type(e).__name__}: {e}")) from e

        if not response.ok:
            raise ExportError(
                classify_export_response(response.status_code, _error_payload(response))
            )
        return response.content
