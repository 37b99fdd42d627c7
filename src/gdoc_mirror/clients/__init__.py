"""Catalog client implementations."""

from gdoc_mirror.clients.base import CatalogClient
from gdoc_mirror.clients.drive import DriveClient, classify_export_response

__all__ = ["CatalogClient", "DriveClient", "classify_export_response"]
