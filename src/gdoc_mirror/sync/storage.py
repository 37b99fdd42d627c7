"""Storage layout and filename allocation for exported documents."""

import logging
import re
from pathlib import Path
from typing import Collection

from gdoc_mirror.exceptions import StoreError
from gdoc_mirror.sync.state import LEDGER_FILENAME

logger = logging.getLogger(__name__)

# Anything outside ASCII letters, digits, hyphen and underscore
UNSAFE_CHARS_PATTERN = re.compile(r"[^A-Za-z0-9_-]")

EXPORT_EXTENSION = ".odt"


def sanitize(name: str) -> str:
    """Replace every unsafe character of a display name with an underscore.

    Args:
        name: Remote display name

    Returns:
        Name containing only ASCII letters, digits, '-' and '_'
    """
    return UNSAFE_CHARS_PATTERN.sub("_", name)


class StorageLayout:
    """Manages the flat store directory.

    Structure:
        <store_dir>/
        ├── Report.odt
        ├── Report_1.odt
        ├── Meeting_notes.odt
        └── .sync_ledger.json
    """

    def __init__(self, store_dir: str | Path, extension: str = EXPORT_EXTENSION):
        """Initialize storage layout.

        Args:
            store_dir: Directory holding the ledger and exported files
            extension: Extension appended to allocated filenames
        """
        self.store_dir = Path(store_dir).resolve()
        self.extension = extension

    @property
    def ledger_path(self) -> Path:
        return self.store_dir / LEDGER_FILENAME

    def ensure_store(self):
        """Create the store directory if needed."""
        try:
            self.store_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot create store directory {self.store_dir}: {e}") from e

    def _validate_filename(self, filename: str) -> str:
        """Validate that a filename names an entry directly inside the store.

        Raises:
            StoreError: If the filename is empty or contains path components
        """
        if not filename or filename in (".", "..") or Path(filename).name != filename:
            raise StoreError(f"Invalid filename for store directory: {filename!r}")
        return filename

    def target_path(self, filename: str) -> Path:
        """Get the full path for a stored filename."""
        return self.store_dir / self._validate_filename(filename)

    def exists(self, filename: str) -> bool:
        return (self.store_dir / filename).exists()

    def candidate(self, name: str, index: int = 0) -> str:
        """Build the n-th filename candidate for a display name.

        Index 0 is ``<sanitized>.odt``, index n is ``<sanitized>_<n>.odt``.
        """
        base = sanitize(name)
        if index:
            base = f"{base}_{index}"
        return f"{base}{self.extension}"

    def allocate(self, name: str, reserved: Collection[str] = ()) -> str:
        """Allocate a filename for a display name.

        Returns the first candidate that neither exists in the store nor is
        in ``reserved``. For a fixed directory snapshot the result depends
        only on the arguments, so callers must persist it instead of
        allocating again.

        Args:
            name: Remote display name
            reserved: Filenames already claimed by other documents

        Returns:
            Basename inside the store directory
        """
        index = 0
        while True:
            filename = self.candidate(name, index)
            if filename not in reserved and not self.exists(filename):
                if index:
                    logger.debug(f"Name collision for '{name}', allocated {filename}")
                return filename
            index += 1

    def write_document(self, filename: str, content: bytes) -> Path:
        """Write exported content, overwriting any existing file.

        Raises:
            StoreError: If the file cannot be written
        """
        path = self.target_path(filename)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as f:
                f.write(content)
        except OSError as e:
            raise StoreError(f"Failed to write {path}: {e}") from e
        return path

    def list_documents(self) -> list[Path]:
        """List exported files in the store."""
        if not self.store_dir.exists():
            return []
        return sorted(
            f for f in self.store_dir.iterdir()
            if f.is_file() and f.suffix == self.extension
        )
