"""
Attachment file store.

Files live under ``<DATA_DIR>/documents/<project_id>/<timestamp_ms>_<filename>``.
Callers only ever see the path relative to ``DATA_DIR``; it is what gets
recorded on CorrespondenceItem / ProjectDocument entries.
"""

import base64
import logging
import os
import time

from werkzeug.utils import secure_filename

from siteledger.core.exceptions import NotFoundError, StorageError

logger = logging.getLogger(__name__)

DOCUMENTS_DIR = "documents"


def format_file_size(size_bytes: int) -> str:
    """2048 -> '2.00 KB'"""
    return f"{size_bytes / 1024:.2f} KB"


class FileStore:
    """Opaque blob storage rooted at the data directory."""

    def __init__(self, root: str):
        self.root = os.path.abspath(root)

    def _absolute(self, rel_path: str) -> str:
        full = os.path.abspath(os.path.join(self.root, rel_path))
        if not full.startswith(self.root + os.sep):
            raise StorageError("Path escapes the data directory", path=rel_path)
        return full

    def save(self, project_id: str, filename: str, content: bytes) -> str:
        safe_name = secure_filename(filename) or "upload.bin"
        rel_path = "/".join(
            (DOCUMENTS_DIR, secure_filename(project_id), f"{int(time.time() * 1000)}_{safe_name}")
        )
        full = self._absolute(rel_path)
        try:
            os.makedirs(os.path.dirname(full), exist_ok=True)
            with open(full, "wb") as fh:
                fh.write(content)
        except OSError as exc:
            logger.error("Saving attachment %s failed: %s", rel_path, exc)
            raise StorageError("Could not save file", path=rel_path) from exc
        logger.info("Stored attachment %s (%d bytes)", rel_path, len(content))
        return rel_path

    def read(self, rel_path: str) -> bytes:
        if not rel_path:
            raise NotFoundError(resource="File")
        full = self._absolute(rel_path)
        try:
            with open(full, "rb") as fh:
                return fh.read()
        except FileNotFoundError:
            raise NotFoundError(resource="File", resource_id=rel_path) from None
        except OSError as exc:
            logger.error("Reading attachment %s failed: %s", rel_path, exc)
            raise StorageError("Could not read file", path=rel_path) from exc

    def load_base64(self, rel_path: str) -> str:
        """File contents as a data URL for inline display."""
        encoded = base64.b64encode(self.read(rel_path)).decode("ascii")
        return f"data:application/octet-stream;base64,{encoded}"

    def delete(self, rel_path: str) -> None:
        """Remove a stored file. A file that is already gone is not an error."""
        if not rel_path:
            return
        full = self._absolute(rel_path)
        try:
            os.remove(full)
        except FileNotFoundError:
            logger.warning("Attachment %s already missing", rel_path)
        except OSError as exc:
            logger.error("Deleting attachment %s failed: %s", rel_path, exc)
            raise StorageError("Could not delete file", path=rel_path) from exc
