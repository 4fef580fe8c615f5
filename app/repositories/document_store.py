"""File-backed store of named JSON documents."""
import json
import logging
import os
import tempfile
import threading
from typing import Any, Dict

from ..errors import StartupError, StorageError

logger = logging.getLogger('nwp.store')


class DocumentStore:
    """Reads and writes whole JSON documents identified by a short id.

    Each id maps to one file (see :meth:`app.config.AppConfig.document_paths`).
    :meth:`read` answers a missing document with the caller-supplied
    default; every other failure surfaces as :class:`StorageError`.

    Writes serialise the full value in memory first, then go through a
    sibling temp file that is renamed over the target, so readers see
    either the previous document or the new one and nothing in between.
    """

    def __init__(self, paths: Dict[str, str]) -> None:
        self._paths = dict(paths)
        self._locks: Dict[str, threading.RLock] = {
            doc_id: threading.RLock() for doc_id in self._paths
        }

    def path_for(self, document_id: str) -> str:
        """Return the file path of *document_id* (``KeyError`` if unknown)."""
        return self._paths[document_id]

    def lock(self, document_id: str) -> threading.RLock:
        """Per-document lock for callers that read, modify and write back."""
        return self._locks[document_id]

    def exists(self, document_id: str) -> bool:
        """Return ``True`` if *document_id* has been created.

        Only "no such file" counts as absent; any other failure to stat the
        path raises :class:`StorageError`.
        """
        path = self.path_for(document_id)
        try:
            os.stat(path)
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.error("Could not stat %s (%s): %s", document_id, path, exc)
            raise StorageError(f"Could not access document '{document_id}'") from exc
        return True

    def read(self, document_id: str, default: Any) -> Any:
        """Load and parse *document_id*, or return *default* if it is absent."""
        path = self.path_for(document_id)
        try:
            with open(path, 'r', encoding='utf-8') as fh:
                return json.load(fh)
        except FileNotFoundError:
            logger.debug("Document %s not found at %s, using default", document_id, path)
            return default
        except (OSError, ValueError) as exc:
            logger.error("Could not read %s (%s): %s", document_id, path, exc)
            raise StorageError(f"Could not read document '{document_id}'") from exc

    def write(self, document_id: str, value: Any) -> None:
        """Replace the whole of *document_id* with *value*."""
        path = self.path_for(document_id)
        try:
            payload = json.dumps(value, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise StorageError(f"Document '{document_id}' is not JSON serialisable") from exc

        dir_name = os.path.dirname(os.path.abspath(path))
        try:
            fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix='.tmp')
        except OSError as exc:
            logger.error("Could not create temp file for %s in %s: %s", document_id, dir_name, exc)
            raise StorageError(f"Could not write document '{document_id}'") from exc
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                fh.write(payload)
            os.replace(tmp_path, path)
        except OSError as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            logger.error("Could not write %s (%s): %s", document_id, path, exc)
            raise StorageError(f"Could not write document '{document_id}'") from exc
        logger.debug("Wrote %s (%d bytes)", document_id, len(payload))

    def check_location(self, document_id: str) -> None:
        """Preflight check for *document_id*'s storage location.

        Raises:
            StartupError: the containing directory is missing or not
                accessible, or the document exists but cannot be read.
                A document that simply has not been created yet passes.
        """
        path = self.path_for(document_id)
        dir_name = os.path.dirname(os.path.abspath(path))
        if not os.path.isdir(dir_name):
            raise StartupError(
                f"Storage directory for '{document_id}' does not exist: {dir_name}")
        if not os.access(dir_name, os.R_OK | os.W_OK | os.X_OK):
            raise StartupError(
                f"Storage directory for '{document_id}' is not accessible: {dir_name}")
        if os.path.exists(path):
            if not os.path.isfile(path):
                raise StartupError(f"'{document_id}' location is not a regular file: {path}")
            if not os.access(path, os.R_OK):
                raise StartupError(f"'{document_id}' document is not readable: {path}")
        else:
            logger.info("Document %s not created yet at %s; serving defaults", document_id, path)
