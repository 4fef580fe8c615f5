"""Repository base class used by all concrete repositories."""
import logging
from typing import Any

from .document_store import DocumentStore


def empty_feature_collection() -> dict:
    return {'type': 'FeatureCollection', 'features': []}


class BaseRepository:
    """Binds one named document of a :class:`DocumentStore`.

    Sub-classes call :meth:`_load` to read the current document and
    :meth:`_save` to replace it.  Nothing is cached between calls: every
    read goes back to storage and every write rewrites the whole document.
    """

    document_id: str = ''

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._log = logging.getLogger(f'nwp.repository.{type(self).__name__}')

    def _load(self, default: Any) -> Any:
        """Return the stored document, or *default* if it does not exist yet."""
        return self._store.read(self.document_id, default)

    def _save(self, data: Any) -> None:
        """Replace the stored document with *data*."""
        self._store.write(self.document_id, data)

    def _lock(self):
        return self._store.lock(self.document_id)
