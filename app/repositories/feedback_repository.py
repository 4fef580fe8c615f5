"""Repository for crowd-sourced location feedback ([record, ...])."""
import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..errors import StorageError, ValidationError
from .base import BaseRepository

REQUIRED_FIELDS = ('name', 'description', 'latitude', 'longitude')


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _is_present(value: Any) -> bool:
    # 0 / 0.0 are valid coordinates, only "nothing" counts as missing
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ''
    return True


class FeedbackRepository(BaseRepository):
    """Persists submitted feedback as an append-only JSON list.

    Schema::

        [
            {
                "id":          <int, ms since epoch>,
                "name":        <str>,
                "description": <str>,
                "latitude":    <number>,
                "longitude":   <number>,
                "submittedAt": <ISO-8601 str, UTC>
            },
            ...
        ]

    Records are never edited or removed.  Ids are strictly increasing: if
    the clock has not moved past the newest stored id, the next id is that
    id plus one.
    """

    document_id = 'feedback'

    def __init__(self, store, clock: Optional[Callable[[], datetime.datetime]] = None) -> None:
        super().__init__(store)
        self._clock = clock or _utcnow

    def get_all(self) -> List[Dict]:
        """Return every stored record in submission order."""
        return self._load([])

    def append(self, record: Mapping[str, Any]) -> Dict:
        """Validate *record*, stamp it and add it to the end of the list.

        Returns:
            The stored record including ``id`` and ``submittedAt``.

        Raises:
            ValidationError: one of the required fields is missing or empty.
        """
        missing = [f for f in REQUIRED_FIELDS if not _is_present(record.get(f))]
        if missing:
            raise ValidationError('All fields are required.')

        with self._lock():
            entries = self._load([])
            if not isinstance(entries, list):
                raise StorageError("Feedback document is not a JSON list")
            now = self._clock()
            new_id = int(now.timestamp() * 1000)
            last_id = entries[-1].get('id') if entries and isinstance(entries[-1], dict) else None
            if isinstance(last_id, int) and new_id <= last_id:
                new_id = last_id + 1
            stored = {
                'id': new_id,
                'name': record['name'],
                'description': record['description'],
                'latitude': record['latitude'],
                'longitude': record['longitude'],
                'submittedAt': now.astimezone(datetime.timezone.utc)
                                  .isoformat(timespec='milliseconds')
                                  .replace('+00:00', 'Z'),
            }
            entries.append(stored)
            self._save(entries)
        self._log.info("Stored feedback %d (%s)", stored['id'], stored['name'])
        return stored
