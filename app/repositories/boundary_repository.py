"""Read-only repository for the province boundary FeatureCollection."""
from typing import Any, Dict

from .base import BaseRepository, empty_feature_collection


class BoundaryRepository(BaseRepository):
    """Serves the boundary polygons.  The file is maintained out of band."""

    document_id = 'boundary'

    def get(self) -> Dict[str, Any]:
        return self._load(empty_feature_collection())
