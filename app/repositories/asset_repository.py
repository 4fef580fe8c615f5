"""Repository for the tourism asset FeatureCollection."""
from typing import Any, Dict

from ..errors import ValidationError
from .base import BaseRepository, empty_feature_collection

UNCATEGORIZED = 'Uncategorized'


def category_of(feature: Any) -> str:
    """Return the feature's ``properties.category``, or ``"Uncategorized"``.

    Malformed entries (not a mapping, or with non-mapping properties) are
    uncategorized too, so every stored feature lands in exactly one group.
    """
    if not isinstance(feature, dict):
        return UNCATEGORIZED
    properties = feature.get('properties')
    if not isinstance(properties, dict):
        return UNCATEGORIZED
    category = properties.get('category')
    if category is None or category == '':
        return UNCATEGORIZED
    return str(category)


class AssetRepository(BaseRepository):
    """Persists the tourism assets as one GeoJSON document.

    Schema::

        {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "geometry":   {"type": "Point", "coordinates": [<lon>, <lat>]},
                    "properties": {"name": <str>, "category": <str>, "description": <str>}
                },
                ...
            ]
        }
    """

    document_id = 'assets'

    def get_all(self) -> Dict[str, Any]:
        """Return the stored FeatureCollection (empty on first run)."""
        return self._load(empty_feature_collection())

    def get_by_category(self, category: str) -> Dict[str, Any]:
        """Return a FeatureCollection holding only the assets in *category*."""
        collection = self.get_all()
        filtered = dict(collection)
        filtered['features'] = [
            f for f in collection.get('features') or []
            if category_of(f) == category
        ]
        return filtered

    def replace_all(self, collection: Any) -> int:
        """Discard the stored assets and persist *collection* verbatim.

        Returns:
            Number of features written.

        Raises:
            ValidationError: *collection* has no ``features`` list.
        """
        if not isinstance(collection, dict) or 'features' not in collection:
            raise ValidationError('Invalid GeoJSON file format.')
        features = collection['features']
        if not isinstance(features, list):
            raise ValidationError('Invalid GeoJSON file format: "features" must be a list.')
        with self._lock():
            self._save(collection)
        self._log.info("Replaced asset dataset with %d features", len(features))
        return len(features)
