"""Derived statistics over the tourism asset dataset."""
import logging
from collections import Counter
from typing import Dict, List

from ..repositories.asset_repository import AssetRepository, category_of

logger = logging.getLogger('nwp.stats')


class StatisticsService:
    """Computes summaries from
    :class:`~app.repositories.asset_repository.AssetRepository`.

    Rules
    -----
    * Assets without a ``category`` property (or with an empty one) are
      counted under ``"Uncategorized"``, as are malformed entries, so the
      counts always add up to the number of stored features.
    * Counts are emitted as strings; the map client parses them.
    * Entry order is first-seen order and carries no meaning.
    """

    def __init__(self, assets: AssetRepository) -> None:
        self._assets = assets

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def category_distribution(self) -> List[Dict[str, str]]:
        """Return ``[{"category": ..., "count": "<n>"}, ...]`` for current assets."""
        features = self._assets.get_all().get('features') or []
        counts = Counter(category_of(f) for f in features)
        logger.debug("Category distribution over %d assets: %d categories",
                     len(features), len(counts))
        return [{'category': category, 'count': str(n)} for category, n in counts.items()]
