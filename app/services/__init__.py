"""Services package — expose all concrete services from one import."""
from .statistics_service import StatisticsService

__all__ = [
    'StatisticsService',
]
