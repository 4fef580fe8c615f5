"""Repository package — expose the store and all concrete repositories from one import."""
from .document_store import DocumentStore
from .asset_repository import AssetRepository, UNCATEGORIZED, category_of
from .boundary_repository import BoundaryRepository
from .feedback_repository import FeedbackRepository

__all__ = [
    'DocumentStore',
    'AssetRepository',
    'BoundaryRepository',
    'FeedbackRepository',
    'UNCATEGORIZED',
    'category_of',
]
