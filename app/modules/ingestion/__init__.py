from .domain.pipeline import IngestionPipeline
from .domain.persistence import SpendPersistenceService

__all__ = ["IngestionPipeline", "SpendPersistenceService"]
