from src.infrastructure.reference_data.in_memory import InMemoryReferenceDataRepository
from src.infrastructure.reference_data.postgres import PostgresReferenceDataRepository

__all__ = ["InMemoryReferenceDataRepository", "PostgresReferenceDataRepository"]
