from vector_service.application.services.ingest_service import IngestService
from vector_service.application.services.query_service import QueryService

__all__ = ["IngestService", "QueryService"]
