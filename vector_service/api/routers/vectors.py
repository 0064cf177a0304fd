"""
Vector API endpoints.

Routes: POST /embed, PUT /upsert, POST /query, POST /delete

Dependencies: vector_service.application.services, vector_service.models
System role: Embedding, ingestion and retrieval HTTP API
"""

from fastapi import APIRouter, Depends

from vector_service.api.deps import get_ingest_service, get_query_service, require_api_key
from vector_service.api.routers.error_handling import handle_service_errors
from vector_service.application.services import IngestService, QueryService
from vector_service.models.common import ErrorResponse, SuccessResponse
from vector_service.models.ingest import (
    DeleteData,
    DeleteRequest,
    EmbedData,
    EmbedRequest,
    UpsertData,
    UpsertRequest,
)
from vector_service.models.query import QueryData, QueryRequest

router = APIRouter(
    tags=["vectors"],
    dependencies=[Depends(require_api_key)],
    responses={
        400: {"model": ErrorResponse},
        401: {"description": "Missing or invalid bearer token"},
        502: {"model": ErrorResponse},
    },
)


@router.post("/embed", response_model=SuccessResponse[EmbedData])
@handle_service_errors
def embed(
    request: EmbedRequest,
    ingest_service: IngestService = Depends(get_ingest_service),
) -> SuccessResponse[EmbedData]:
    """Chunk a text and return each chunk with its embedding."""
    return SuccessResponse(data=ingest_service.embed(request))


@router.put("/upsert", response_model=SuccessResponse[UpsertData])
@handle_service_errors
def upsert(
    request: UpsertRequest,
    ingest_service: IngestService = Depends(get_ingest_service),
) -> SuccessResponse[UpsertData]:
    """Upsert caller-supplied points, creating the collection if allowed."""
    return SuccessResponse(data=ingest_service.upsert(request))


@router.post("/query", response_model=SuccessResponse[QueryData])
@handle_service_errors
def query(
    request: QueryRequest,
    query_service: QueryService = Depends(get_query_service),
) -> SuccessResponse[QueryData]:
    """
    Similarity search with optional MMR or diversity re-ranking.

    Args:
        request: Text or vector query, filters and re-ranking options
        query_service: Injected QueryService

    Returns:
        SuccessResponse[QueryData]: Ranked results and query summary
    """
    return SuccessResponse(data=query_service.query(request))


@router.post("/delete", response_model=SuccessResponse[DeleteData])
@handle_service_errors
def delete(
    request: DeleteRequest,
    ingest_service: IngestService = Depends(get_ingest_service),
) -> SuccessResponse[DeleteData]:
    """Delete points by ids, owning document id, or payload filter."""
    return SuccessResponse(data=ingest_service.delete(request))
