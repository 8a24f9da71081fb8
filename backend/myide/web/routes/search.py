"""Search routes."""

from fastapi import APIRouter, Depends

from ..schemas import SearchRequest, SearchResponse, SearchResult
from ..services import Services, get_services

router = APIRouter()


@router.post("/search", response_model=SearchResponse)
async def search(request: SearchRequest, services: Services = Depends(get_services)):
    hits = await services.searcher.search(request.query, request.top_k)

    results = []
    for score, chunk in hits:
        result = SearchResult(
            file_path=chunk.file_path,
            start_line=chunk.start_line,
            end_line=chunk.end_line,
            score=score,
            text=chunk.raw_text,
        )
        results.append(result)

    return SearchResponse(results=results)
