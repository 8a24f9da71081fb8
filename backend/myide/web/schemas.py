from pydantic import BaseModel, Field
from typing import Optional, List, Literal


class IndexRequest(BaseModel):
    workspace: str


class IndexProgressResponse(BaseModel):
    status: str
    message: str = ""
    total: Optional[int] = None
    done: Optional[int] = None


class IndexStatusResponse(BaseModel):
    indexed: bool
    chunks: int
    workspace: str
    indexed_at: Optional[str]
    is_indexing: bool
    progress: IndexProgressResponse


class SearchRequest(BaseModel):
    query: str
    top_k: int = Field(default=5, ge=1, le=50)


class SearchResult(BaseModel):
    file_path: str
    start_line: int
    end_line: int
    score: float
    text: str


class SearchResponse(BaseModel):
    results: List[SearchResult]


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(BaseModel):
    messages: List[ChatMessage]
    file_context: Optional[str] = None
    file_path: Optional[str] = None
    use_rag: bool = True
    use_research: bool = True


class TeamRequest(BaseModel):
    request: str
    file_context: Optional[str] = None
    file_path: Optional[str] = None
    use_rag: bool = True
    use_research: bool = False


class MemoryCreate(BaseModel):
    fact: str


class MemoryItem(BaseModel):
    fact: str
    added_at: str
    use_count: int


class MemoryListResponse(BaseModel):
    memories: List[MemoryItem]
    total: int


class OkResponse(BaseModel):
    ok: bool = True
    total: Optional[int] = None
