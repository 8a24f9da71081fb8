"""Data models for myide."""

from __future__ import annotations

import dataclasses
from typing import Dict, List, Optional, Tuple


@dataclasses.dataclass(frozen=True)
class Chunk:
    """A contiguous line range of one file, the unit of embedding and retrieval."""

    file_path: str
    start_line: int
    end_line: int
    text: str
    raw_text: str

    @property
    def id(self) -> str:
        return f"{self.file_path}:{self.start_line}"

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "file_path": self.file_path,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "text": self.text,
            "raw_text": self.raw_text,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Chunk":
        return cls(
            file_path=str(data["file_path"]),
            start_line=int(data["start_line"]),
            end_line=int(data["end_line"]),
            text=str(data["text"]),
            raw_text=str(data["raw_text"]),
        )


# (score, chunk), best first
SearchHit = Tuple[float, Chunk]


@dataclasses.dataclass(frozen=True)
class IndexSnapshot:
    """Complete retrieval index at one point in time.

    ``chunks`` and ``embeddings`` are positionally aligned. A snapshot is never
    mutated; a new index run builds a fresh one and swaps it in.
    """

    workspace: str = ""
    chunks: Tuple[Chunk, ...] = ()
    embeddings: Tuple[Tuple[float, ...], ...] = ()
    indexed_at: Optional[str] = None
    metadata: Dict = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(self.chunks) != len(self.embeddings):
            raise ValueError(
                f"chunks and embeddings differ in length: {len(self.chunks)} vs {len(self.embeddings)}"
            )

    @classmethod
    def empty(cls) -> "IndexSnapshot":
        return cls()

    @classmethod
    def build(
        cls,
        workspace: str,
        chunks: List[Chunk],
        embeddings: List[List[float]],
        indexed_at: Optional[str] = None,
        metadata: Optional[Dict] = None,
    ) -> "IndexSnapshot":
        return cls(
            workspace=workspace,
            chunks=tuple(chunks),
            embeddings=tuple(tuple(float(x) for x in v) for v in embeddings),
            indexed_at=indexed_at,
            metadata=dict(metadata or {}),
        )

    def __len__(self) -> int:
        return len(self.chunks)

    @property
    def is_empty(self) -> bool:
        return not self.chunks


@dataclasses.dataclass
class IndexProgress:
    """Indexing progress as reported to observers and ``status()``."""

    status: str = "idle"  # idle, scanning, embedding, done, error
    message: str = ""
    total: Optional[int] = None
    done: Optional[int] = None

    def to_dict(self) -> Dict:
        data = {"status": self.status, "message": self.message}
        if self.total is not None:
            data["total"] = self.total
        if self.done is not None:
            data["done"] = self.done
        return data


@dataclasses.dataclass(frozen=True)
class IndexResult:
    chunks: int
    files: int
