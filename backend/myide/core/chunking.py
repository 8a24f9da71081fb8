"""Line-window chunking of source files."""

from __future__ import annotations

import logging
from typing import List

from ..errors import ConfigError
from .models import Chunk

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 60
DEFAULT_OVERLAP = 10
# Windows whose stripped text is shorter than this are skipped.
DEFAULT_MIN_CHARS = 20


def chunk_header(file_path: str, start_line: int, end_line: int) -> str:
    return f"// File: {file_path} (lines {start_line}-{end_line})"


class Chunker:
    """Abstract base class for text chunking."""

    def chunk(self, file_path: str, content: str) -> List[Chunk]:
        """Chunk file content.

        Args:
            file_path: Path of the file, embedded in each chunk header
            content: Full text of the file

        Returns:
            List of chunks in file order
        """
        raise NotImplementedError


class LineWindowChunker(Chunker):
    """Fixed-size overlapping line windows."""

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        overlap: int = DEFAULT_OVERLAP,
        min_chars: int = DEFAULT_MIN_CHARS,
    ):
        if chunk_size < 1:
            raise ConfigError(f"chunk_size must be >= 1, got {chunk_size}")
        if overlap < 0 or overlap >= chunk_size:
            raise ConfigError(f"overlap must be in [0, chunk_size), got overlap={overlap} chunk_size={chunk_size}")
        self.chunk_size = chunk_size
        self.overlap = overlap
        self.min_chars = min_chars

    @property
    def stride(self) -> int:
        return self.chunk_size - self.overlap

    def chunk(self, file_path: str, content: str) -> List[Chunk]:
        lines = content.split("\n")
        if len(lines) > 1 and lines[-1] == "":
            # trailing newline does not start another line
            lines.pop()
        total_lines = len(lines)
        chunks: List[Chunk] = []

        for start_idx in range(0, total_lines, self.stride):
            end_idx = min(start_idx + self.chunk_size, total_lines)
            raw_text = "\n".join(lines[start_idx:end_idx])

            if len(raw_text.strip()) >= self.min_chars:
                header = chunk_header(file_path, start_idx + 1, end_idx)
                chunks.append(
                    Chunk(
                        file_path=file_path,
                        start_line=start_idx + 1,
                        end_line=end_idx,
                        text=f"{header}\n{raw_text}",
                        raw_text=raw_text,
                    )
                )

            # This window reached the last line
            if start_idx + self.chunk_size >= total_lines:
                break

        logger.debug(f"File {file_path}: {total_lines} lines -> {len(chunks)} chunks")
        return chunks


def chunk_file(
    file_path: str,
    content: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
    min_chars: int = DEFAULT_MIN_CHARS,
) -> List[Chunk]:
    """Chunk one file into overlapping line windows (Functional Wrapper)."""
    chunker = LineWindowChunker(chunk_size=chunk_size, overlap=overlap, min_chars=min_chars)
    return chunker.chunk(file_path, content)
