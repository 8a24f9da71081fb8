"""Workspace indexing workflow."""

from __future__ import annotations

import datetime as _dt
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from starlette.concurrency import run_in_threadpool

from ..config import cfg_fingerprint
from ..core import Chunk, Embedder, IndexProgress, IndexResult, IndexSnapshot, LineWindowChunker
from ..errors import AlreadyIndexingError
from ..storage import IndexStore
from .discovery import collect_files

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[IndexProgress], None]


def scan_workspace(root: Path, cfg: Dict) -> Tuple[List[Path], List[Chunk]]:
    """Discover files and chunk them. Unreadable files contribute nothing."""
    chunker = LineWindowChunker(
        chunk_size=int(cfg.get("chunk_size", 60)),
        overlap=int(cfg.get("chunk_overlap", 10)),
        min_chars=int(cfg.get("min_chunk_chars", 20)),
    )
    files = collect_files(
        root,
        max_depth=int(cfg.get("max_depth", 32)),
        max_file_size_kb=int(cfg.get("max_file_size_kb", 500)),
    )

    chunks: List[Chunk] = []
    for fp in files:
        try:
            text = fp.read_text(encoding="utf-8")
            chunks.extend(chunker.chunk(str(fp), text))
        except Exception as e:
            logger.warning(f"Skipping {fp}: {e}")
    return files, chunks


class WorkspaceIndexer:
    """Builds a fresh snapshot for a workspace and installs it in the store.

    Only one run may be in flight; a second call fails with
    AlreadyIndexingError instead of queueing.
    """

    def __init__(self, store: IndexStore, embedder: Embedder, cfg: Dict):
        self.store = store
        self.embedder = embedder
        self.cfg = cfg
        self.batch_size = int(cfg.get("embed_batch_size", 100))
        self.max_embed_chars = int(cfg.get("max_embed_chars", 8000))

    @property
    def is_indexing(self) -> bool:
        return self.store.is_indexing

    def _report(self, on_progress: Optional[ProgressCallback], **fields) -> None:
        progress = IndexProgress(**fields)
        self.store.progress = progress
        if on_progress is None:
            return
        try:
            on_progress(progress)
        except Exception as e:
            logger.warning(f"Progress observer raised, ignoring: {e}")

    async def index_workspace(self, workspace: Path | str, on_progress: Optional[ProgressCallback] = None) -> IndexResult:
        if self.store.is_indexing:
            raise AlreadyIndexingError()

        self.store.is_indexing = True
        root = Path(workspace)
        try:
            self._report(on_progress, status="scanning", message="Scanning workspace files...")
            files, chunks = await run_in_threadpool(scan_workspace, root, self.cfg)
            self._report(on_progress, status="scanning", message=f"Found {len(files)} files to index")

            total = len(chunks)
            self._report(
                on_progress,
                status="embedding",
                message=f"Embedding {total} code chunks...",
                total=total,
                done=0,
            )

            embeddings: List[List[float]] = []
            for i in range(0, total, self.batch_size):
                batch = chunks[i:i + self.batch_size]
                texts = [c.text[:self.max_embed_chars] for c in batch]
                embeddings.extend(await self.embedder.aembed(texts))

                done = min(i + self.batch_size, total)
                self._report(
                    on_progress,
                    status="embedding",
                    message=f"Embedded {done}/{total} chunks",
                    total=total,
                    done=done,
                )

            snapshot = IndexSnapshot.build(
                workspace=str(root),
                chunks=chunks,
                embeddings=embeddings,
                indexed_at=_dt.datetime.now(_dt.timezone.utc).isoformat(),
                metadata={"cfg_fingerprint": cfg_fingerprint(self.cfg), "files": len(files)},
            )
            self.store.replace(snapshot)
            await run_in_threadpool(self.store.save, snapshot)

            self._report(
                on_progress,
                status="done",
                message=f"Indexed {total} chunks from {len(files)} files",
                total=total,
                done=total,
            )
            logger.info(f"Indexed {total} chunks from {len(files)} files in {root}")
            return IndexResult(chunks=total, files=len(files))

        except Exception as e:
            logger.error(f"Indexing {root} failed: {e}")
            self._report(on_progress, status="error", message=str(e))
            raise
        finally:
            self.store.is_indexing = False
