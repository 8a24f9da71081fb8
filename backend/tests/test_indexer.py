"""Tests for the indexing workflow."""

import asyncio

import pytest

from myide.config import DEFAULT_CONFIG
from myide.errors import AlreadyIndexingError, ProviderError
from myide.indexing import WorkspaceIndexer, collect_files
from myide.search import DefaultSearcher
from myide.storage import JsonIndexStore

from conftest import BlockingEmbedder, FailingEmbedder, FakeEmbedder, keyword_vector

KEYWORDS = ("alpha", "beta")


def make_indexer(store, embedder, **overrides):
    cfg = dict(DEFAULT_CONFIG, **overrides)
    return WorkspaceIndexer(store, embedder, cfg)


@pytest.mark.asyncio
class TestIndexWorkspace:

    async def test_end_to_end_two_files(self, store, workspace):
        assert [p.name for p in collect_files(workspace)] == ["a.py", "b.py"]

        embedder = FakeEmbedder(lambda t: keyword_vector(t, KEYWORDS))
        result = await make_indexer(store, embedder).index_workspace(workspace)

        assert (result.chunks, result.files) == (2, 2)
        assert store.status()["chunks"] == 2
        assert store.status()["progress"]["status"] == "done"
        spans = [(c.start_line, c.end_line) for c in store.snapshot.chunks]
        assert spans == [(1, 60), (51, 80)]
        assert all(c.file_path.endswith("a.py") for c in store.snapshot.chunks)

    async def test_snapshot_is_persisted(self, store, workspace):
        embedder = FakeEmbedder(lambda t: keyword_vector(t, KEYWORDS))
        await make_indexer(store, embedder).index_workspace(workspace)

        reloaded = JsonIndexStore(store.path).load()
        assert reloaded.chunks == store.snapshot.chunks
        assert reloaded.embeddings == store.snapshot.embeddings
        assert reloaded.workspace == str(workspace)
        assert reloaded.indexed_at is not None

    async def test_query_matching_first_chunk_returns_one_result(self, store, workspace):
        # chunk 1-60 holds alpha and beta lines, chunk 51-80 only beta lines
        embedder = FakeEmbedder(lambda t: keyword_vector(t, KEYWORDS))
        await make_indexer(store, embedder).index_workspace(workspace)

        results = await DefaultSearcher(store, embedder).search("alpha", top_k=5)

        assert len(results) == 1
        score, chunk = results[0]
        assert score > 0.3
        assert (chunk.start_line, chunk.end_line) == (1, 60)

    async def test_progress_events(self, store, workspace):
        events = []
        embedder = FakeEmbedder(lambda t: keyword_vector(t, KEYWORDS))
        await make_indexer(store, embedder, embed_batch_size=1).index_workspace(workspace, on_progress=events.append)

        statuses = [e.status for e in events]
        assert statuses == ["scanning", "scanning", "embedding", "embedding", "embedding", "done"]
        embedding = [e for e in events if e.status == "embedding"]
        assert [(e.done, e.total) for e in embedding] == [(0, 2), (1, 2), (2, 2)]

    async def test_batches_and_truncation(self, store, workspace):
        embedder = FakeEmbedder(lambda t: keyword_vector(t, KEYWORDS))
        await make_indexer(store, embedder, embed_batch_size=1, max_embed_chars=40).index_workspace(workspace)

        assert len(embedder.calls) == 2
        assert all(len(batch) == 1 and len(batch[0]) <= 40 for batch in embedder.calls)

    async def test_observer_exception_is_not_fatal(self, store, workspace):
        def explode(_progress):
            raise RuntimeError("observer bug")

        embedder = FakeEmbedder(lambda t: keyword_vector(t, KEYWORDS))
        result = await make_indexer(store, embedder).index_workspace(workspace, on_progress=explode)

        assert result.chunks == 2
        assert store.progress.status == "done"

    async def test_batch_failure_keeps_previous_snapshot(self, populated_store, workspace):
        before = populated_store.snapshot
        events = []
        indexer = make_indexer(populated_store, FailingEmbedder(ok_batches=1), embed_batch_size=1)

        with pytest.raises(ProviderError):
            await indexer.index_workspace(workspace, on_progress=events.append)

        assert populated_store.snapshot is before
        assert events[-1].status == "error"
        assert "unavailable" in events[-1].message
        assert populated_store.status()["progress"]["status"] == "error"
        assert not populated_store.path.exists()
        assert not indexer.is_indexing

    async def test_unreadable_file_is_skipped(self, store, workspace):
        (workspace / "broken.py").write_bytes(b"\xff\xfe\xfa invalid utf-8 " * 10)

        embedder = FakeEmbedder(lambda t: keyword_vector(t, KEYWORDS))
        result = await make_indexer(store, embedder).index_workspace(workspace)

        assert result.files == 3
        assert result.chunks == 2

    async def test_concurrent_run_is_rejected(self, populated_store, workspace):
        before = populated_store.snapshot
        embedder = BlockingEmbedder()
        indexer = make_indexer(populated_store, embedder)

        first = asyncio.create_task(indexer.index_workspace(workspace))
        for _ in range(500):
            if embedder.started.is_set():
                break
            await asyncio.sleep(0.01)
        assert indexer.is_indexing

        with pytest.raises(AlreadyIndexingError):
            await indexer.index_workspace(workspace)
        assert populated_store.snapshot is before

        embedder.release.set()
        result = await first
        assert result.chunks == 2
        assert populated_store.snapshot is not before
        assert not indexer.is_indexing
