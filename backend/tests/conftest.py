"""Shared fixtures: fake embedder, fake provider, stores and workspaces."""

import threading
from pathlib import Path
from typing import Callable, List, Sequence

import pytest

from myide.core import Chunk, Embedder, IndexSnapshot
from myide.errors import ProviderError
from myide.storage import JsonIndexStore


def keyword_vector(text: str, keywords: Sequence[str]) -> List[float]:
    """One dimension per keyword: 1.0 when the keyword occurs in text."""
    return [1.0 if kw in text else 0.0 for kw in keywords]


class FakeEmbedder(Embedder):
    """Embeds with a plain function and records every batch."""

    def __init__(self, fn: Callable[[str], List[float]]):
        self.fn = fn
        self.calls: List[List[str]] = []

    def embed(self, texts: List[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        return [self.fn(t) for t in texts]


class FailingEmbedder(Embedder):
    """Succeeds for the first ``ok_batches`` batches, then raises ProviderError."""

    def __init__(self, ok_batches: int = 0, dim: int = 2):
        self.ok_batches = ok_batches
        self.dim = dim
        self.calls = 0

    def embed(self, texts: List[str]) -> List[List[float]]:
        self.calls += 1
        if self.calls > self.ok_batches:
            raise ProviderError("embedding service unavailable")
        return [[1.0] * self.dim for _ in texts]


class BlockingEmbedder(Embedder):
    """Blocks inside ``embed`` until ``release`` is set."""

    def __init__(self, dim: int = 2):
        self.dim = dim
        self.started = threading.Event()
        self.release = threading.Event()

    def embed(self, texts: List[str]) -> List[List[float]]:
        self.started.set()
        self.release.wait(timeout=10)
        return [[1.0] * self.dim for _ in texts]


class FakeProvider:
    """Scripted provider: each call consumes the next script.

    A script is either a list of text fragments or an exception to raise
    after the fragments already yielded (raised immediately when the script
    is an exception instance).
    """

    def __init__(self, scripts):
        self.scripts = list(scripts)
        self.calls = []

    async def generate(self, system_prompt, messages):
        self.calls.append((system_prompt, messages))
        script = self.scripts[len(self.calls) - 1]
        if isinstance(script, Exception):
            raise script
        for fragment in script:
            yield fragment


def make_chunk(file_path: str, start_line: int = 1, end_line: int = 10, body: str = "print('hello world')") -> Chunk:
    return Chunk(
        file_path=file_path,
        start_line=start_line,
        end_line=end_line,
        text=f"// File: {file_path} (lines {start_line}-{end_line})\n{body}",
        raw_text=body,
    )


@pytest.fixture
def store(tmp_path: Path) -> JsonIndexStore:
    return JsonIndexStore(tmp_path / "index.json")


@pytest.fixture
def populated_store(store: JsonIndexStore) -> JsonIndexStore:
    chunks = [make_chunk("/ws/old.py")]
    store.replace(IndexSnapshot.build("/ws", chunks, [[0.5, 0.5]], indexed_at="2026-01-01T00:00:00+00:00"))
    return store


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """a.py has 80 non-trivial lines, b.py 5 short lines (19 chars total)."""
    ws = tmp_path / "ws"
    ws.mkdir()
    a_lines = [f"alpha_{i} = {i}  # value" for i in range(1, 51)]
    a_lines += [f"beta_{i} = {i}  # value" for i in range(51, 81)]
    (ws / "a.py").write_text("\n".join(a_lines) + "\n", encoding="utf-8")
    (ws / "b.py").write_text("\n".join(["a=1"] * 5), encoding="utf-8")
    return ws


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    # sse-starlette keeps a process-wide exit event bound to the first loop
    from sse_starlette.sse import AppStatus
    if hasattr(AppStatus, "should_exit_event"):
        AppStatus.should_exit_event = None
    yield
