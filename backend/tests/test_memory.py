"""Tests for the persistent developer memory."""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from myide.llm import LLMResponse
from myide.memory import MemoryStore, normalized_duplicate, prefix_duplicate
from myide.memory import store as store_module


@pytest.fixture
def memory(tmp_path):
    return MemoryStore(tmp_path / "memory.json", max_facts=5)


class ScriptedClient:

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.prompts = []

    def chat(self, system_prompt, user_message, conversation_history=None):
        self.prompts.append(user_message)
        return LLMResponse(
            content=self.content,
            finish_reason="error" if self.error else "stop",
            time_taken=0.0,
            error=self.error,
        )


class TestDuplicates:

    def test_prefix_duplicate(self):
        assert prefix_duplicate("Prefers TypeScript over JavaScript", "prefers typescript over javascript always")
        assert not prefix_duplicate("uses PostgreSQL", "deploys on Fly.io")

    def test_normalized_duplicate(self):
        assert normalized_duplicate("Uses  FastAPI!", "uses fastapi")
        assert not normalized_duplicate("uses FastAPI", "uses FastAPI and Celery")


class TestAddFacts:

    def test_short_and_duplicate_facts_are_dropped(self, memory):
        added = memory.add_facts(["tiny", "prefers TypeScript over JavaScript", "Prefers TypeScript over JS"])

        assert added == 1
        assert [m.fact for m in memory.all()] == ["prefers TypeScript over JavaScript"]

    def test_persisted_and_reloaded(self, memory):
        memory.add_facts(["uses PostgreSQL in production"])

        data = json.loads(memory.path.read_text(encoding="utf-8"))
        assert data[0]["fact"] == "uses PostgreSQL in production"
        assert data[0]["use_count"] == 0

        again = MemoryStore(memory.path)
        again.load()
        assert [m.fact for m in again.all()] == ["uses PostgreSQL in production"]

    def test_cap_keeps_most_used(self, memory):
        memory.add_facts([f"fact number {i} is distinct" for i in range(5)])
        memory.facts[2].use_count = 9

        memory.add_facts(["a sixth and brand new fact"])

        assert len(memory.all()) == 5
        assert memory.all()[0].fact == "fact number 2 is distinct"

    def test_non_strings_ignored(self, memory):
        assert memory.add_facts([None, 42, "works with Docker Compose"]) == 1

    def test_manual_add(self, memory):
        assert memory.add_manual("deploys on Fly.io") == {"ok": True, "total": 1}


class TestManage:

    def test_delete_and_clear(self, memory):
        memory.add_facts(["first fact here", "second fact here"])

        memory.delete(0)
        assert [m.fact for m in memory.all()] == ["second fact here"]

        with pytest.raises(IndexError):
            memory.delete(5)

        memory.clear()
        assert memory.all() == []
        assert json.loads(memory.path.read_text(encoding="utf-8")) == []

    def test_unreadable_file_loads_empty(self, tmp_path):
        path = tmp_path / "memory.json"
        path.write_text("not json", encoding="utf-8")
        store = MemoryStore(path)
        store.load()
        assert store.all() == []

    def test_context_block_marks_use(self, memory):
        assert memory.get_context_block() == ""

        memory.add_facts(["prefers tabs over spaces"])
        block = memory.get_context_block()

        assert block == "## What you know about this developer:\n- prefers tabs over spaces"
        assert memory.all()[0].use_count == 1


class TestExtract:

    def test_extracts_json_array(self, memory):
        client = ScriptedClient('Sure:\n["uses FastAPI for APIs", "prefers pytest"]')

        facts = memory.extract_facts("I build APIs with FastAPI", "Great choice", client)

        assert facts == ["uses FastAPI for APIs", "prefers pytest"]
        assert len(memory.all()) == 2
        assert "I build APIs with FastAPI" in client.prompts[0]

    def test_error_response_changes_nothing(self, memory):
        assert memory.extract_facts("u", "a", ScriptedClient(error="timeout")) == []
        assert memory.all() == []

    def test_non_json_changes_nothing(self, memory):
        assert memory.extract_facts("u", "a", ScriptedClient("[not, json")) == []
        assert memory.extract_facts("u", "a", ScriptedClient("nothing here")) == []
        assert memory.all() == []


class TestPersistence:

    def test_save_leaves_no_temp_files(self, memory):
        memory.add_facts(["uses FastAPI for APIs"])
        memory.get_context_block()

        assert sorted(p.name for p in memory.path.parent.iterdir()) == ["memory.json"]

    def test_failed_write_keeps_previous_file(self, memory, monkeypatch):
        memory.add_facts(["uses FastAPI for APIs"])
        before = memory.path.read_text(encoding="utf-8")

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(store_module.os, "replace", broken_replace)
        with pytest.raises(OSError):
            memory.add_facts(["prefers pytest fixtures"])

        assert memory.path.read_text(encoding="utf-8") == before
        assert sorted(p.name for p in memory.path.parent.iterdir()) == ["memory.json"]

    def test_concurrent_adds_lose_nothing(self, tmp_path):
        store = MemoryStore(tmp_path / "memory.json", max_facts=500)

        def add_batch(worker):
            for i in range(20):
                store.add_facts([f"fact {worker}-{i} noted by a worker thread"])

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(add_batch, range(8)))

        assert len(store.all()) == 160
        reloaded = MemoryStore(store.path, max_facts=500)
        reloaded.load()
        assert len(reloaded.all()) == 160
