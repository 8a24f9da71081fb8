"""Tests for configuration loading and validation."""

import copy

import pytest

from myide.config import DEFAULT_CONFIG, cfg_fingerprint, load_config, validate_config
from myide.errors import ConfigError


def test_defaults():
    assert DEFAULT_CONFIG["chunk_size"] == 60
    assert DEFAULT_CONFIG["chunk_overlap"] == 10
    assert DEFAULT_CONFIG["search"]["min_score"] == 0.3


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("MYIDE_INDEX_PATH", str(tmp_path / "idx.json"))
    monkeypatch.setenv("EMBEDDING_BACKEND", "openai")
    monkeypatch.setenv("EMBEDDING_MODEL", "text-embedding-3-large")
    monkeypatch.setenv("LLM_MODEL", "local-model")

    cfg = load_config()

    assert cfg["index_path"] == str(tmp_path / "idx.json")
    assert cfg["embedding"]["openai_model"] == "text-embedding-3-large"
    assert cfg["llm"]["model"] == "local-model"
    assert DEFAULT_CONFIG["llm"]["model"] == "gpt-4o"


@pytest.mark.parametrize("overrides", [
    {"chunk_size": 0},
    {"chunk_overlap": -1},
    {"chunk_overlap": 60},
    {"embed_batch_size": 0},
])
def test_invalid_settings(overrides):
    with pytest.raises(ConfigError):
        validate_config(dict(DEFAULT_CONFIG, **overrides))


def test_fingerprint_tracks_index_shaping_settings():
    base = copy.deepcopy(DEFAULT_CONFIG)
    changed = copy.deepcopy(DEFAULT_CONFIG)
    changed["chunk_size"] = 40
    unrelated = copy.deepcopy(DEFAULT_CONFIG)
    unrelated["llm"]["model"] = "other"

    assert cfg_fingerprint(base) != cfg_fingerprint(changed)
    assert cfg_fingerprint(base) == cfg_fingerprint(unrelated)
