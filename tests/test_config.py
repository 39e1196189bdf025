import pytest
from pydantic import ValidationError

from common.config import (
    ChunkingConfig,
    GlobalYAMLConfig,
    IngestionConfig,
    RetrievalConfig,
    load_yaml_config,
)


def test_defaults():
    cfg = GlobalYAMLConfig()
    assert cfg.chunking.max_chunk_size == 1000
    assert cfg.chunking.min_chunk_size == 200
    assert cfg.chunking.overlap_size == 100
    assert cfg.retrieval.top_k == 5
    assert cfg.retrieval.min_score == 0.70
    assert cfg.retrieval.fallback_count == 3
    assert cfg.ingestion.batch_size == 100
    assert cfg.embeddings.dimension == 1536


def test_loads_yaml_overrides(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "chunking:\n  max_chunk_size: 500\n  min_chunk_size: 50\n"
        "retrieval:\n  top_k: 8\n"
    )
    cfg = load_yaml_config(path)
    assert cfg.chunking.max_chunk_size == 500
    assert cfg.chunking.overlap_size == 100
    assert cfg.retrieval.top_k == 8
    assert cfg.retrieval.min_score == 0.70


def test_env_var_selects_config(tmp_path, monkeypatch):
    path = tmp_path / "custom.yaml"
    path.write_text("ingestion:\n  batch_size: 25\n")
    monkeypatch.setenv("RV_COPILOT_CONFIG", str(path))
    assert load_yaml_config().ingestion.batch_size == 25


def test_missing_file_gives_defaults(tmp_path):
    assert load_yaml_config(tmp_path / "absent.yaml") == GlobalYAMLConfig()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_chunk_size": 100, "overlap_size": 150},
        {"max_chunk_size": 100, "min_chunk_size": 150},
        {"max_chunk_size": 0},
    ],
)
def test_invalid_chunking_rejected(kwargs):
    with pytest.raises(ValidationError):
        ChunkingConfig(**kwargs)


def test_batch_size_capped_at_100():
    with pytest.raises(ValidationError):
        IngestionConfig(batch_size=250)


def test_config_is_frozen():
    cfg = ChunkingConfig()
    with pytest.raises(ValidationError):
        cfg.max_chunk_size = 10


def test_fallback_count_must_keep_at_least_one_match():
    with pytest.raises(ValidationError):
        RetrievalConfig(fallback_count=0)
