from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "config.yaml"


class AppConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    data_dir: Path = Path("data")
    cache_dir: Path = Path("data/cache")
    max_pdf_pages: int | None = Field(default=None, ge=0)


class ChunkingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_chunk_size: int = Field(default=1000, gt=0)
    min_chunk_size: int = Field(default=200, ge=0)
    overlap_size: int = Field(default=100, ge=0)
    preserve_paragraphs: bool = True
    preserve_sentences: bool = True

    @model_validator(mode="after")
    def _check_sizes(self) -> "ChunkingConfig":
        # the cursor must move forward on every step
        if self.overlap_size >= self.max_chunk_size:
            raise ValueError(
                f"overlap_size ({self.overlap_size}) must be smaller than "
                f"max_chunk_size ({self.max_chunk_size})"
            )
        if self.min_chunk_size > self.max_chunk_size:
            raise ValueError(
                f"min_chunk_size ({self.min_chunk_size}) must not exceed "
                f"max_chunk_size ({self.max_chunk_size})"
            )
        return self


class RetrievalConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    top_k: int = Field(default=5, gt=0)
    min_score: float = Field(default=0.70, ge=0.0, le=1.0)
    fallback_count: int = Field(default=3, ge=1)


class IngestionConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    batch_size: int = Field(default=100, gt=0, le=100)
    batch_delay_seconds: float = Field(default=0.1, ge=0.0)
    store_chunk_text: bool = False


class EmbeddingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: str = Field(default="openai", pattern="^(openai|huggingface|ollama)$")
    model_name: str = "text-embedding-ada-002"
    dimension: int | None = 1536
    max_retries: int = 3
    timeout: int = 60


class VectorStoreConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    persist_dir: Path = Path("data/chroma")
    collection: str = "rv-repair-manuals"
    upsert_attempts: int = Field(default=3, gt=0)


class LLMConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: str = Field(default="openai", pattern="^(openai|ollama)$")
    model_name: str = "gpt-4-1106-preview"
    temperature: float = 0.7
    max_tokens: int = 2000
    max_retries: int = 3
    timeout: int = 60


class GlobalYAMLConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    app: AppConfig = Field(default_factory=AppConfig)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    embeddings: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    vectorstore: VectorStoreConfig = Field(default_factory=VectorStoreConfig)
    llm_qa: LLMConfig = Field(default_factory=LLMConfig)


def load_yaml_config(path: Path | None = None) -> GlobalYAMLConfig:
    """
    Load the YAML config. Falls back to built-in defaults when the file is absent,
    e.g. when the packages are installed without the repository checkout.
    """
    path = Path(path or os.environ.get("RV_COPILOT_CONFIG") or DEFAULT_CONFIG_PATH)
    if not path.exists():
        return GlobalYAMLConfig()
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    return GlobalYAMLConfig(**raw)


class Secrets(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    openai_api_key: str | None = None
    ollama_base_url: str | None = None


yaml_config = load_yaml_config()
secrets = Secrets()
