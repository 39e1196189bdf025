from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from chains.prompts import NO_CONTEXT_ANSWER, REPAIR_TEMPLATE, format_context
from common.config import RetrievalConfig, yaml_config
from common.errors import QueryError
from common.logger import get_logger
from models.embeddings import Embedder
from retrieval.context import NO_CONTEXT, QueryContext, assemble_context
from retrieval.filters import build_metadata_filter, filter_matches, used_fallback
from vectorstore.base import VectorIndex

log = get_logger(__name__)


def answer_query(
    question: str,
    *,
    embedder: Embedder,
    index: VectorIndex,
    brand: Optional[str] = None,
    component: Optional[str] = None,
    manual_type: Optional[str] = None,
    config: Optional[RetrievalConfig] = None,
) -> QueryContext:
    """
    Retrieve and assemble context for a repair question.

    Returns ``NO_CONTEXT`` when the index returned nothing at all; callers must
    answer with the fixed apology instead of calling the LLM.
    """
    cfg = config or yaml_config.retrieval
    where = build_metadata_filter(brand, component, manual_type)

    try:
        vector = embedder.embed(question)
        raw = index.query(vector, top_k=cfg.top_k, where=where or None)
    except Exception as e:
        raise QueryError(f"Failed to retrieve context: {e}") from e

    matches = filter_matches(raw, cfg.min_score, cfg.fallback_count)
    if not matches:
        log.warning("No relevant context found for query")
        return NO_CONTEXT
    return assemble_context(matches, used_fallback=used_fallback(raw, cfg.min_score))


@dataclass(frozen=True)
class RepairAnswer:
    answer: str
    sources: Tuple[str, ...]
    context_blocks: Tuple[str, ...]
    used_fallback: bool
    search_results: int
    processing_time_ms: int
    model: Optional[str] = None


class RepairAnswerer:
    """
    Retrieval-augmented repair Q&A:
      1) Embeds the question and queries the vector index
      2) Keeps relevant matches (or the fallback head) and renders context blocks
      3) Asks the LLM for step-by-step instructions, unless nothing was found

    Collaborators are injected; defaults come from config/config.yaml.
    """

    def __init__(
        self,
        embedder: Embedder,
        index: VectorIndex,
        llm: Any,
        config: Optional[RetrievalConfig] = None,
    ):
        self.embedder = embedder
        self.index = index
        self.llm = llm
        self.config = config or yaml_config.retrieval

    @property
    def model_name(self) -> Optional[str]:
        return getattr(self.llm, "model_name", None) or getattr(self.llm, "model", None)

    def ask(
        self,
        question: str,
        *,
        brand: Optional[str] = None,
        component: Optional[str] = None,
        manual_type: Optional[str] = None,
    ) -> RepairAnswer:
        start = time.perf_counter()
        log.info("Processing query: %r", question)

        context = answer_query(
            question,
            embedder=self.embedder,
            index=self.index,
            brand=brand,
            component=component,
            manual_type=manual_type,
            config=self.config,
        )

        if context is NO_CONTEXT:
            return RepairAnswer(
                answer=NO_CONTEXT_ANSWER,
                sources=(),
                context_blocks=(),
                used_fallback=False,
                search_results=0,
                processing_time_ms=int((time.perf_counter() - start) * 1000),
                model=self.model_name,
            )

        prompt = REPAIR_TEMPLATE.invoke(
            {"question": question, "context": format_context(context.context_blocks)}
        )
        try:
            result = self.llm.invoke(prompt)
        except Exception as e:
            log.error("Answer generation failed: %s", e, exc_info=True)
            raise

        # chat models return a message, plain LLMs a string
        answer = getattr(result, "content", result)
        elapsed = int((time.perf_counter() - start) * 1000)
        log.info("Query processed in %dms", elapsed)

        return RepairAnswer(
            answer=str(answer).strip(),
            sources=context.sources,
            context_blocks=context.context_blocks,
            used_fallback=context.used_fallback,
            search_results=len(context.matches),
            processing_time_ms=elapsed,
            model=self.model_name,
        )
