from __future__ import annotations

from common.config import secrets, yaml_config
from common.logger import get_logger

log = get_logger(__name__)


def load_llm(config_section="llm_qa"):
    """
    Load the answer-generation model from a config section.
    """
    cfg = getattr(yaml_config, config_section)

    if cfg.provider == "openai":
        from langchain_openai import ChatOpenAI

        kwargs = {"api_key": secrets.openai_api_key} if secrets.openai_api_key else {}
        llm = ChatOpenAI(
            model=cfg.model_name,
            temperature=cfg.temperature,
            max_tokens=cfg.max_tokens,
            max_retries=cfg.max_retries,
            timeout=cfg.timeout,
            **kwargs,
        )
    elif cfg.provider == "ollama":
        from langchain_ollama import OllamaLLM

        kwargs = {"base_url": secrets.ollama_base_url} if secrets.ollama_base_url else {}
        llm = OllamaLLM(
            model=cfg.model_name,
            temperature=cfg.temperature,
            num_predict=cfg.max_tokens,
            **kwargs,
        )
    else:
        raise ValueError(f"Unsupported provider: {cfg.provider}")

    log.info("Loaded %s model '%s'", cfg.provider, cfg.model_name)
    return llm
