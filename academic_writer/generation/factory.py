from __future__ import annotations

import logging

from academic_writer.internal_core.config import WriterConfig

from .base import TextGenerator, resolve_debug_log_path
from .gemini_client import GeminiGenerationClient
from .llama_cpp_client import LlamaCppGenerationClient
from .remote_client import RemoteGenerationClient

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("gemini", "remote", "llama_cpp")


def build_generation_client(config: WriterConfig) -> TextGenerator:
    backend = config.WRITER_GENERATION_BACKEND
    debug_log_path = resolve_debug_log_path(config.WRITER_GENERATION_DEBUG_LOG)
    if backend == "gemini":
        return GeminiGenerationClient(
            api_key=config.WRITER_GEMINI_API_KEY,
            model=config.WRITER_GEMINI_MODEL,
            temperature=config.WRITER_TEMPERATURE,
            top_p=config.WRITER_TOP_P,
            top_k=config.WRITER_TOP_K,
            timeout=config.http_timeout,
            debug_log_path=debug_log_path,
        )
    if backend == "remote":
        return RemoteGenerationClient(
            endpoint=config.WRITER_REMOTE_ENDPOINT,
            timeout=config.http_timeout,
        )
    if backend == "llama_cpp":
        return LlamaCppGenerationClient(
            model_path=config.WRITER_LLAMA_CPP_MODEL,
            n_ctx=config.WRITER_LLAMA_CPP_N_CTX,
            n_gpu_layers=config.WRITER_LLAMA_CPP_N_GPU_LAYERS,
            n_threads=config.WRITER_LLAMA_CPP_N_THREADS,
            chat_format=config.WRITER_LLAMA_CPP_CHAT_FORMAT or None,
            max_tokens=config.WRITER_LLM_MAX_TOKENS,
            temperature=config.WRITER_TEMPERATURE,
            top_p=config.WRITER_TOP_P,
            top_k=config.WRITER_TOP_K,
            debug_log_path=debug_log_path,
        )
    raise ValueError(
        f"Unsupported WRITER_GENERATION_BACKEND: {backend!r} (expected one of {', '.join(SUPPORTED_BACKENDS)})"
    )
