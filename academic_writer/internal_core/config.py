from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def _project_root() -> Path:
    # academic_writer/internal_core/config.py -> academic_writer -> repo root
    return Path(__file__).resolve().parents[2]


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None else value


def _getenv_first(names: list[str], default: str) -> str:
    for name in names:
        value = os.getenv(name)
        if value is not None and value.strip() != "":
            return value.strip()
    return default


def _getenv_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _getenv_opt_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return int(value)


def _getenv_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


def _getenv_list(name: str, default: list[str]) -> list[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class WriterConfig:
    WRITER_GENERATION_BACKEND: str
    WRITER_GEMINI_API_KEY: str
    WRITER_GEMINI_MODEL: str
    WRITER_TEMPERATURE: float
    WRITER_TOP_P: float
    WRITER_TOP_K: int
    WRITER_REMOTE_ENDPOINT: str
    WRITER_HTTP_TIMEOUT_SECONDS: float
    WRITER_LLAMA_CPP_MODEL: str
    WRITER_LLAMA_CPP_N_CTX: int
    WRITER_LLAMA_CPP_N_GPU_LAYERS: int
    WRITER_LLAMA_CPP_N_THREADS: Optional[int]
    WRITER_LLAMA_CPP_CHAT_FORMAT: str
    WRITER_LLM_MAX_TOKENS: int
    WRITER_STORAGE_DIR: str
    WRITER_STORAGE_KEY: str
    WRITER_HISTORY_LIMIT: int
    WRITER_LOG_LEVEL: str
    WRITER_GENERATION_DEBUG_LOG: str
    WRITER_CORS_ORIGINS: list[str]

    def storage_dir_path(self, repo_root: Optional[Path] = None) -> Path:
        root = repo_root if repo_root is not None else _project_root()
        return (root / self.WRITER_STORAGE_DIR).expanduser().resolve()

    @property
    def http_timeout(self) -> Optional[float]:
        # Zero or negative disables the client-side timeout entirely.
        if self.WRITER_HTTP_TIMEOUT_SECONDS <= 0:
            return None
        return self.WRITER_HTTP_TIMEOUT_SECONDS


def load_config() -> WriterConfig:
    return WriterConfig(
        WRITER_GENERATION_BACKEND=_getenv_str("WRITER_GENERATION_BACKEND", "gemini").strip().lower(),
        WRITER_GEMINI_API_KEY=_getenv_first(
            ["WRITER_GEMINI_API_KEY", "GEMINI_API_KEY", "API_KEY"], ""
        ),
        WRITER_GEMINI_MODEL=_getenv_str("WRITER_GEMINI_MODEL", "gemini-2.5-flash"),
        WRITER_TEMPERATURE=_getenv_float("WRITER_TEMPERATURE", 0.7),
        WRITER_TOP_P=_getenv_float("WRITER_TOP_P", 0.95),
        WRITER_TOP_K=_getenv_int("WRITER_TOP_K", 40),
        WRITER_REMOTE_ENDPOINT=_getenv_str("WRITER_REMOTE_ENDPOINT", "").strip(),
        WRITER_HTTP_TIMEOUT_SECONDS=_getenv_float("WRITER_HTTP_TIMEOUT_SECONDS", 0.0),
        WRITER_LLAMA_CPP_MODEL=_getenv_str("WRITER_LLAMA_CPP_MODEL", "").strip(),
        WRITER_LLAMA_CPP_N_CTX=_getenv_int("WRITER_LLAMA_CPP_N_CTX", 8192),
        WRITER_LLAMA_CPP_N_GPU_LAYERS=_getenv_int("WRITER_LLAMA_CPP_N_GPU_LAYERS", -1),
        WRITER_LLAMA_CPP_N_THREADS=_getenv_opt_int("WRITER_LLAMA_CPP_N_THREADS"),
        WRITER_LLAMA_CPP_CHAT_FORMAT=_getenv_str("WRITER_LLAMA_CPP_CHAT_FORMAT", "gemma"),
        WRITER_LLM_MAX_TOKENS=_getenv_int("WRITER_LLM_MAX_TOKENS", 2048),
        WRITER_STORAGE_DIR=_getenv_str("WRITER_STORAGE_DIR", "./.writer_storage"),
        WRITER_STORAGE_KEY=_getenv_str("WRITER_STORAGE_KEY", "academic-writer-state"),
        WRITER_HISTORY_LIMIT=_getenv_int("WRITER_HISTORY_LIMIT", 100),
        WRITER_LOG_LEVEL=_getenv_str("WRITER_LOG_LEVEL", "INFO"),
        WRITER_GENERATION_DEBUG_LOG=_getenv_str("WRITER_GENERATION_DEBUG_LOG", "").strip(),
        WRITER_CORS_ORIGINS=_getenv_list("WRITER_CORS_ORIGINS", ["*"]),
    )
