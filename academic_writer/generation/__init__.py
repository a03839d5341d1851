"""
Generation boundary for the writing assistant.

Design intent:
- One outbound request per call, no automatic retries.
- Surface configuration, transport and unknown failures as distinct typed errors.
- Keep backends interchangeable behind the TextGenerator contract.
"""

from .base import TextGenerator
from .errors import ConfigurationError, GenerationError, TransportError, UnknownGenerationError
from .factory import SUPPORTED_BACKENDS, build_generation_client
from .gemini_client import GeminiGenerationClient
from .llama_cpp_client import LlamaCppGenerationClient
from .remote_client import RemoteGenerationClient

__all__ = [
    "TextGenerator",
    "ConfigurationError",
    "GenerationError",
    "TransportError",
    "UnknownGenerationError",
    "SUPPORTED_BACKENDS",
    "build_generation_client",
    "GeminiGenerationClient",
    "LlamaCppGenerationClient",
    "RemoteGenerationClient",
]
