"""
Prompt construction boundary for the writing assistant.

Design intent:
- Turn (draft, style) into one deterministic instruction payload.
- Keep rubric and citation rules as fixed text so outputs stay comparable.
- Fence student text so it can never be read as instructions.
"""

from .builder import (
    HARVARD_RULES,
    IEEE_RULES,
    RESPONSE_HEADING,
    SYSTEM_INSTRUCTION,
    WRITING_GUIDE_RUBRIC,
    build_prompt,
    citation_rules_for,
)

__all__ = [
    "HARVARD_RULES",
    "IEEE_RULES",
    "RESPONSE_HEADING",
    "SYSTEM_INSTRUCTION",
    "WRITING_GUIDE_RUBRIC",
    "build_prompt",
    "citation_rules_for",
]
