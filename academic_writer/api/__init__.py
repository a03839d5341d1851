"""
API orchestration boundary for the writing assistant.

Design intent:
- Expose the stateless generation endpoint and the single-user session surface.
- Keep request validation explicit and failure modes predictable.
- Delegate prompt, generation, history and export logic to their modules.
"""
