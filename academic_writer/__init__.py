"""
Academic writing assistant package.

Design intent:
- Turn a student draft plus a referencing style into reviewed academic text.
- Keep prompt construction, generation, session state and export independent.
"""
