"""Domain models.

Why:
- Plain, strict data structures (Pydantic v2) live here.
- The domain knows nothing about sockets, httpx or the CLI.
"""
