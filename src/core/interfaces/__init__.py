"""Core interfaces.

Why:
- Contracts (Protocol) implemented by concrete adapters.
- The Core depends on abstractions, not on a particular client.
"""
