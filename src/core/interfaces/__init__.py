"""Core interfaces.

Why:
- Structural contracts (Protocol) implemented by concrete rule adapters.
- The pipeline depends on these abstractions, never on individual rules.
"""
