"""Domain models for guidelint.

Why here:
- Pure, strict data structures (Pydantic v2) describing documents and findings.
- The domain knows nothing about HTTP, the CLI, or the filesystem layout.
"""
