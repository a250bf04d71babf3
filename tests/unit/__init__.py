"""Unit tests: no Ollama, Redis or broker needed.

Embeddings come from the keyword test client and storage from the
in-memory Redis double in tests/fixtures.
"""
