"""
Test fixtures for Feedback Insights.

- llm.py: KeywordEmbeddingClient, a bag-of-words embedder with canned generation
- in_memory_redis.py: dict-backed async Redis double for repository and job tests
- factories.py: builders for feedback items, records and classifications
"""
