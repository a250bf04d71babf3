"""Tests against a live Ollama and Redis (``-m integration``).

The end-to-end pipeline test under pipeline/ runs without either service.
"""
