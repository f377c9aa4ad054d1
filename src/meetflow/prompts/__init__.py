"""Prompt text for LLM-backed features."""
