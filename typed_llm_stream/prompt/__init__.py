"""Prompt assembly module."""

from .builder import PromptBuilder, contextual_replace

__all__ = ["PromptBuilder", "contextual_replace"]
