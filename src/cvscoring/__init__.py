"""LLM-assisted CV screening with weighted questions and filter criteria."""

__version__ = "0.1.0"
