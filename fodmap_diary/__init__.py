"""FODMAP food and symptom diary with LLM classification and analysis."""

__version__ = "0.1.0"
