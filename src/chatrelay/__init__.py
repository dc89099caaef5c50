"""Chat relay for streaming and single-shot LLM providers."""

__version__ = "0.1.0"
