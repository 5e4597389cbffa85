"""Quiz Master - resilient Gemini-backed quiz generation and review."""

__version__ = "0.1.0"
