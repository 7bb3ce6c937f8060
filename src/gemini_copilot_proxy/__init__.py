"""Gemini generateContent gateway in front of the GitHub Copilot chat API."""

__version__ = "0.1.0"
