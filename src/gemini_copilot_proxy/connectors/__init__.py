"""Backend connectors."""

from .base import LLMBackend
from .copilot import CopilotConnector

__all__ = ["CopilotConnector", "LLMBackend"]
