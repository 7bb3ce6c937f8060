"""
Controllers package for application endpoints.
"""

from .gemini_controller import router

__all__ = ["router"]
