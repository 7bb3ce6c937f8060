"""Core of the Gemini Copilot proxy: domain translation, configuration and app wiring."""
