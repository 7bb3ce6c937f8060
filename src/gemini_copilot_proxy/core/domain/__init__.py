"""Protocol translation between the Gemini and chat completions dialects."""
