"""Constants for request translation and the Copilot backend."""

# Gemini models accepted on the inbound routes
DEFAULT_SUPPORTED_GEMINI_MODELS = [
    "gemini-2.5-pro",
    "gemini-3-pro-preview",
]

# Appended as a user turn when a conversation would end on a tool result;
# the backend rejects conversations whose last message has role "tool".
CONTINUATION_PROMPT = "Please continue with the next step."

RESPONSE_SCHEMA_NAME = "gemini_response_schema"
JSON_MIME_TYPE = "application/json"

STREAM_DONE_SENTINEL = "[DONE]"

# GitHub Copilot chat API
COPILOT_API_BASE_URL = "https://api.githubcopilot.com"
COPILOT_INTEGRATION_ID = "vscode-chat"
COPILOT_VERSION = "0.26.7"
COPILOT_EDITOR_VERSION = "vscode/1.99.3"
COPILOT_EDITOR_PLUGIN_VERSION = f"copilot-chat/{COPILOT_VERSION}"
COPILOT_USER_AGENT = f"GitHubCopilotChat/{COPILOT_VERSION}"
COPILOT_API_VERSION = "2025-04-01"
COPILOT_OPENAI_INTENT = "conversation-panel"
