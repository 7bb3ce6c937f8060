"""Constants module for the Gemini Copilot proxy.

Collects the constants used by the translation engine, the HTTP layer and
the tests behind a single import point.
"""

from .gateway_constants import *  # noqa: F403
from .http_status_constants import *  # noqa: F403
