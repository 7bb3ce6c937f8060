"""Constants for HTTP status and error messages."""

HTTP_500_INTERNAL_SERVER_ERROR_MESSAGE = "Internal Server Error"

INVALID_JSON_BODY_MESSAGE = "Invalid JSON in request body"
MISSING_CONTENTS_MESSAGE = "Request must include 'contents' array"
MISSING_MODEL_MESSAGE = "Model parameter is required"
