"""Shared constants for phaselayer."""

LIBRARY_NAME = "phaselayer"
LIBRARY_VERSION = "0.1.0"

# Well-known phases
REQUEST_PHASE = "request"
ERROR_PHASE = "error"

# Request context key holding the failure captured by the failure trap
ERROR_CONTEXT_KEY = "error"

# Request context key holding the raw body read by the ASGI binding
BODY_CONTEXT_KEY = "body"

# Default terminal responses
FINAL_HANDLER_STATUS = 502
FINAL_HANDLER_BODY = "phaselayer: no route configured"
ERROR_HANDLER_STATUS = 500
ERROR_HANDLER_BODY = "phaselayer: internal server error"
DEFAULT_CONTENT_TYPE = "text/plain; charset=utf-8"

# Logging defaults
LOG_DIR = "logs"
DEFAULT_LOG_LEVEL = "INFO"
