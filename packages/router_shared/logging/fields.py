"""Canonical logging field names for structured router logs."""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"

# Request correlation fields.
REQUEST_ID = "request_id"
ROUTINE = "routine"

# Access log fields.
METHOD = "method"
URL = "url"
HOST = "ident"
REFERER = "referer"
USER_AGENT = "user_agent"
STATUS = "status"
RESPONSE_BYTES = "response_bytes"
DURATION_MS = "duration_ms"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
