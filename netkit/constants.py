"""
Core library constants.

Centralizes configuration defaults, timeouts, and storage identifiers.
"""

# Duration Constants (milliseconds)
DEFAULT_HTTP_TIMEOUT_MS = 10000
DEFAULT_CONNECT_TIMEOUT_MS = 10000

# HTTP Constants
DEFAULT_ACCEPTED_STATUS_CODES = frozenset({200})

# Socket Constants
DEFAULT_RECEIVE_CHUNK_SIZE = 1024

# WebSocket close code sent on disconnect (RFC 6455 "going away")
WS_CLOSE_GOING_AWAY = 1001

# Settings Storage
SETTINGS_FILE_NAME = "settings.json"
TOKEN_SETTINGS_KEY = "bearer_token"
DATA_DIR_ENV_VAR = "NETKIT_DATA_DIR"

# Default Configuration Values
DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_LOG_LEVEL = "INFO"

# Multipart
MULTIPART_BOUNDARY_PREFIX = "Boundary-"
MULTIPART_FILE_FIELD = "file"
