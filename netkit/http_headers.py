"""
HTTP header constants.

Centralizes header names and content types used on outgoing requests.
"""

# HTTP Headers
HEADER_AUTHORIZATION = "Authorization"
HEADER_CONTENT_TYPE = "Content-Type"

# Content Types
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_MULTIPART = "multipart/form-data"

# Authorization scheme
AUTH_SCHEME_BEARER = "Bearer"
