"""Static values shared across the client."""

DEFAULT_BASE_URL = "https://api.repliers.io"
API_KEY_HEADER = "REPLIERS-API-KEY"
DEFAULT_TIMEOUT = 30.0
DEFAULT_POOL_MAXSIZE = 10
DEFAULT_USER_AGENT = "repliers-python/0.1.0"

# Longest slice of a response body quoted back in decode errors.
BODY_SNIPPET_LENGTH = 200
