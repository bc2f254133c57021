from .client import get_http_client, request_with_retry, response_error_message
from .errors import SyncHTTPError, SyncHTTPNetworkError, SyncHTTPStatusError

__all__ = [
    "get_http_client",
    "request_with_retry",
    "response_error_message",
    "SyncHTTPError",
    "SyncHTTPNetworkError",
    "SyncHTTPStatusError",
]
