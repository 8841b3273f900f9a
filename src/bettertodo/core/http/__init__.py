from .client import RetryPolicy, get_http_client, request_with_retry
from .errors import BetterTodoHTTPError, BetterTodoHTTPNetworkError, BetterTodoHTTPStatusError

__all__ = [
    "BetterTodoHTTPError",
    "BetterTodoHTTPNetworkError",
    "BetterTodoHTTPStatusError",
    "RetryPolicy",
    "get_http_client",
    "request_with_retry",
]
