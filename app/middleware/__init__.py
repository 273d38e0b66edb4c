from .logging_middleware import QUIET_PATHS, REQUEST_ID_HEADER, RequestLoggingMiddleware

__all__ = [
    "QUIET_PATHS",
    "REQUEST_ID_HEADER",
    "RequestLoggingMiddleware",
]
