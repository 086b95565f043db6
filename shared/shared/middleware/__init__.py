from shared.middleware.error_handler import (
    error_envelope_middleware,
    http_exception_handler,
    validation_exception_handler,
)
from shared.middleware.request_id import REQUEST_ID_HEADER, request_id_middleware

__all__ = [
    "REQUEST_ID_HEADER",
    "error_envelope_middleware",
    "http_exception_handler",
    "request_id_middleware",
    "validation_exception_handler",
]
