"""Models module initialization"""

from simplehttp.models.request import HttpMethod, Request
from simplehttp.models.response import (
    SAVED_TO_FILE,
    RawResponse,
    RequestResult,
    Response,
)

__all__ = [
    "HttpMethod",
    "Request",
    "Response",
    "RawResponse",
    "RequestResult",
    "SAVED_TO_FILE",
]
