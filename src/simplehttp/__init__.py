"""
SimpleHttp: a small HTTP client over requests

Main entry point. The module-level functions share one lazily created
client and its runtime.

Example:
    >>> import simplehttp
    >>> result = simplehttp.get("https://example.com", headers={"Accept": "text/html"})
    >>> result.response.status
    200
"""

import threading
from typing import Any, Optional, Union

from simplehttp.client import SimpleHttp, SessionRuntime, DEFAULT_PROFILE
from simplehttp.builder import RequestBuilder
from simplehttp.exceptions import (
    SimpleHttpError,
    ErrorCategory,
    ValidationError,
    InvalidArgumentsError,
    ProfileError,
    InternalError,
    ConfigError,
)

# Configuration
from simplehttp.config import (
    ClientConfig,
    ConfigLoader,
    ENV_VAR_MAPPING,
    ConfigDefaults,
)

# Models
from simplehttp.models import (
    HttpMethod,
    Request,
    Response,
    RawResponse,
    RequestResult,
    SAVED_TO_FILE,
)

__version__ = "0.5.1"

_default_client: Optional[SimpleHttp] = None
_default_lock = threading.Lock()


def default_client() -> SimpleHttp:
    """Return the shared client, creating it on first use"""
    global _default_client
    with _default_lock:
        if _default_client is None:
            _default_client = SimpleHttp()
        return _default_client


def request(
    method: Union[HttpMethod, str],
    url: str,
    options: Any = None,
    **kwargs: Any,
) -> RequestResult:
    """Issue a request through the shared client"""
    return default_client().request(method, url, options, **kwargs)


def get(url: str, options: Any = None, **kwargs: Any) -> RequestResult:
    return default_client().get(url, options, **kwargs)


def post(url: str, options: Any = None, **kwargs: Any) -> RequestResult:
    return default_client().post(url, options, **kwargs)


def delete(url: str, options: Any = None, **kwargs: Any) -> RequestResult:
    return default_client().delete(url, options, **kwargs)


def put(url: str, options: Any = None, **kwargs: Any) -> RequestResult:
    return default_client().put(url, options, **kwargs)


def options(url: str, options: Any = None, **kwargs: Any) -> RequestResult:
    return default_client().options(url, options, **kwargs)


def head(url: str, options: Any = None, **kwargs: Any) -> RequestResult:
    return default_client().head(url, options, **kwargs)


def patch(url: str, options: Any = None, **kwargs: Any) -> RequestResult:
    return default_client().patch(url, options, **kwargs)


def trace(url: str, options: Any = None, **kwargs: Any) -> RequestResult:
    return default_client().trace(url, options, **kwargs)


def close(target: Union[str, Response, None]) -> bool:
    """Stop a connection profile of the shared client"""
    return default_client().close(target)


def shutdown() -> None:
    """Stop every profile of the shared client, the default one included"""
    with _default_lock:
        client = _default_client
    if client is not None:
        client.shutdown()


__all__ = [
    # Client
    "SimpleHttp",
    "SessionRuntime",
    "RequestBuilder",
    "DEFAULT_PROFILE",
    "default_client",
    # Module-level API
    "request",
    "get",
    "post",
    "delete",
    "put",
    "options",
    "head",
    "patch",
    "trace",
    "close",
    "shutdown",
    # Exceptions
    "SimpleHttpError",
    "ErrorCategory",
    "ValidationError",
    "InvalidArgumentsError",
    "ProfileError",
    "InternalError",
    "ConfigError",
    # Configuration
    "ClientConfig",
    "ConfigLoader",
    "ENV_VAR_MAPPING",
    "ConfigDefaults",
    # Models
    "HttpMethod",
    "Request",
    "Response",
    "RawResponse",
    "RequestResult",
    "SAVED_TO_FILE",
]
