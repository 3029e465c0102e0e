"""Request description model"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class HttpMethod(str, Enum):
    """HTTP method types supported"""
    GET = "GET"
    POST = "POST"
    DELETE = "DELETE"
    PUT = "PUT"
    OPTIONS = "OPTIONS"
    HEAD = "HEAD"
    PATCH = "PATCH"
    TRACE = "TRACE"


@dataclass
class Request:
    """
    Normalized description of a request, ready for dispatch

    ``headers`` never contains the ``Content-Type`` entry; that one lives
    in ``content_type``. ``body`` is either the caller's explicit body or
    the encoded ``params``, never both.
    """
    method: HttpMethod
    url: str
    headers: List[Tuple[str, Any]] = field(default_factory=list)
    content_type: Optional[str] = None
    body: Optional[Union[str, bytes]] = None
    http_options: Dict[str, Any] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)
    profile_options: Dict[str, Any] = field(default_factory=dict)
    profile: Optional[str] = None
    headers_format: Optional[str] = None
    debug: bool = False
