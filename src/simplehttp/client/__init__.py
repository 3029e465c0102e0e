"""
HTTP Client module for SimpleHttp
"""

from simplehttp.client.http_client import SimpleHttp
from simplehttp.client.runtime import (
    DEFAULT_PROFILE,
    Profile,
    ProfileAdapter,
    SessionRuntime,
)

__all__ = [
    "SimpleHttp",
    "SessionRuntime",
    "Profile",
    "ProfileAdapter",
    "DEFAULT_PROFILE",
]
