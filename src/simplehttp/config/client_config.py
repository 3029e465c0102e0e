"""
SimpleHttp Configuration Types and Schema
Type-safe client configuration
"""

from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator


class ConfigDefaults:
    """Default configuration values"""
    DEFAULT_PROFILE = "default"
    DEBUG = False
    MAX_WORKERS = 4


# Environment variable mapping
ENV_VAR_MAPPING = {
    "SIMPLEHTTP_DEFAULT_PROFILE": "default_profile",
    "SIMPLEHTTP_DEBUG": "debug",
    "SIMPLEHTTP_HEADERS_FORMAT": "headers_format",
    "SIMPLEHTTP_TIMEOUT": "timeout",
    "SIMPLEHTTP_CONNECT_TIMEOUT": "connect_timeout",
    "SIMPLEHTTP_MAX_WORKERS": "max_workers",
}


class ClientConfig(BaseModel):
    """
    Client configuration
    Defaults applied to every request issued by a SimpleHttp client
    """

    default_profile: str = Field(
        default=ConfigDefaults.DEFAULT_PROFILE,
        description="Name of the shared profile used when no profile option is given",
        min_length=1,
    )
    debug: bool = Field(
        default=ConfigDefaults.DEBUG,
        description="Log every request and raw reply",
    )
    headers_format: Optional[str] = Field(
        default=None,
        description="Default response header format: None, 'binary' or 'map'",
    )
    timeout: Optional[Union[int, str]] = Field(
        default=None,
        description="Default request timeout in milliseconds, or 'infinity'",
    )
    connect_timeout: Optional[Union[int, str]] = Field(
        default=None,
        description="Default connect timeout in milliseconds, or 'infinity'",
    )
    max_workers: int = Field(
        default=ConfigDefaults.MAX_WORKERS,
        description="Thread pool size for asynchronous requests",
        ge=1,
        le=64,
    )

    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }

    @field_validator("headers_format")
    @classmethod
    def validate_headers_format(cls, v: Optional[str]) -> Optional[str]:
        """Validate headers_format is a known format"""
        if v is not None and v not in ("binary", "map"):
            raise ValueError("headers_format must be 'binary' or 'map'")
        return v

    @field_validator("timeout", "connect_timeout")
    @classmethod
    def validate_timeout(cls, v: Optional[Union[int, str]]) -> Optional[Union[int, str]]:
        """Validate timeouts are non-negative milliseconds or 'infinity'"""
        if v is None or v == "infinity":
            return v
        if isinstance(v, str) or v < 0:
            raise ValueError("timeout must be non-negative milliseconds or 'infinity'")
        return v
