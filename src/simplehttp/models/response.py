"""Response models"""

from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, NamedTuple, Optional, Union


class _SavedToFile:
    """Sentinel body for responses streamed to a file"""

    _instance: Optional["_SavedToFile"] = None

    def __new__(cls) -> "_SavedToFile":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SAVED_TO_FILE"

    def __bool__(self) -> bool:
        return True


SAVED_TO_FILE = _SavedToFile()


class RawResponse(NamedTuple):
    """Reply as handed back by the runtime"""
    status: int
    reason: Optional[str]
    headers: Any
    body: Any


@dataclass
class Response:
    """HTTP response record"""
    status: Optional[int] = None
    status_line: Optional[str] = None
    headers: Any = field(default_factory=list)
    body: Union[str, bytes, _SavedToFile, None] = None
    profile: Optional[str] = None

    @property
    def saved_to_file(self) -> bool:
        """Whether the body was written to the ``stream`` target"""
        return self.body is SAVED_TO_FILE


@dataclass
class RequestResult:
    """
    Outcome of a request

    Exactly one of ``response``, ``error`` or ``ref`` is set. ``error``
    is the runtime's transport exception, untouched. ``ref`` is the
    future of an asynchronous (``sync=False``) request.
    """
    response: Optional[Response] = None
    error: Optional[BaseException] = None
    ref: Optional[Future] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Response:
        """Return the response or raise the stored transport error"""
        if self.error is not None:
            raise self.error
        if self.response is None:
            raise ValueError("Asynchronous result has no response; use ref")
        return self.response
