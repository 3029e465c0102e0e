"""
HTTP client front end
Builds requests from flat option lists, dispatches them through the
runtime and normalizes the replies
"""

import logging
from concurrent.futures import Future
from pprint import pformat
from typing import Any, Dict, Optional, Union

import requests
from requests.structures import CaseInsensitiveDict

from simplehttp.builder import RequestBuilder
from simplehttp.client.runtime import SessionRuntime
from simplehttp.config.client_config import ClientConfig
from simplehttp.exceptions import (
    InternalError,
    ProfileError,
    ValidationError,
)
from simplehttp.models import (
    SAVED_TO_FILE,
    HttpMethod,
    RawResponse,
    Request,
    RequestResult,
    Response,
)
from simplehttp import classifier


class SimpleHttp:
    """
    HTTP client over a requests-backed runtime

    Features:
    - One call per HTTP verb plus a generic ``request``
    - Options given as a mapping, ordered pairs or keyword arguments
    - Unrecognized options rejected before anything is sent
    - Named connection profiles with their own pool, proxies and cookies
    - Transport failures returned, not raised

    Example:
        >>> client = SimpleHttp()
        >>> result = client.get("https://example.com", query_params={"q": "x"})
        >>> result.response.status
        200
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        runtime: Optional[SessionRuntime] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Create a new client

        Args:
            config: Client configuration, defaults to ``ClientConfig()``
            runtime: Runtime to dispatch through; a private one is created
                when omitted
            logger: Sink for debug output of requests and raw replies
        """
        self.config = config or ClientConfig()
        self._runtime = runtime or SessionRuntime(max_workers=self.config.max_workers)
        self._logger = logger or logging.getLogger(__name__)
        self._builder = RequestBuilder()

    @property
    def runtime(self) -> SessionRuntime:
        return self._runtime

    def build(
        self,
        method: Union[HttpMethod, str],
        url: str,
        options: Optional[classifier.PairsOrMapping] = None,
        **kwargs: Any,
    ) -> Request:
        """
        Build the request description without sending it

        Configuration defaults fill in ``debug``, ``headers_format`` and
        the timeouts when the caller left them out.
        """
        args = classifier.merge(classifier.to_pairs(options), kwargs.items())
        request = self._builder.build(method, url, args)

        if self.config.debug:
            request.debug = True
        if request.headers_format is None:
            request.headers_format = self.config.headers_format
        for key in ("timeout", "connect_timeout"):
            default = getattr(self.config, key)
            if default is not None and key not in request.http_options:
                request.http_options[key] = default

        return request

    def request(
        self,
        method: Union[HttpMethod, str],
        url: str,
        options: Optional[classifier.PairsOrMapping] = None,
        **kwargs: Any,
    ) -> RequestResult:
        """
        Issue an HTTP request

        Args:
            method: HTTP verb
            url: Target URL
            options: Mapping or ordered (key, value) pairs
            **kwargs: More options; they override entries of ``options``

        Returns:
            RequestResult holding the response, the transport error or,
            for ``sync=False``, the runtime's future

        Raises:
            ValidationError: On invalid URL, options or option values
            InvalidArgumentsError: On unrecognized option keys
            ProfileError: If the connection profile cannot be started
            InternalError: If the runtime returns a malformed reply
        """
        request = self.build(method, url, options, **kwargs)

        if request.debug:
            self._logger.info("Request: %s", pformat(request))

        profile = request.profile if request.profile is not None else self.config.default_profile
        self._init_profile(profile, request.profile_options)
        request.profile = profile

        return self._execute(request)

    def get(
        self,
        url: str,
        options: Optional[classifier.PairsOrMapping] = None,
        **kwargs: Any,
    ) -> RequestResult:
        """Perform GET request"""
        return self.request(HttpMethod.GET, url, options, **kwargs)

    def post(
        self,
        url: str,
        options: Optional[classifier.PairsOrMapping] = None,
        **kwargs: Any,
    ) -> RequestResult:
        """Perform POST request"""
        return self.request(HttpMethod.POST, url, options, **kwargs)

    def delete(
        self,
        url: str,
        options: Optional[classifier.PairsOrMapping] = None,
        **kwargs: Any,
    ) -> RequestResult:
        """Perform DELETE request"""
        return self.request(HttpMethod.DELETE, url, options, **kwargs)

    def put(
        self,
        url: str,
        options: Optional[classifier.PairsOrMapping] = None,
        **kwargs: Any,
    ) -> RequestResult:
        """Perform PUT request"""
        return self.request(HttpMethod.PUT, url, options, **kwargs)

    def options(
        self,
        url: str,
        options: Optional[classifier.PairsOrMapping] = None,
        **kwargs: Any,
    ) -> RequestResult:
        """Perform OPTIONS request"""
        return self.request(HttpMethod.OPTIONS, url, options, **kwargs)

    def head(
        self,
        url: str,
        options: Optional[classifier.PairsOrMapping] = None,
        **kwargs: Any,
    ) -> RequestResult:
        """Perform HEAD request"""
        return self.request(HttpMethod.HEAD, url, options, **kwargs)

    def patch(
        self,
        url: str,
        options: Optional[classifier.PairsOrMapping] = None,
        **kwargs: Any,
    ) -> RequestResult:
        """Perform PATCH request"""
        return self.request(HttpMethod.PATCH, url, options, **kwargs)

    def trace(
        self,
        url: str,
        options: Optional[classifier.PairsOrMapping] = None,
        **kwargs: Any,
    ) -> RequestResult:
        """Perform TRACE request"""
        return self.request(HttpMethod.TRACE, url, options, **kwargs)

    def close(self, target: Union[str, Response, None]) -> bool:
        """
        Stop a connection profile

        Args:
            target: Profile name, a Response (closes the profile it was
                issued from) or None (no-op)

        Returns:
            True when the profile was stopped or there was nothing to do,
            False when the named profile was not running

        Raises:
            ValidationError: For the default profile; use ``shutdown()``
        """
        if target is None:
            return True

        if isinstance(target, Response):
            return self.close(target.profile)

        if target == self.config.default_profile:
            raise ValidationError(
                "To stop the default profile use shutdown()", field="profile"
            )

        return self._runtime.stop(target)

    def shutdown(self) -> None:
        """Stop every profile, the default one included"""
        self._runtime.shutdown()

    def _init_profile(self, profile: str, options: Dict[str, Any]) -> None:
        """Start the profile if needed and apply its options"""
        try:
            self._runtime.start(profile)
        except ValueError as e:
            raise ProfileError(
                f"Cannot start profile {profile!r}: {e}", profile=profile, cause=e
            ) from e

        if not options:
            return

        try:
            self._runtime.set_options(profile, options)
        except ValueError as e:
            raise ValidationError(
                f"Error setting profile options {options!r}: {e}", cause=e
            ) from e

    def _execute(self, request: Request) -> RequestResult:
        try:
            reply = self._runtime.request(
                request.method.value,
                request.url,
                request.headers,
                request.content_type,
                request.body,
                request.http_options,
                request.options,
                request.profile,
            )
        except (requests.RequestException, OSError) as e:
            # OSError: the stream target could not be written
            if request.debug:
                self._logger.info("Response: %s", pformat(e))
            return RequestResult(error=e)
        except ValueError as e:
            raise ValidationError(f"Invalid request options: {e}", cause=e) from e

        if request.debug:
            self._logger.info("Response: %s", pformat(reply))

        if reply is SAVED_TO_FILE:
            return RequestResult(
                response=Response(status=200, body=SAVED_TO_FILE, profile=request.profile)
            )

        if isinstance(reply, RawResponse):
            return RequestResult(
                response=Response(
                    status=reply.status,
                    status_line=reply.reason,
                    headers=self._format_headers(reply.headers, request.headers_format),
                    body=self._cast_body(reply.body),
                    profile=request.profile,
                )
            )

        if isinstance(reply, Future):
            return RequestResult(ref=reply)

        raise InternalError(
            f"Unexpected reply from runtime: {type(reply).__name__}",
            details={"reply": repr(reply)},
        )

    def _format_headers(self, headers: Any, headers_format: Optional[str]) -> Any:
        if headers_format == "binary":
            return [(self._text(k), self._text(v)) for k, v in headers]
        if headers_format == "map":
            return CaseInsensitiveDict(
                [(self._text(k), self._text(v)) for k, v in headers]
            )
        return headers

    def _text(self, value: Any) -> str:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode("latin-1")
        return str(value)

    def _cast_body(self, body: Any) -> Union[str, bytes]:
        if isinstance(body, (str, bytes)):
            return body
        raise InternalError(
            f"Unexpected response body type: {type(body).__name__}",
            details={"body": repr(body)},
        )

    def __enter__(self) -> "SimpleHttp":
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit"""
        self.shutdown()
