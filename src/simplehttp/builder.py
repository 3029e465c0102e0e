"""
Request builder
Turns a method, a URL and a flat collection of options into a Request
"""

import logging
from typing import Any, Optional, Union
from urllib.parse import urlencode

from simplehttp.exceptions import InvalidArgumentsError, ValidationError
from simplehttp.models import HttpMethod, Request
from simplehttp import classifier


logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class RequestBuilder:
    """
    Classifies options and builds the Request description

    Each step pops every entry of the keys it understands, keeping the
    first value; whatever is left at the end (apart from ``debug``) is
    rejected.

    Example:
        >>> builder = RequestBuilder()
        >>> request = builder.build("get", "http://x", {"query_params": [("a", 1)]})
        >>> request.url
        'http://x?a=1'
    """

    def build(
        self,
        method: Union[HttpMethod, str],
        url: str,
        options: Optional[classifier.PairsOrMapping] = None,
    ) -> Request:
        """
        Build a request description

        Args:
            method: HTTP verb
            url: Target URL
            options: Mapping or ordered (key, value) pairs

        Returns:
            Request ready for dispatch

        Raises:
            ValidationError: If the URL, method or an option is invalid
            InvalidArgumentsError: If unrecognized options remain
        """
        args = classifier.to_pairs(options)

        request = Request(method=self._resolve_method(method), url="")
        args = self._add_url(request, url, args)
        args = self._add_headers(request, args)
        args = self._add_http_options(request, args)
        args = self._add_options(request, args)
        args = self._add_body_or_params(request, args)
        args = self._add_profile(request, args)

        debug, args = classifier.pop_all(args, "debug")
        request.debug = bool(debug)

        if args:
            raise InvalidArgumentsError([k for k, _ in args])

        return request

    def _resolve_method(self, method: Union[HttpMethod, str]) -> HttpMethod:
        if isinstance(method, HttpMethod):
            return method
        try:
            return HttpMethod(str(method).upper())
        except ValueError as e:
            raise ValidationError(
                f"Unsupported HTTP method: {method!r}", field="method", cause=e
            ) from e

    def _add_url(self, request: Request, url: Any, args: classifier.Pairs) -> classifier.Pairs:
        if not isinstance(url, str):
            raise ValidationError("URL must be a string", field="url")

        query_params, args = classifier.pop_all(args, "query_params")

        if query_params is not None:
            if not classifier.is_pairs_or_mapping(query_params):
                raise ValidationError(
                    "query_params must be a mapping or a list of pairs",
                    field="query_params",
                )
            query = urlencode(classifier.to_pairs(query_params))
            if query:
                separator = "&" if "?" in url else "?"
                url = f"{url}{separator}{query}"

        request.url = url
        return args

    def _add_headers(self, request: Request, args: classifier.Pairs) -> classifier.Pairs:
        headers, args = classifier.pop_all(args, "headers")

        if headers is None:
            headers = []
        elif not classifier.is_pairs_or_mapping(headers):
            raise ValidationError(
                "headers must be a mapping or a list of pairs", field="headers"
            )

        content_type, headers = classifier.pop(headers, "Content-Type")
        if isinstance(content_type, str):
            request.content_type = content_type

        request.headers = [(str(name), value) for name, value in classifier.to_pairs(headers)]
        return args

    def _add_http_options(self, request: Request, args: classifier.Pairs) -> classifier.Pairs:
        request.http_options, args = classifier.filter_options(classifier.HTTP_OPTIONS, args)
        return args

    def _add_options(self, request: Request, args: classifier.Pairs) -> classifier.Pairs:
        request.options, args = classifier.filter_options(classifier.REQUEST_OPTIONS, args)

        headers_format, args = classifier.pop_all(args, "headers_format")
        if headers_format not in classifier.HEADERS_FORMATS:
            raise ValidationError(
                f"headers_format must be one of {classifier.HEADERS_FORMATS}, "
                f"got {headers_format!r}",
                field="headers_format",
            )
        request.headers_format = headers_format
        return args

    def _add_body_or_params(self, request: Request, args: classifier.Pairs) -> classifier.Pairs:
        body, args = classifier.pop_all(args, "body")
        params, args = classifier.pop_all(args, "params")

        if body is not None:
            if params is not None:
                logger.warning("Both body and params given; params ignored")
            if not isinstance(body, (str, bytes, bytearray)):
                raise ValidationError("body must be str or bytes", field="body")
            request.body = bytes(body) if isinstance(body, bytearray) else body
        elif params is not None:
            if not classifier.is_pairs_or_mapping(params):
                raise ValidationError(
                    "params must be a mapping or a list of pairs", field="params"
                )
            request.body = urlencode(classifier.to_pairs(params))
            if request.content_type is None:
                request.content_type = FORM_CONTENT_TYPE

        return args

    def _add_profile(self, request: Request, args: classifier.Pairs) -> classifier.Pairs:
        request.profile_options, args = classifier.filter_options(classifier.PROFILE_OPTIONS, args)

        profile, args = classifier.pop_all(args, "profile")
        if profile is not None and not isinstance(profile, str):
            raise ValidationError("profile must be a string", field="profile")
        request.profile = profile
        return args
