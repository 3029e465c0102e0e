"""
HTTP runtime backed by requests
Owns the named connection profiles (one requests.Session each), applies
their settings and dispatches requests through them
"""

import ipaddress
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from http.cookiejar import DefaultCookiePolicy
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple, Union
from urllib.parse import urlsplit

import requests
from requests.adapters import HTTPAdapter
from requests.auth import HTTPProxyAuth

from simplehttp.models import SAVED_TO_FILE, RawResponse


logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "default"

# Pool sizes used until max_sessions / max_keep_alive_length say otherwise
DEFAULT_POOL_CONNECTIONS = 10
DEFAULT_POOL_MAXSIZE = 10

STREAM_CHUNK_SIZE = 64 * 1024

COOKIE_MODES = ("enabled", "disabled", "verify")
IP_FAMILIES = ("inet", "inet6", "inet6fb4", "local")
VERBOSE_LEVELS = (False, "false", "verbose", "debug", "trace")
BODY_FORMATS = ("string", "binary")
HTTP_VERSIONS = ("HTTP/1.1",)

SocketOption = Tuple[int, int, Any]


class ProfileAdapter(HTTPAdapter):
    """HTTPAdapter that hands a bind address and socket options to urllib3"""

    def __init__(
        self,
        source_address: Optional[Tuple[str, int]] = None,
        socket_options: Optional[List[SocketOption]] = None,
        **kwargs: Any,
    ) -> None:
        # init_poolmanager runs inside HTTPAdapter.__init__
        self._source_address = source_address
        self._socket_options = socket_options
        super().__init__(**kwargs)

    def init_poolmanager(self, connections, maxsize, block=False, **pool_kwargs):
        if self._source_address is not None:
            pool_kwargs["source_address"] = self._source_address
        if self._socket_options is not None:
            pool_kwargs["socket_options"] = self._socket_options
        super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)


@dataclass
class Profile:
    """A named, independently configured session"""
    name: str
    session: requests.Session
    settings: Dict[str, Any] = field(default_factory=dict)
    proxies: Dict[str, str] = field(default_factory=dict)
    pool_connections: int = DEFAULT_POOL_CONNECTIONS
    pool_maxsize: int = DEFAULT_POOL_MAXSIZE
    source_address: Optional[Tuple[str, int]] = None
    socket_options: Optional[List[SocketOption]] = None

    def mount(self) -> None:
        """(Re)mount the connection pool adapter with the current settings"""
        adapter = ProfileAdapter(
            source_address=self.source_address,
            socket_options=self.socket_options,
            pool_connections=self.pool_connections,
            pool_maxsize=self.pool_maxsize,
            max_retries=0,
        )
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)


def _non_negative_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{key} must be a non-negative integer, got {value!r}")
    return value


def _positive_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{key} must be a positive integer, got {value!r}")
    return value


def _boolean(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be a boolean, got {value!r}")
    return value


def _milliseconds(key: str, value: Any) -> Optional[float]:
    """Convert a millisecond timeout (or "infinity") to seconds"""
    if value == "infinity":
        return None
    return _non_negative_int(key, value) / 1000.0


def _socket_options(key: str, value: Any) -> List[SocketOption]:
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{key} must be a list of (level, option, value)")
    result = []
    for item in value:
        if not isinstance(item, (list, tuple)) or len(item) != 3:
            raise ValueError(f"{key} entries must be (level, option, value), got {item!r}")
        result.append(tuple(item))
    return result


def _proxy_url(key: str, value: Any) -> Tuple[str, Optional[str]]:
    try:
        (host, port), no_proxy = value
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be ((host, port), no_proxy_list), got {value!r}") from None
    if not isinstance(host, str) or not host:
        raise ValueError(f"{key} host must be a non-empty string")
    _positive_int(f"{key} port", port)
    if isinstance(no_proxy, (list, tuple)):
        no_proxy = ",".join(no_proxy) if no_proxy else None
    return f"http://{host}:{port}", no_proxy


class SessionRuntime:
    """
    requests-backed HTTP runtime with named connection profiles

    Profiles are started on demand and live until stopped or until
    ``shutdown()``. Asynchronous requests run on a thread pool.

    Example:
        >>> runtime = SessionRuntime()
        >>> runtime.start("crawler")
        >>> runtime.set_options("crawler", {"cookies": "disabled"})
        >>> reply = runtime.request("GET", "https://example.com", [], None, None, {}, {}, "crawler")
    """

    def __init__(self, max_workers: int = 4) -> None:
        self._max_workers = max_workers
        self._profiles: Dict[str, Profile] = {}
        self._lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        # Profiles with verbose on, and the urllib3 level to restore after them
        self._verbose: Set[str] = set()
        self._urllib3_level: Optional[int] = None

    # -- profiles -----------------------------------------------------------

    def start(self, name: str) -> Profile:
        """
        Start a profile; an already started profile is returned as is

        Raises:
            ValueError: If the profile name is not a non-empty string
        """
        if not isinstance(name, str) or not name:
            raise ValueError(f"Invalid profile name: {name!r}")

        with self._lock:
            profile = self._profiles.get(name)
            if profile is None:
                profile = Profile(name=name, session=requests.Session())
                profile.mount()
                self._profiles[name] = profile
                logger.debug("Started profile %s", name)
            return profile

    def stop(self, name: str) -> bool:
        """Stop a profile. Returns False if it was not running."""
        with self._lock:
            profile = self._profiles.pop(name, None)
        if profile is None:
            return False
        self._set_verbose(name, False)
        profile.session.close()
        logger.debug("Stopped profile %s", name)
        return True

    def running(self, name: str) -> bool:
        return name in self._profiles

    def profiles(self) -> List[str]:
        return list(self._profiles)

    def get(self, name: str) -> Profile:
        try:
            return self._profiles[name]
        except KeyError:
            raise ValueError(f"Profile not started: {name!r}") from None

    def shutdown(self) -> None:
        """Stop every profile and the async worker pool"""
        with self._lock:
            profiles = list(self._profiles.values())
            self._profiles.clear()
            executor, self._executor = self._executor, None
        for profile in profiles:
            self._set_verbose(profile.name, False)
            profile.session.close()
        if executor is not None:
            executor.shutdown(wait=False)
        logger.debug("Runtime shut down")

    def set_options(self, name: str, options: Mapping[str, Any]) -> None:
        """
        Apply connection-profile options

        ``cookies="verify"`` is accepted as an alias of ``"enabled"``: the
        cookie jar always checks cookie domains against the request host.
        ``socket_opts`` set here become the profile's standing socket
        options; a request's own ``socket_opts`` replace them.
        ``verbose`` turns on debug logging of the process-wide urllib3
        logger until the last verbose profile stops.

        Raises:
            ValueError: If an option is unknown, unsupported or malformed
        """
        profile = self.get(name)
        remount = False

        for key, value in options.items():
            if key in ("proxy", "https_proxy"):
                url, no_proxy = _proxy_url(key, value)
                profile.proxies["http" if key == "proxy" else "https"] = url
                if no_proxy:
                    profile.proxies["no_proxy"] = no_proxy
            elif key == "max_sessions":
                profile.pool_connections = _positive_int(key, value)
                remount = True
            elif key == "max_keep_alive_length":
                profile.pool_maxsize = _positive_int(key, value)
                remount = True
            elif key in ("keep_alive_timeout", "pipeline_timeout", "max_pipeline_length"):
                _non_negative_int(key, value)
            elif key == "cookies":
                if value not in COOKIE_MODES:
                    raise ValueError(f"cookies must be one of {COOKIE_MODES}, got {value!r}")
                if value == "disabled":
                    profile.session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
                else:
                    profile.session.cookies.set_policy(DefaultCookiePolicy())
            elif key == "ipfamily":
                if value not in IP_FAMILIES:
                    raise ValueError(f"ipfamily must be one of {IP_FAMILIES}, got {value!r}")
            elif key == "ip":
                if not isinstance(value, str):
                    raise ValueError(f"ip must be an address string, got {value!r}")
                port = profile.source_address[1] if profile.source_address else 0
                profile.source_address = (value, port)
                remount = True
            elif key == "port":
                port = _non_negative_int(key, value)
                if port > 65535:
                    raise ValueError(f"port out of range: {port}")
                ip = profile.source_address[0] if profile.source_address else ""
                profile.source_address = (ip, port)
                remount = True
            elif key == "socket_opts":
                profile.socket_options = _socket_options(key, value)
                remount = True
            elif key == "verbose":
                if value not in VERBOSE_LEVELS:
                    raise ValueError(f"verbose must be one of {VERBOSE_LEVELS}, got {value!r}")
                self._set_verbose(name, value not in (False, "false"))
            elif key == "unix_socket":
                raise ValueError("unix_socket is not supported by this runtime")
            else:
                raise ValueError(f"Unknown profile option: {key!r}")

            profile.settings[key] = value

        if remount:
            profile.mount()

    def _set_verbose(self, name: str, enabled: bool) -> None:
        """
        Turn urllib3 debug logging on or off for a profile

        The urllib3 logger is process-wide: it stays at DEBUG while any
        profile is verbose and gets its previous level back afterwards.
        """
        urllib3_logger = logging.getLogger("urllib3")
        with self._lock:
            if enabled:
                if not self._verbose:
                    self._urllib3_level = urllib3_logger.level
                self._verbose.add(name)
                urllib3_logger.setLevel(logging.DEBUG)
            elif name in self._verbose:
                self._verbose.discard(name)
                if not self._verbose and self._urllib3_level is not None:
                    urllib3_logger.setLevel(self._urllib3_level)
                    self._urllib3_level = None

    # -- requests -----------------------------------------------------------

    def transport_kwargs(self, http_options: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Translate transport options into requests keyword arguments

        Raises:
            ValueError: If an option is unknown or malformed
        """
        kwargs: Dict[str, Any] = {}
        timeout: Optional[float] = None
        connect_timeout: Optional[float] = None
        has_timeout = False

        for key, value in http_options.items():
            if key == "timeout":
                timeout = _milliseconds(key, value)
                has_timeout = True
            elif key == "connect_timeout":
                connect_timeout = _milliseconds(key, value)
                has_timeout = True
            elif key == "autoredirect":
                kwargs["allow_redirects"] = _boolean(key, value)
            elif key in ("ssl", "essl"):
                kwargs.update(self._ssl_kwargs(key, value))
            elif key == "proxy_auth":
                user, password = value
                kwargs["auth"] = HTTPProxyAuth(user, password)
            elif key == "version":
                if value not in HTTP_VERSIONS:
                    raise ValueError(f"Unsupported HTTP version: {value!r}")
            elif key == "relaxed":
                _boolean(key, value)
            else:
                raise ValueError(f"Unknown transport option: {key!r}")

        if has_timeout:
            if "connect_timeout" not in http_options:
                connect_timeout = timeout
            kwargs["timeout"] = (connect_timeout, timeout)

        return kwargs

    def _ssl_kwargs(self, key: str, value: Any) -> Dict[str, Any]:
        if isinstance(value, bool):
            return {"verify": value}

        try:
            if not isinstance(value, (Mapping, list, tuple)):
                raise TypeError(value)
            items = dict(value)
        except (TypeError, ValueError):
            raise ValueError(f"{key} must be a boolean or a mapping, got {value!r}") from None

        kwargs = {}
        for name, setting in items.items():
            if name not in ("verify", "cert"):
                raise ValueError(f"Unknown {key} setting: {name!r}")
            kwargs[name] = setting
        return kwargs

    def request(
        self,
        method: str,
        url: str,
        headers: List[Tuple[str, Any]],
        content_type: Optional[str],
        body: Optional[Union[str, bytes]],
        http_options: Mapping[str, Any],
        options: Mapping[str, Any],
        profile: str = DEFAULT_PROFILE,
    ) -> Union[RawResponse, Future, object]:
        """
        Dispatch a request through a started profile

        Returns:
            RawResponse, SAVED_TO_FILE when the body was streamed to a
            file, or a Future when ``sync`` is False

        Raises:
            ValueError: If a transport or request option is invalid
            requests.RequestException: On transport failure
            OSError: If the stream target cannot be written
        """
        state = self.get(profile)
        kwargs = self.transport_kwargs(http_options)
        settings = self._request_settings(options)

        if settings["socket_opts"] is not None and settings["socket_opts"] != state.socket_options:
            state.socket_options = settings["socket_opts"]
            state.mount()

        call = (state, method, url, headers, content_type, body, kwargs, settings)

        if not settings["sync"]:
            future = self._get_executor().submit(self._send, *call)
            if settings["receiver"] is not None:
                future.add_done_callback(settings["receiver"])
            return future

        return self._send(*call)

    def _request_settings(self, options: Mapping[str, Any]) -> Dict[str, Any]:
        settings: Dict[str, Any] = {
            "sync": True,
            "stream": None,
            "body_format": "string",
            "full_result": True,
            "headers_as_is": False,
            "socket_opts": None,
            "receiver": None,
            "ipv6_host_with_brackets": None,
        }

        for key, value in options.items():
            if key in ("sync", "full_result", "headers_as_is", "ipv6_host_with_brackets"):
                settings[key] = _boolean(key, value)
            elif key == "stream":
                if not isinstance(value, str) or not value:
                    raise ValueError(f"stream must be a file path, got {value!r}")
                settings[key] = value
            elif key == "body_format":
                if value not in BODY_FORMATS:
                    raise ValueError(f"body_format must be one of {BODY_FORMATS}, got {value!r}")
                settings[key] = value
            elif key == "socket_opts":
                settings[key] = _socket_options(key, value)
            elif key == "receiver":
                if not callable(value):
                    raise ValueError("receiver must be callable")
                settings[key] = value
            else:
                raise ValueError(f"Unknown request option: {key!r}")

        return settings

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix="simplehttp",
                )
            return self._executor

    def _send(
        self,
        state: Profile,
        method: str,
        url: str,
        headers: List[Tuple[str, Any]],
        content_type: Optional[str],
        body: Optional[Union[str, bytes]],
        kwargs: Dict[str, Any],
        settings: Dict[str, Any],
    ) -> Union[RawResponse, object]:
        request_headers = self._request_headers(url, headers, content_type, settings)

        if isinstance(body, str):
            body = body.encode("utf-8")

        response = state.session.request(
            method,
            url,
            headers=request_headers,
            data=body,
            proxies=dict(state.proxies) or None,
            stream=settings["stream"] is not None,
            **kwargs,
        )

        try:
            if settings["stream"] is not None and response.status_code == 200:
                with open(settings["stream"], "wb") as f:
                    for chunk in response.iter_content(chunk_size=STREAM_CHUNK_SIZE):
                        f.write(chunk)
                return SAVED_TO_FILE

            if settings["body_format"] == "binary":
                response_body: Union[str, bytes] = response.content
            else:
                response_body = response.text

            if not settings["full_result"]:
                return RawResponse(response.status_code, None, [], response_body)

            if settings["headers_as_is"]:
                response_headers = list(response.headers.items())
            else:
                response_headers = [(k.lower(), v) for k, v in response.headers.items()]

            return RawResponse(
                response.status_code, response.reason, response_headers, response_body
            )
        finally:
            response.close()

    def _request_headers(
        self,
        url: str,
        headers: List[Tuple[str, Any]],
        content_type: Optional[str],
        settings: Dict[str, Any],
    ) -> Dict[str, str]:
        result: Dict[str, str] = {}
        for name, value in headers:
            value = str(value)
            result[name] = f"{result[name]}, {value}" if name in result else value

        if content_type is not None:
            result["Content-Type"] = content_type

        brackets = settings["ipv6_host_with_brackets"]
        if brackets is not None and "Host" not in result:
            host_header = self._ipv6_host_header(url, brackets)
            if host_header is not None:
                result["Host"] = host_header

        return result

    def _ipv6_host_header(self, url: str, brackets: bool) -> Optional[str]:
        parts = urlsplit(url)
        try:
            address = ipaddress.ip_address(parts.hostname or "")
        except ValueError:
            return None
        if address.version != 6:
            return None
        host = f"[{address.compressed}]" if brackets else address.compressed
        return f"{host}:{parts.port}" if parts.port else host
