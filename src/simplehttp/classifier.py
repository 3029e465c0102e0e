"""
Option classification
Allow-lists of recognized option keys and helpers for pulling them out
of a mapping or an ordered list of (key, value) pairs
"""

from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

from simplehttp.exceptions import ValidationError


Pairs = List[Tuple[Any, Any]]
PairsOrMapping = Union[Pairs, Mapping[Any, Any]]


# Transport-level options, passed with every request
HTTP_OPTIONS: FrozenSet[str] = frozenset([
    "timeout",
    "connect_timeout",
    "autoredirect",
    "ssl",
    "essl",
    "proxy_auth",
    "version",
    "relaxed",
])

# Per-call behaviour flags
REQUEST_OPTIONS: FrozenSet[str] = frozenset([
    "sync",
    "stream",
    "body_format",
    "full_result",
    "headers_as_is",
    "socket_opts",
    "receiver",
    "ipv6_host_with_brackets",
])

# Settings of the connection profile the request is sent through.
# socket_opts is listed here as well, but REQUEST_OPTIONS claims it first;
# SessionRuntime.set_options still takes it as a standing profile setting.
PROFILE_OPTIONS: FrozenSet[str] = frozenset([
    "proxy",
    "https_proxy",
    "max_sessions",
    "max_keep_alive_length",
    "keep_alive_timeout",
    "max_pipeline_length",
    "pipeline_timeout",
    "cookies",
    "ipfamily",
    "ip",
    "port",
    "socket_opts",
    "verbose",
    "unix_socket",
])

HEADERS_FORMATS = (None, "binary", "map")


def to_pairs(value: Optional[PairsOrMapping]) -> Pairs:
    """
    Normalize a mapping or an iterable of pairs into a list of pairs

    Raises:
        ValidationError: If an element is not a (key, value) pair
    """
    if value is None:
        return []

    if isinstance(value, Mapping):
        return list(value.items())

    if isinstance(value, (str, bytes)):
        raise ValidationError(
            f"Expected a mapping or a list of pairs, got {value!r}"
        )

    pairs = []
    for item in value:
        if not isinstance(item, (tuple, list)) or len(item) != 2:
            raise ValidationError(
                f"Expected a (key, value) pair, got {item!r}"
            )
        pairs.append((item[0], item[1]))
    return pairs


def is_pairs_or_mapping(value: Any) -> bool:
    """Whether value is a mapping or a list/tuple of 2-item pairs"""
    if isinstance(value, Mapping):
        return True
    if not isinstance(value, (list, tuple)):
        return False
    return all(
        isinstance(item, (tuple, list)) and len(item) == 2 for item in value
    )


def pop(container: PairsOrMapping, key: Any, default: Any = None) -> Tuple[Any, PairsOrMapping]:
    """
    Pop the first entry for ``key`` from a mapping or a list of pairs

    The container is not modified; a new container without the entry is
    returned together with the popped value.

    Example:
        >>> pop([("a", 1), ("b", 2)], "b")
        (2, [('a', 1)])
        >>> pop([("a", 1), ("b", 2)], "c")
        (None, [('a', 1), ('b', 2)])
    """
    if isinstance(container, Mapping):
        remaining = dict(container)
        value = remaining.pop(key, default)
        return value, remaining

    rest: Pairs = []
    value = default
    found = False
    for k, v in container:
        if not found and k == key:
            value = v
            found = True
        else:
            rest.append((k, v))
    return value, rest


def pop_all(container: PairsOrMapping, key: Any, default: Any = None) -> Tuple[Any, PairsOrMapping]:
    """
    Like ``pop``, but drops every entry for ``key``; the first value wins

    Example:
        >>> pop_all([("debug", True), ("a", 1), ("debug", False)], "debug")
        (True, [('a', 1)])
    """
    if isinstance(container, Mapping):
        return pop(container, key, default)

    value, rest = pop(container, key, default)
    return value, [(k, v) for k, v in rest if k != key]


def merge(first: Iterable[Tuple[Any, Any]], second: Iterable[Tuple[Any, Any]]) -> Pairs:
    """
    Merge two lists of pairs, entries of ``second`` replacing those of
    ``first`` with the same key

    Example:
        >>> merge([("a", 1), ("b", 2)], [("b", 3)])
        [('a', 1), ('b', 3)]
    """
    second = list(second)
    overridden = {k for k, _ in second}
    return [(k, v) for k, v in first if k not in overridden] + second


def _text(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


def option_value(key: str, value: Any) -> Any:
    """Normalize the value of a classified option"""
    if value is None:
        return None

    if key in ("stream", "body_format", "unix_socket", "ip"):
        return _text(value)

    if key == "proxy_auth":
        if not isinstance(value, (tuple, list)) or len(value) != 2:
            raise ValidationError(
                "proxy_auth must be a (user, password) pair",
                field="proxy_auth",
            )
        return (_text(value[0]), _text(value[1]))

    if key in ("proxy", "https_proxy"):
        try:
            (host, port), no_proxy = value
        except (TypeError, ValueError) as e:
            raise ValidationError(
                f"{key} must be ((host, port), no_proxy_list)",
                field=key,
                cause=e,
            ) from e
        if isinstance(no_proxy, (list, tuple)):
            no_proxy = [_text(item) for item in no_proxy]
        else:
            no_proxy = _text(no_proxy)
        return ((_text(host), port), no_proxy)

    return value


def filter_options(keys: FrozenSet[str], args: Pairs) -> Tuple[Dict[str, Any], Pairs]:
    """
    Split ``args`` into the options whose key is in ``keys`` and the rest

    Options with a ``None`` value are dropped from the result.

    Returns:
        Tuple of (classified options, remaining pairs)
    """
    options: Dict[str, Any] = {}
    rest: Pairs = []

    for key, value in args:
        if key in keys:
            normalized = option_value(key, value)
            if normalized is not None:
                options[key] = normalized
        else:
            rest.append((key, value))

    return options, rest
